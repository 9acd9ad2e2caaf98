import pytest

from salon_dashboard.settings import get_settings

API_ORIGIN = "http://dashboard.test"


@pytest.fixture(autouse=True)
def dashboard_env(monkeypatch):
    monkeypatch.setenv("DASHBOARD_API_BASE_URL", f"{API_ORIGIN}/api")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.test")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Europe/Istanbul")
    monkeypatch.setenv("UPCOMING_TAKE", "5")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
