from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    supabase_url: str | None
    supabase_anon_key: str | None
    display_timezone: str
    upcoming_take: int
    http_timeout: float


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        api_base_url=os.getenv("DASHBOARD_API_BASE_URL", "http://localhost:3000/api").rstrip("/"),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY"),
        display_timezone=os.getenv("DISPLAY_TIMEZONE", "Europe/Istanbul"),
        upcoming_take=int(os.getenv("UPCOMING_TAKE", "5")),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "15")),
    )
