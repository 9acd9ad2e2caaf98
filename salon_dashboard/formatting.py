"""tr-TR rendering for dates and clock times shown on the dashboard."""
from __future__ import annotations

from datetime import date, datetime, tzinfo

TR_MONTHS = (
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
)


def format_long_date(value: date) -> str:
    """Return e.g. ``1 Mayıs 2024`` (numeric day, long month, numeric year)."""
    return f"{value.day} {TR_MONTHS[value.month - 1]} {value.year}"


def format_short_time(value: datetime, tz: tzinfo | None = None) -> str:
    """Return the two-digit 24-hour clock time of ``value`` in ``tz``."""
    if tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    return value.strftime("%H:%M")
