"""Turn the untrusted ``GET /appointments`` payload into display-ready views.

The payload is never trusted: every field is extracted on its own with an
explicit fallback so that one malformed record cannot break the whole list.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, tzinfo
from typing import Any, List
from zoneinfo import ZoneInfo

from dateutil import parser
from dateutil.relativedelta import relativedelta

from .formatting import format_long_date, format_short_time
from .models import TIME_PLACEHOLDER, UNKNOWN_ID, UNSPECIFIED, AppointmentView
from .settings import get_settings

LOG = logging.getLogger(__name__)

_TIME_SEPARATOR = re.compile(r"[T ]")


def _display_tz() -> tzinfo:
    return ZoneInfo(get_settings().display_timezone)


def _calendar_date(value: Any, tz: tzinfo) -> date:
    """Rebuild the stored calendar day from its YYYY-MM-DD prefix.

    Converting the full timestamp to local time would move late-evening
    values with a UTC offset onto the neighbouring day. Out-of-range month
    or day values roll over (2024-02-30 is 1 March).
    """
    if not value:
        return datetime.now(tz).date()
    try:
        prefix = _TIME_SEPARATOR.split(str(value), maxsplit=1)[0]
        year, month, day = (int(part) for part in prefix.split("-"))
        return date(year, 1, 1) + relativedelta(months=month - 1, days=day - 1)
    except (ValueError, OverflowError):
        LOG.debug("unparseable appointment date %r, using today", value)
        return datetime.now(tz).date()


def _clock_time(value: Any, tz: tzinfo) -> str:
    if not value or not isinstance(value, str):
        return TIME_PLACEHOLDER
    try:
        return format_short_time(parser.isoparse(value), tz)
    except (ValueError, OverflowError):
        LOG.debug("unparseable appointment time %r", value)
        return TIME_PLACEHOLDER


def _staff_name(employee: Any) -> str:
    if not isinstance(employee, Mapping):
        return UNSPECIFIED
    first = employee.get("firstName") or ""
    last = employee.get("lastName") or ""
    return f"{first} {last}".strip() or UNSPECIFIED


def build_view(record: Any, tz: tzinfo) -> AppointmentView:
    """Normalize a single raw record; non-mapping records yield all placeholders."""
    if not isinstance(record, Mapping):
        LOG.debug("appointment record is not an object: %r", record)
        record = {}
    return AppointmentView(
        id=str(record.get("id") or UNKNOWN_ID),
        display_date=format_long_date(_calendar_date(record.get("date"), tz)),
        display_time=_clock_time(record.get("time"), tz),
        staff_name=_staff_name(record.get("employee")),
        service_name=str(record.get("serviceName") or UNSPECIFIED),
    )


def build_appointment_views(raw: Any, tz: tzinfo | None = None) -> List[AppointmentView]:
    """Return views for ``raw`` in input order; anything but a list gives ``[]``."""
    if not isinstance(raw, list):
        if raw is not None:
            LOG.warning("appointments payload is not a list (got %s)", type(raw).__name__)
        return []
    tz = tz or _display_tz()
    return [build_view(record, tz) for record in raw if record is not None]
