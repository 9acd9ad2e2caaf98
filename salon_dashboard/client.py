"""Async client for the appointments API used by the customer dashboard.
Requests carry the caller's session cookies and forward refreshed ones back.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .exceptions import DeletionFailed
from .session import SessionContext
from .settings import get_settings

LOG = logging.getLogger(__name__)

CANCEL_FAILED_MESSAGE = "Randevu iptal edilemedi"


def _client(session: SessionContext) -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        cookies=session.cookie_jar(),
        http2=True,
        timeout=settings.http_timeout,
    )


async def fetch_upcoming_appointments(session: SessionContext, take: int | None = None) -> Any:
    """Return the decoded body of ``GET /appointments?past=false&take=<n>``.

    The status code is not checked and an unparsable body decodes to ``[]``;
    callers are expected to treat anything that is not a list as empty.
    Transport errors propagate as ``httpx.HTTPError``.
    """
    take = take or get_settings().upcoming_take
    headers = {"Accept": "application/json", "Cache-Control": "no-store"}
    async with _client(session) as client:
        resp = await client.get("/appointments", params={"past": "false", "take": take}, headers=headers)
    session.forward(resp)
    try:
        return resp.json()
    except ValueError:
        LOG.warning("appointments response (status %s) is not JSON", resp.status_code)
        return []


async def delete_appointment(session: SessionContext, appointment_id: str) -> None:
    """Cancel an appointment; any non-2xx answer raises ``DeletionFailed``."""
    try:
        async with _client(session) as client:
            resp = await client.delete(f"/appointments/{quote(appointment_id, safe='')}")
    except httpx.RequestError as exc:
        LOG.error("Appointment cancel request failed: %s", exc)
        raise DeletionFailed(CANCEL_FAILED_MESSAGE, cause=exc) from exc
    session.forward(resp)
    if resp.is_success:
        return

    message = CANCEL_FAILED_MESSAGE
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
        message = data["error"]
    LOG.error("Appointment cancel error (%s): %s", resp.status_code, message)
    raise DeletionFailed(message, status_code=resp.status_code)
