"""Cookie-backed Supabase session plumbing for server-side requests.

A ``SessionContext`` wraps whatever holds the caller's cookies (an inbound
Starlette request, or a plain dict in scripts) and offers get/set/forward
semantics: outbound httpx clients read cookies from it, and any refreshed
``Set-Cookie`` headers coming back are written through to the caller.
"""
from __future__ import annotations

import base64
import json
import logging
import re
from http.cookies import CookieError, SimpleCookie
from typing import Any, Dict, Iterable, List, Optional

import httpx
from fastapi import Request, Response
from pydantic import BaseModel, Field

from .exceptions import CookieWriteError, SessionConfigError
from .settings import Settings, get_settings

LOG = logging.getLogger(__name__)

_AUTH_COOKIE = re.compile(r"^sb-.+-auth-token(?:\.(\d+))?$")
_BASE64_PREFIX = "base64-"
_SAMESITE_VALUES = ("lax", "strict", "none")


class SessionCookie(BaseModel):
    name: str
    value: str
    options: Dict[str, Any] = Field(default_factory=dict)


class MemoryCookieStore:
    """Dict-backed store; ``read_only`` mimics a render-only context."""

    def __init__(self, cookies: Optional[Dict[str, str]] = None, *, read_only: bool = False) -> None:
        self.cookies: Dict[str, str] = dict(cookies or {})
        self.options: Dict[str, Dict[str, Any]] = {}
        self.read_only = read_only

    def get_all(self) -> List[SessionCookie]:
        return [SessionCookie(name=name, value=value) for name, value in self.cookies.items()]

    def set(self, name: str, value: str, options: Dict[str, Any]) -> None:
        if self.read_only:
            raise CookieWriteError("cookie store is read-only")
        self.cookies[name] = value
        self.options[name] = options


class RequestCookieStore:
    """Cookies of an inbound request; writes go to ``response`` when one exists."""

    def __init__(self, request: Request, response: Optional[Response] = None) -> None:
        self._request = request
        self._response = response
        self._written: Dict[str, str] = {}

    def get_all(self) -> List[SessionCookie]:
        merged = {**self._request.cookies, **self._written}
        return [SessionCookie(name=name, value=value) for name, value in merged.items()]

    def set(self, name: str, value: str, options: Dict[str, Any]) -> None:
        if self._response is None:
            raise CookieWriteError("cookies can only be set while building a response")
        try:
            self._response.set_cookie(name, value, **options)
        except AssertionError as exc:
            raise CookieWriteError(f"cookie {name} has invalid options: {exc}") from exc
        self._written[name] = value


def _morsel_options(morsel: Any) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if morsel["path"]:
        options["path"] = morsel["path"]
    if morsel["domain"]:
        options["domain"] = morsel["domain"]
    if morsel["max-age"]:
        try:
            options["max_age"] = int(morsel["max-age"])
        except ValueError:
            LOG.debug("ignoring Max-Age %r of cookie %s", morsel["max-age"], morsel.key)
    if morsel["expires"]:
        options["expires"] = morsel["expires"]
    if morsel["secure"]:
        options["secure"] = True
    if morsel["httponly"]:
        options["httponly"] = True
    if str(morsel["samesite"]).lower() in _SAMESITE_VALUES:
        options["samesite"] = morsel["samesite"].lower()
    return options


def parse_set_cookie(headers: Iterable[str]) -> List[SessionCookie]:
    cookies: List[SessionCookie] = []
    for header in headers:
        jar: SimpleCookie = SimpleCookie()
        try:
            jar.load(header)
        except CookieError as exc:
            LOG.warning("Unparseable Set-Cookie header skipped: %s", exc)
            continue
        for name, morsel in jar.items():
            cookies.append(SessionCookie(name=name, value=morsel.value, options=_morsel_options(morsel)))
    return cookies


class SessionContext:
    """Per-request provider of the caller's session cookies."""

    def __init__(self, store: Any) -> None:
        self._store = store

    def get_all(self) -> List[SessionCookie]:
        return self._store.get_all()

    def cookie_jar(self) -> Dict[str, str]:
        return {cookie.name: cookie.value for cookie in self.get_all()}

    def set_all(self, cookies: Iterable[SessionCookie]) -> None:
        try:
            for cookie in cookies:
                self._store.set(cookie.name, cookie.value, cookie.options)
        except CookieWriteError as exc:
            # Render-only contexts cannot write; a later request refreshes the session.
            LOG.error("Cookie could not be set: %s", exc)

    def forward(self, response: httpx.Response) -> None:
        """Copy ``Set-Cookie`` headers of an upstream response to the caller."""
        headers = response.headers.get_list("set-cookie")
        if headers:
            self.set_all(parse_set_cookie(headers))

    def access_token(self) -> Optional[str]:
        """Return the access token held in the (possibly chunked) ``sb-*-auth-token`` cookie."""
        chunks = []
        for cookie in self.get_all():
            match = _AUTH_COOKIE.match(cookie.name)
            if match:
                chunks.append((int(match.group(1) or 0), cookie.value))
        if not chunks:
            return None
        raw = "".join(value for _, value in sorted(chunks))
        try:
            if raw.startswith(_BASE64_PREFIX):
                encoded = raw[len(_BASE64_PREFIX):]
                raw = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)).decode("utf-8")
            payload = json.loads(raw)
        except ValueError:
            LOG.warning("Malformed Supabase auth cookie")
            return None
        if isinstance(payload, dict):
            token = payload.get("access_token")
        elif isinstance(payload, list) and payload:
            token = payload[0]
        else:
            token = None
        return token if isinstance(token, str) and token else None


def create_client(session: SessionContext, settings: Settings | None = None) -> httpx.AsyncClient:
    """Build an httpx client for Supabase that carries and refreshes the session cookies."""
    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        LOG.error("Supabase server client could not be created: SUPABASE_URL and SUPABASE_ANON_KEY must be set")
        raise SessionConfigError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured")

    async def _forward_cookies(response: httpx.Response) -> None:
        session.forward(response)

    token = session.access_token() or settings.supabase_anon_key
    return httpx.AsyncClient(
        base_url=settings.supabase_url.rstrip("/"),
        headers={
            "apikey": settings.supabase_anon_key,
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        },
        cookies=session.cookie_jar(),
        timeout=settings.http_timeout,
        http2=True,
        event_hooks={"response": [_forward_cookies]},
    )


async def fetch_current_user(session: SessionContext) -> Optional[Dict[str, Any]]:
    """Return the Supabase user for the session, or None when signed out."""
    if session.access_token() is None:
        return None
    async with create_client(session) as client:
        resp = await client.get("/auth/v1/user")
    if resp.status_code in (401, 403):
        return None
    resp.raise_for_status()
    return resp.json()
