import logging
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from .client import delete_appointment
from .dashboard import CustomerDashboard, staff_label
from .exceptions import DeletionFailed, SessionConfigError
from .session import RequestCookieStore, SessionContext, fetch_current_user

LOG = logging.getLogger(__name__)
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Salon Customer Dashboard")


def get_session(request: Request, response: Response) -> SessionContext:
    """Request-scoped session; refreshed cookies are written to the outgoing response."""
    return SessionContext(RequestCookieStore(request, response))


def require_session(session: SessionContext = Depends(get_session)) -> SessionContext:
    if session.access_token() is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return session


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/dashboard/me")
async def current_user(session: SessionContext = Depends(require_session)):
    """Return the signed-in Supabase user."""
    try:
        user = await fetch_current_user(session)
    except SessionConfigError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return user


@app.get("/dashboard/appointments")
async def upcoming_appointments(session: SessionContext = Depends(require_session)) -> List[Dict[str, Any]]:
    """Upcoming appointments of the caller, normalized for display."""
    dashboard = CustomerDashboard(session)
    views = await dashboard.load()
    return [{**view.model_dump(), "staff_label": staff_label(view)} for view in views]


@app.delete("/dashboard/appointments/{appointment_id}")
async def cancel_appointment(
    appointment_id: str,
    response: Response,
    session: SessionContext = Depends(require_session),
):
    try:
        await delete_appointment(session, appointment_id)
    except DeletionFailed as exc:
        status = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
        failure = JSONResponse({"error": exc.message}, status_code=status)
        for value in response.headers.getlist("set-cookie"):
            failure.headers.append("set-cookie", value)
        return failure
    LOG.info("appointment %s cancelled", appointment_id)
    return {"message": "cancelled", "appointment_id": appointment_id}
