"""Customer dashboard screen state: upcoming appointments plus cancellation."""
from __future__ import annotations

import logging
from datetime import tzinfo
from typing import List, Optional

from .client import delete_appointment, fetch_upcoming_appointments
from .models import TIME_PLACEHOLDER, UNSPECIFIED, AppointmentView
from .session import SessionContext
from .views import build_appointment_views
from .workflow import CancellationWorkflow

LOG = logging.getLogger(__name__)

STAFF_PREFIX = "Berber"


def staff_label(view: AppointmentView) -> str:
    name = view.staff_name
    if not name or name in (TIME_PLACEHOLDER, UNSPECIFIED):
        name = UNSPECIFIED
    return f"{STAFF_PREFIX}: {name}"


class CustomerDashboard:
    def __init__(self, session: SessionContext, *, tz: Optional[tzinfo] = None) -> None:
        self._session = session
        self._tz = tz
        self.appointments: List[AppointmentView] = []
        self.loading = False
        self.error: Optional[str] = None
        self.workflow = CancellationWorkflow(self._delete, self._remove)

    async def load(self) -> List[AppointmentView]:
        """Fetch and rebuild the list; any failure leaves an empty list."""
        self.loading = True
        self.error = None
        try:
            payload = await fetch_upcoming_appointments(self._session)
            self.appointments = build_appointment_views(payload, self._tz)
        except Exception as exc:
            LOG.warning("Upcoming appointments could not be loaded: %s", exc, exc_info=True)
            self.appointments = []
        finally:
            self.loading = False
        return self.appointments

    async def _delete(self, appointment_id: str) -> None:
        await delete_appointment(self._session, appointment_id)

    def _remove(self, appointment_id: str) -> None:
        # Missing ids share the "unknown" sentinel, so all of them go together.
        self.appointments = [apt for apt in self.appointments if apt.id != appointment_id]
