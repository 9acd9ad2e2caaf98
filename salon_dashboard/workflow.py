"""Select -> confirm -> delete state machine behind the cancel buttons.

Only one deletion may be outstanding at a time for the whole list: while a
request is in flight every other transition is refused.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List

from .exceptions import DeletionFailed
from .models import CancellationRequest, WorkflowState

LOG = logging.getLogger(__name__)

Deleter = Callable[[str], Awaitable[None]]
Listener = Callable[[CancellationRequest], None]


class CancellationWorkflow:
    def __init__(self, delete: Deleter, on_cancelled: Callable[[str], None]) -> None:
        self._delete = delete
        self._on_cancelled = on_cancelled
        self._request = CancellationRequest()
        self._listeners: List[Listener] = []

    @property
    def request(self) -> CancellationRequest:
        return self._request.model_copy()

    @property
    def state(self) -> WorkflowState:
        return self._request.state

    @property
    def can_select(self) -> bool:
        return not self._request.pending

    def is_cancelling(self, appointment_id: str) -> bool:
        return self._request.pending and self._request.target_id == appointment_id

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot after every transition."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _update(self, **changes) -> None:
        for key, value in changes.items():
            setattr(self._request, key, value)
        snapshot = self.request
        for listener in list(self._listeners):
            listener(snapshot)

    def select_for_cancel(self, appointment_id: str) -> bool:
        if self._request.pending:
            LOG.debug("select ignored, cancellation of %s in flight", self._request.target_id)
            return False
        self._update(target_id=appointment_id, last_error=None)
        return True

    def abandon(self) -> bool:
        if self._request.pending:
            return False
        self._update(target_id=None, last_error=None)
        return True

    async def confirm_cancel(self) -> bool:
        """Delete the selected appointment; True only when it was removed."""
        target = self._request.target_id
        if target is None or self._request.pending:
            return False
        try:
            # Enter InFlight before the first await so a repeated confirm is a no-op.
            self._update(pending=True, last_error=None)
            await self._delete(target)
            self._on_cancelled(target)
        except DeletionFailed as exc:
            LOG.info("cancellation of %s failed: %s", target, exc.message)
            self._update(pending=False, last_error=exc.message)
            return False
        except BaseException:
            # Cancelled task or failing listener: the delete is no longer outstanding.
            self._request.pending = False
            raise
        self._update(pending=False, target_id=None, last_error=None)
        return True
