"""Per-row actions (send mail, generate certificate, update status, ...).

Each dispatch is an ``ActionTask`` that moves from ``idle`` to ``pending``
and ends in ``success``, ``failure`` or ``cancelled``. Busy flags are kept
per (action, record key) so one row in flight never blocks another.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from coursedesk.exceptions import ActionValidationError, DashboardError
from coursedesk.filters import Record
from coursedesk.notifications import ToastCenter
from coursedesk.table_view import TableView

logger = logging.getLogger(__name__)


class ActionStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


@dataclass
class RowAction:
    """
    name: busy-flag key and log label.
    request: sends the row's current values; returns the server body.
    validate: raises ActionValidationError when a required local field is empty.
    apply: turns the server body into field changes for the row (or None).
    """

    name: str
    request: Callable[[Record], Awaitable[Any]]
    validate: Callable[[Record], None] | None = None
    apply: Callable[[Record, Any], dict[str, Any] | None] | None = None
    success_message: Callable[[Record, Any], str] | str = "Done"
    failure_message: str = "Action failed"


@dataclass
class ActionTask:
    action: str
    key: Any
    status: ActionStatus = ActionStatus.IDLE
    message: str = ""
    value: Any = None
    transitions: list[ActionStatus] = field(default_factory=lambda: [ActionStatus.IDLE])
    future: "asyncio.Future[ActionTask] | None" = None

    def move(self, status: ActionStatus, message: str = "", value: Any = None) -> "ActionTask":
        self.status = status
        self.message = message
        self.value = value
        self.transitions.append(status)
        return self

    @property
    def done(self) -> bool:
        return self.status in (ActionStatus.SUCCESS, ActionStatus.FAILURE, ActionStatus.CANCELLED)


class BusyRegistry:
    def __init__(self):
        self._busy: dict[tuple[str, Any], bool] = {}

    def mark(self, action: str, key: Any) -> None:
        self._busy[(action, key)] = True

    def clear(self, action: str, key: Any) -> None:
        self._busy.pop((action, key), None)

    def is_busy(self, action: str, key: Any) -> bool:
        return self._busy.get((action, key), False)

    def busy_keys(self, action: str) -> set:
        return {key for (name, key), flag in self._busy.items() if name == action and flag}


class ActionDispatcher:
    def __init__(self, view: TableView, toasts: ToastCenter, busy: BusyRegistry | None = None):
        self.view = view
        self.toasts = toasts
        self.busy = busy or BusyRegistry()

    def submit(self, action: RowAction, key: Any) -> ActionTask:
        """Schedule the action on the running loop and return its task right away."""
        task = ActionTask(action.name, key)
        task.future = asyncio.ensure_future(self.run(action, key, task))
        return task

    async def run(self, action: RowAction, key: Any, task: ActionTask | None = None) -> ActionTask:
        task = task or ActionTask(action.name, key)
        record = self.view.find(key)
        if record is None:
            self.toasts.error("Record not found")
            return task.move(ActionStatus.FAILURE, "Record not found")

        if action.validate is not None:
            try:
                action.validate(record)
            except ActionValidationError as exc:
                self.toasts.error(exc.message)
                return task.move(ActionStatus.FAILURE, exc.message)

        if self.busy.is_busy(action.name, key):
            logger.debug("%s already running for %s", action.name, key)
            return task.move(ActionStatus.CANCELLED, "Already in progress")

        token = self.view.lifetime_token()
        self.busy.mark(action.name, key)
        task.move(ActionStatus.PENDING)
        try:
            value = await action.request(record)
        except DashboardError as exc:
            if token.cancelled:
                return task.move(ActionStatus.CANCELLED)
            message = exc.message or action.failure_message
            logger.warning("%s failed for %s: %s", action.name, key, exc)
            self.toasts.error(message)
            return task.move(ActionStatus.FAILURE, message)
        finally:
            self.busy.clear(action.name, key)

        if token.cancelled:
            logger.debug("Dropped %s response for closed view %s", action.name, self.view.name)
            return task.move(ActionStatus.CANCELLED, value=value)

        # Look the row up again: the list may have been reloaded while in flight.
        current = self.view.find(key)
        if action.apply is not None and current is not None:
            changes = action.apply(current, value)
            if changes:
                self.view.patch(key, changes)

        message = action.success_message
        if callable(message):
            message = message(current or record, value)
        self.toasts.success(message)
        return task.move(ActionStatus.SUCCESS, message, value)


def require_fields(*fields: str, message: str | None = None) -> Callable[[Record], None]:
    """Validation guard: every listed field must be non-blank."""

    def _validate(record: Record) -> None:
        for name in fields:
            value = record.get(name)
            if value is None or not str(value).strip():
                raise ActionValidationError(message or f"{name} is required")

    return _validate
