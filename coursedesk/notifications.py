import time
from collections.abc import Callable
from dataclasses import dataclass

SUCCESS = "success"
ERROR = "error"
INFO = "info"


@dataclass(frozen=True)
class Toast:
    message: str
    kind: str
    shown_at: float


class ToastCenter:
    """Single-slot toast: a new message replaces the previous one."""

    def __init__(self, duration: float = 3.0, clock: Callable[[], float] = time.monotonic):
        self.duration = duration
        self._clock = clock
        self._toast: Toast | None = None

    def show(self, message: str, kind: str = SUCCESS) -> Toast:
        self._toast = Toast(message=message, kind=kind, shown_at=self._clock())
        return self._toast

    def success(self, message: str) -> Toast:
        return self.show(message, SUCCESS)

    def error(self, message: str) -> Toast:
        return self.show(message, ERROR)

    def current(self) -> Toast | None:
        """The visible toast, or None once it has auto-hidden."""
        if self._toast is None:
            return None
        if self._clock() - self._toast.shown_at >= self.duration:
            self._toast = None
        return self._toast

    def dismiss(self) -> None:
        self._toast = None
