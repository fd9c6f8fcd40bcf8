"""
Client-side exam countdown.

Advisory only: the server checks the deadline on submit. The countdown is
driven by tick() calls so the caller decides the cadence (a UI timer, a loop,
a test).
"""

from datetime import datetime, timezone
from typing import Callable, Optional

WARNING_FRACTION = 0.25
DANGER_FRACTION = 0.10


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_remaining(seconds: int) -> str:
    """mm:ss, or hh:mm:ss once an hour or more is left."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


class ExamCountdown:
    def __init__(self, deadline: datetime, duration_minutes: int, on_expired: Optional[Callable[[], None]] = None):
        self.deadline = _utc(deadline)
        self.total_seconds = duration_minutes * 60
        self.on_expired = on_expired
        self.expired = False

    @classmethod
    def from_start_response(cls, data: dict, on_expired: Optional[Callable[[], None]] = None) -> "ExamCountdown":
        """Build from the body returned by POST /exams/{id}/start."""
        deadline = datetime.fromisoformat(data["deadline"])
        return cls(deadline, data["exam"]["duration_minutes"], on_expired)

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        now = _utc(now) if now else datetime.now(timezone.utc)
        return max(0, int((self.deadline - now).total_seconds()))

    def level(self, now: Optional[datetime] = None) -> str:
        """'danger' at or under 10% of the time left, 'warning' under 25%, else 'normal'."""
        remaining = self.remaining_seconds(now)
        if remaining <= self.total_seconds * DANGER_FRACTION:
            return "danger"
        if remaining < self.total_seconds * WARNING_FRACTION:
            return "warning"
        return "normal"

    def display(self, now: Optional[datetime] = None) -> str:
        return format_remaining(self.remaining_seconds(now))

    def tick(self, now: Optional[datetime] = None) -> int:
        """Return the seconds left; the first tick that reaches zero fires on_expired."""
        remaining = self.remaining_seconds(now)
        if remaining == 0 and not self.expired:
            self.expired = True
            if self.on_expired:
                self.on_expired()
        return remaining
