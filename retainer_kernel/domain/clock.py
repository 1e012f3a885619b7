"""
Clock -- injectable time source.

Responsibility:
    Lets services ask for "today" (current retainer period) without calling
    ``date.today()`` directly, so tests can pin the calendar.

Architecture position:
    Kernel > Domain -- pure core, zero I/O except SystemClock.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current date receive a Clock via constructor
        injection.  ``now()`` returns a timezone-aware ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def today(self) -> date:
        """Get the current calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """Production clock that returns actual system time (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock pinned to a fixed instant.

    ``now()`` returns the same value until ``set_time()`` moves it, so a
    test can step the calendar into another retainer period.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2010, 2, 15, 12, 0, 0, tzinfo=timezone.utc
        )

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, time: datetime) -> None:
        self._fixed_time = time
