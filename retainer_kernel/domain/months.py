"""
Month Range Calculator (``retainer_kernel.domain.months``).

Responsibility:
    Turns an agreement's ``(start_date, end_date)`` pair into normalized
    calendar-month bounds, the inclusive day range, and the ordered list of
    first-of-month dates that carry recurring budgets.

Architecture position:
    Kernel > Domain -- pure functions and frozen value objects, zero I/O.
    Consumed by the reconciler, the budget selector and the aggregator.

Invariants enforced:
    - ``beginning_date`` is always a first-of-month, ``ending_date`` always a
      last-of-month; either is ``None`` when its source date is absent.
    - ``months()`` is finite, strictly increasing, and its last element is
      strictly before ``ending_date``.  The month that contains
      ``ending_date`` is the trailing month and never carries a recurring
      budget, while ``within_range`` still reports its days as in range.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta
from functools import total_ordering

from dateutil.relativedelta import relativedelta


def beginning_of_month(d: date) -> date:
    """First day of ``d``'s month."""
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    """Last day of ``d``'s month."""
    return d + relativedelta(day=31)


def add_months(d: date, months: int) -> date:
    """Shift ``d`` by whole calendar months, clamping the day."""
    return d + relativedelta(months=months)


@total_ordering
@dataclass(frozen=True)
class Month:
    """A ``(year, month)`` budget key.  Not persisted on its own."""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")

    @classmethod
    def of(cls, d: date) -> Month:
        return cls(d.year, d.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return end_of_month(self.first_day)

    def __lt__(self, other: Month) -> bool:
        if not isinstance(other, Month):
            return NotImplemented
        return (self.year, self.month) < (other.year, other.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class MonthRange:
    """
    The effective month span of an agreement.

    Holds the raw dates exactly as stored on the agreement; every other
    attribute is derived.  Two ranges compare equal iff their raw dates do,
    which is what the reconciler uses to detect an edited bound.
    """

    start_date: date | None = None
    end_date: date | None = None

    @classmethod
    def for_agreement(cls, agreement) -> MonthRange:
        return cls(agreement.start_date, agreement.end_date)

    @property
    def beginning_date(self) -> date | None:
        return beginning_of_month(self.start_date) if self.start_date else None

    @property
    def ending_date(self) -> date | None:
        return end_of_month(self.end_date) if self.end_date else None

    @property
    def has_bounds(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @property
    def is_empty(self) -> bool:
        """No days covered: a bound is missing or the bounds are inverted."""
        return not self.has_bounds or self.beginning_date > self.ending_date

    def date_range(self) -> list[date]:
        """Every calendar day from beginning_date to ending_date, inclusive."""
        if self.is_empty:
            return []
        return list(self._iter_days())

    def _iter_days(self) -> Iterator[date]:
        day = self.beginning_date
        one_day = timedelta(days=1)
        while day <= self.ending_date:
            yield day
            day += one_day

    def within_range(self, d: date) -> bool:
        if self.is_empty:
            return False
        return self.beginning_date <= d <= self.ending_date

    within_date_range = within_range

    def contains_month(self, month: Month) -> bool:
        """True if the first day of ``month`` lies inside the day range."""
        return self.within_range(month.first_day)

    def months(self) -> list[date]:
        """
        First-of-month dates carrying recurring budgets.

        Starts at ``beginning_date`` and advances one month at a time while
        the month closes strictly before ``ending_date``, so the trailing
        month (the one containing ``ending_date``) is cut off::

            MonthRange(date(2010, 1, 1), date(2010, 3, 31)).months()
            -> [date(2010, 1, 1), date(2010, 2, 1)]
        """
        if not self.has_bounds:
            return []

        acc = []
        current = self.beginning_date
        while end_of_month(current) < self.ending_date:
            acc.append(current)
            current = add_months(current, 1)
        return acc

    def months_before(self, d: date) -> list[date]:
        return [m for m in self.months() if m < d]

    def months_after(self, d: date) -> list[date]:
        return [m for m in self.months() if m > d]
