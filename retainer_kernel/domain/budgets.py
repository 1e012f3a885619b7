"""
Budget value objects (``retainer_kernel.domain.budgets``).

Responsibility:
    The two shapes a monthly budget can take, as frozen dataclasses:
    a ``TemplateBudget`` (not yet assigned to a calendar month) and a
    ``DatedBudget`` (stamped with a year and month).  Budgets of both
    ``BudgetKind`` values share these shapes; the ledger is generic over the
    kind.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  ORM rows convert to these via
    ``to_spec()``; the reconciler only ever sees these.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from retainer_kernel.domain.months import Month


class BudgetKind(str, Enum):
    """The two monthly ledgers owned by an agreement."""

    LABOR = "labor"
    OVERHEAD = "overhead"


@dataclass(frozen=True)
class TemplateBudget:
    """A budget seed with no calendar month."""

    amount: Decimal = Decimal("0")
    hours: Decimal = Decimal("0")
    activity: str | None = None

    def stamp(self, month: Month) -> DatedBudget:
        return DatedBudget(
            period=month,
            amount=self.amount,
            hours=self.hours,
            activity=self.activity,
        )


@dataclass(frozen=True)
class DatedBudget:
    """A budget assigned to one calendar month."""

    period: Month
    amount: Decimal = Decimal("0")
    hours: Decimal = Decimal("0")
    activity: str | None = None

    def stamp(self, month: Month) -> DatedBudget:
        """Copy of this budget moved to ``month``."""
        return DatedBudget(
            period=month,
            amount=self.amount,
            hours=self.hours,
            activity=self.activity,
        )


BudgetSpec = TemplateBudget | DatedBudget


@dataclass(frozen=True)
class LedgerEntry:
    """A persisted budget row as the reconciler sees it."""

    kind: BudgetKind
    budget_id: UUID
    spec: BudgetSpec

    @property
    def is_template(self) -> bool:
        return isinstance(self.spec, TemplateBudget)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Every persisted budget row of one agreement, both kinds."""

    entries: tuple[LedgerEntry, ...] = ()

    def templates(self, kind: BudgetKind | None = None) -> tuple[LedgerEntry, ...]:
        return tuple(
            e for e in self.entries
            if e.is_template and (kind is None or e.kind == kind)
        )

    def dated_in(self, month: Month, kind: BudgetKind | None = None) -> tuple[LedgerEntry, ...]:
        return tuple(
            e for e in self.entries
            if not e.is_template
            and e.spec.period == month
            and (kind is None or e.kind == kind)
        )
