"""
Period-budget reconciliation (``retainer_kernel.domain.reconciliation``).

Responsibility:
    Computes, without touching storage, the budget rows that must be created
    and destroyed so an agreement's ledger matches an edited date range, and
    the rows produced by the one-time seeding of template budgets.

Architecture position:
    Kernel > Domain -- pure functional core.  ``AgreementService`` snapshots
    the ledger, calls ``reconcile()`` or ``seed_periods()`` and hands the
    resulting ``LedgerDelta`` to ``LedgerService.apply()`` inside a single
    transaction.

Invariants enforced:
    - Extend runs before shrink.  Rows created by extension lie inside the
      new range by construction, so shrink never removes them.
    - End and start extensions work off their own previous boundary and do
      not interact.
    - Shrink never runs while the new range lacks a bound: an agreement
      with an incomplete range keeps its budgets untouched.
    - An unchanged range yields an empty delta.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID

from retainer_kernel.domain.budgets import (
    BudgetKind,
    DatedBudget,
    LedgerEntry,
    LedgerSnapshot,
)
from retainer_kernel.domain.months import (
    Month,
    MonthRange,
    beginning_of_month,
    end_of_month,
)


class DestroyReason(str, Enum):
    """Why a row is leaving the ledger."""

    UNDATED = "undated"
    OUTSIDE_RANGE = "outside_range"
    SEEDED = "seeded"


@dataclass(frozen=True)
class BudgetCreate:
    kind: BudgetKind
    budget: DatedBudget
    source_id: UUID | None = None


@dataclass(frozen=True)
class BudgetDestroy:
    kind: BudgetKind
    budget_id: UUID
    reason: DestroyReason


@dataclass(frozen=True)
class LedgerDelta:
    """The creates and destroys that bring a ledger in line with a range."""

    creates: tuple[BudgetCreate, ...] = ()
    destroys: tuple[BudgetDestroy, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.creates and not self.destroys

    def creates_for(self, kind: BudgetKind) -> tuple[BudgetCreate, ...]:
        return tuple(c for c in self.creates if c.kind == kind)

    def destroys_for(self, kind: BudgetKind) -> tuple[BudgetDestroy, ...]:
        return tuple(d for d in self.destroys if d.kind == kind)


def _clone_into(
    templates: tuple[LedgerEntry, ...],
    new_months: list[date],
) -> list[BudgetCreate]:
    creates = []
    for first_day in new_months:
        month = Month.of(first_day)
        for entry in templates:
            creates.append(
                BudgetCreate(
                    kind=entry.kind,
                    budget=entry.spec.stamp(month),
                    source_id=entry.budget_id,
                )
            )
    return creates


def extend_to_new_end(
    old_range: MonthRange,
    new_range: MonthRange,
    ledger: LedgerSnapshot,
) -> list[BudgetCreate]:
    """
    Clone the budgets of the previous end month into every newly added
    month after it.  No previous end date means no budgets could exist.
    """
    old_end = old_range.end_date
    if old_end is None:
        return []

    templates = ledger.dated_in(Month.of(old_end))
    return _clone_into(templates, new_range.months_after(end_of_month(old_end)))


def extend_to_new_start(
    old_range: MonthRange,
    new_range: MonthRange,
    ledger: LedgerSnapshot,
) -> list[BudgetCreate]:
    """Mirror of extend_to_new_end for a start date moved earlier."""
    old_start = old_range.start_date
    if old_start is None:
        return []

    templates = ledger.dated_in(Month.of(old_start))
    return _clone_into(templates, new_range.months_before(beginning_of_month(old_start)))


def shrink_to_range(new_range: MonthRange, ledger: LedgerSnapshot) -> list[BudgetDestroy]:
    """Undated rows and rows whose month falls outside ``new_range``."""
    if not new_range.has_bounds:
        return []

    destroys = []
    for entry in ledger.entries:
        if entry.is_template:
            destroys.append(BudgetDestroy(entry.kind, entry.budget_id, DestroyReason.UNDATED))
        elif not new_range.contains_month(entry.spec.period):
            destroys.append(BudgetDestroy(entry.kind, entry.budget_id, DestroyReason.OUTSIDE_RANGE))
    return destroys


def reconcile(
    old_range: MonthRange,
    new_range: MonthRange,
    ledger: LedgerSnapshot,
) -> LedgerDelta:
    """
    Delta for moving an agreement from ``old_range`` to ``new_range``.

    Extension fires per bound that changed; shrink fires whenever either
    bound changed.
    """
    end_changed = old_range.end_date != new_range.end_date
    start_changed = old_range.start_date != new_range.start_date
    if not (end_changed or start_changed):
        return LedgerDelta()

    creates: list[BudgetCreate] = []
    if end_changed:
        creates.extend(extend_to_new_end(old_range, new_range, ledger))
    if start_changed:
        creates.extend(extend_to_new_start(old_range, new_range, ledger))

    destroys = shrink_to_range(new_range, ledger)
    return LedgerDelta(creates=tuple(creates), destroys=tuple(destroys))


def seed_periods(month_range: MonthRange, ledger: LedgerSnapshot) -> LedgerDelta:
    """
    Delta that copies every template into every budget month and then
    removes the templates.

    Templates are kept when the range has no budget months yet, so seeding
    can run again once the range is complete.
    """
    templates = ledger.templates()
    months = month_range.months()
    if not templates or not months:
        return LedgerDelta()

    creates = _clone_into(templates, months)
    destroys = [
        BudgetDestroy(entry.kind, entry.budget_id, DestroyReason.SEEDED)
        for entry in templates
    ]
    return LedgerDelta(creates=tuple(creates), destroys=tuple(destroys))
