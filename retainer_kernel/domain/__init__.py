"""
Pure functional core: clock, month arithmetic, budget value objects,
reconciliation and DTOs.  Nothing in this package performs I/O.
"""

from retainer_kernel.domain.budgets import (
    BudgetKind,
    BudgetSpec,
    DatedBudget,
    LedgerEntry,
    LedgerSnapshot,
    TemplateBudget,
)
from retainer_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from retainer_kernel.domain.months import (
    Month,
    MonthRange,
    add_months,
    beginning_of_month,
    end_of_month,
)
from retainer_kernel.domain.reconciliation import (
    BudgetCreate,
    BudgetDestroy,
    DestroyReason,
    LedgerDelta,
    reconcile,
    seed_periods,
)

__all__ = [
    "BudgetKind",
    "BudgetSpec",
    "DatedBudget",
    "TemplateBudget",
    "LedgerEntry",
    "LedgerSnapshot",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Month",
    "MonthRange",
    "add_months",
    "beginning_of_month",
    "end_of_month",
    "BudgetCreate",
    "BudgetDestroy",
    "DestroyReason",
    "LedgerDelta",
    "reconcile",
    "seed_periods",
]
