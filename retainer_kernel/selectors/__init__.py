"""Read-only query selectors."""

from retainer_kernel.selectors.base import BaseSelector
from retainer_kernel.selectors.budget_selector import BudgetSelector
from retainer_kernel.selectors.time_entry_selector import TimeEntrySelector

__all__ = [
    "BaseSelector",
    "BudgetSelector",
    "TimeEntrySelector",
]
