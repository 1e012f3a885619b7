"""
Immutable DTOs returned across the service and selector boundary.

Services and selectors hand these out instead of ORM entities so callers
never hold live session state.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from retainer_kernel.domain.budgets import BudgetKind


@dataclass(frozen=True)
class AgreementInfo:
    id: UUID
    title: str
    short_type: str
    status: str
    start_date: date | None
    end_date: date | None
    beginning_date: date | None
    ending_date: date | None
    contract_id: UUID | None


@dataclass(frozen=True)
class BudgetInfo:
    id: UUID
    kind: BudgetKind
    agreement_id: UUID
    year: int | None
    month: int | None
    amount: Decimal
    hours: Decimal
    activity: str | None

    @property
    def is_template(self) -> bool:
        return self.year is None or self.month is None


@dataclass(frozen=True)
class TimeEntryInfo:
    id: UUID
    issue_id: UUID
    spent_on: date
    year: int
    month: int
    hours: Decimal
    cost: Decimal
    billable: bool


@dataclass(frozen=True)
class AgreementTotals:
    """All budget and spend aggregates for one scope (month or lifetime)."""

    agreement_id: UUID
    query_date: date | None
    labor_budget_total: Decimal
    labor_budget_hours: Decimal
    overhead_budget_total: Decimal
    overhead_budget_hours: Decimal
    total_spent: Decimal
    labor_spent: Decimal
    overhead_spent: Decimal
    labor_spent_hours: Decimal
    overhead_spent_hours: Decimal

    @property
    def labor_remaining(self) -> Decimal:
        return self.labor_budget_total - self.labor_spent

    @property
    def overhead_remaining(self) -> Decimal:
        return self.overhead_budget_total - self.overhead_spent
