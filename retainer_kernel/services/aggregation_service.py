"""
AggregationService -- budget and spend totals of a retainer agreement.

Responsibility:
    Sums the labor and overhead budget ledgers and the time logged against
    the agreement's issues, either over the whole lifetime of the agreement
    or for the calendar month of a query date.

Architecture position:
    Kernel > Services -- read-only; composes ``BudgetSelector`` and
    ``TimeEntrySelector`` and never writes.

Scope rules (one per aggregate call)::

    query_date       | scope
    -----------------|---------------------------------------------
    None             | NO_DATE -- lifetime sums
    inside the range | IN      -- sums for the query date's month
    outside / no     | OUT     -- Decimal("0")
    range            |

Invariants enforced:
    - All results are Decimal; nothing is ever float.
    - Missing contract, missing billable rate and an agreement without
      issues give zero spend rather than an error.
    - Billable entries are labor spend, non-billable entries are overhead
      spend.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy.orm import Session

from retainer_kernel.db.types import ZERO
from retainer_kernel.domain.budgets import BudgetKind
from retainer_kernel.domain.dtos import AgreementTotals, TimeEntryInfo
from retainer_kernel.domain.months import Month, MonthRange
from retainer_kernel.exceptions import AgreementNotFoundError
from retainer_kernel.logging_config import get_logger
from retainer_kernel.models.agreement import RetainerAgreement
from retainer_kernel.selectors.budget_selector import BudgetSelector
from retainer_kernel.selectors.time_entry_selector import TimeEntrySelector

logger = get_logger("services.aggregation")


class ScopeStatus(str, Enum):
    NO_DATE = "no_date"
    IN = "in"
    OUT = "out"


def scope_status(month_range: MonthRange, query_date: date | None) -> ScopeStatus:
    if query_date is None:
        return ScopeStatus.NO_DATE
    if month_range.within_range(query_date):
        return ScopeStatus.IN
    return ScopeStatus.OUT


class AggregationService:
    """
    Per-agreement totals.

    Every public method takes the agreement ID and an optional query date
    and resolves the scope on its own, so callers can ask for single
    figures.  ``summary()`` computes all of them in one go.
    """

    def __init__(self, session: Session):
        self._session = session
        self._budgets = BudgetSelector(session)
        self._time = TimeEntrySelector(session)

    def _agreement(self, agreement_id: UUID) -> RetainerAgreement:
        agreement = self._session.get(RetainerAgreement, agreement_id)
        if agreement is None:
            raise AgreementNotFoundError(str(agreement_id))
        return agreement

    def _scope(
        self,
        agreement: RetainerAgreement,
        query_date: date | None,
    ) -> tuple[ScopeStatus, Month | None]:
        status = scope_status(agreement.month_range, query_date)
        month = Month.of(query_date) if status is ScopeStatus.IN else None
        return status, month

    # =========================================================================
    # Budget totals
    # =========================================================================

    def _budget_sum(
        self,
        kind: BudgetKind,
        agreement_id: UUID,
        query_date: date | None,
        hours: bool,
    ) -> Decimal:
        agreement = self._agreement(agreement_id)
        status, month = self._scope(agreement, query_date)
        if status is ScopeStatus.OUT:
            return ZERO
        if hours:
            return self._budgets.sum_hours(kind, agreement.id, month)
        return self._budgets.sum_amount(kind, agreement.id, month)

    def labor_budget_total(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return self._budget_sum(BudgetKind.LABOR, agreement_id, query_date, hours=False)

    def labor_budget_hours(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return self._budget_sum(BudgetKind.LABOR, agreement_id, query_date, hours=True)

    def overhead_budget_total(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return self._budget_sum(BudgetKind.OVERHEAD, agreement_id, query_date, hours=False)

    def overhead_budget_hours(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return self._budget_sum(BudgetKind.OVERHEAD, agreement_id, query_date, hours=True)

    # =========================================================================
    # Spend
    # =========================================================================

    def _entries(self, agreement_id: UUID, query_date: date | None) -> list[TimeEntryInfo]:
        agreement = self._agreement(agreement_id)
        status, month = self._scope(agreement, query_date)
        if status is ScopeStatus.OUT:
            return []
        return self._time.entries_for_agreement(agreement.id, month)

    def total_spent(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        """Billable hours in scope times the contract's billable rate."""
        agreement = self._agreement(agreement_id)
        contract = agreement.contract
        if contract is None or contract.billable_rate is None:
            return ZERO

        billable_hours = sum(
            (e.hours for e in self._entries(agreement_id, query_date) if e.billable),
            ZERO,
        )
        return billable_hours * contract.billable_rate

    def labor_spent(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return sum(
            (e.cost for e in self._entries(agreement_id, query_date) if e.billable),
            ZERO,
        )

    def overhead_spent(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return sum(
            (e.cost for e in self._entries(agreement_id, query_date) if not e.billable),
            ZERO,
        )

    def labor_spent_hours(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return sum(
            (e.hours for e in self._entries(agreement_id, query_date) if e.billable),
            ZERO,
        )

    def overhead_spent_hours(self, agreement_id: UUID, query_date: date | None = None) -> Decimal:
        return sum(
            (e.hours for e in self._entries(agreement_id, query_date) if not e.billable),
            ZERO,
        )

    # =========================================================================
    # Summary
    # =========================================================================

    def summary(self, agreement_id: UUID, query_date: date | None = None) -> AgreementTotals:
        totals = AgreementTotals(
            agreement_id=agreement_id,
            query_date=query_date,
            labor_budget_total=self.labor_budget_total(agreement_id, query_date),
            labor_budget_hours=self.labor_budget_hours(agreement_id, query_date),
            overhead_budget_total=self.overhead_budget_total(agreement_id, query_date),
            overhead_budget_hours=self.overhead_budget_hours(agreement_id, query_date),
            total_spent=self.total_spent(agreement_id, query_date),
            labor_spent=self.labor_spent(agreement_id, query_date),
            overhead_spent=self.overhead_spent(agreement_id, query_date),
            labor_spent_hours=self.labor_spent_hours(agreement_id, query_date),
            overhead_spent_hours=self.overhead_spent_hours(agreement_id, query_date),
        )
        logger.debug(
            "agreement_totals_computed",
            extra={"agreement_id": str(agreement_id), "query_date": query_date},
        )
        return totals
