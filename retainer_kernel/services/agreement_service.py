"""
AgreementService -- lifecycle of retainer agreements and their date range.

Responsibility:
    Creates agreements, answers month queries over their effective range,
    and keeps the labor and overhead ledgers in step with date edits.  A
    date edit snapshots the ledger, asks the pure reconciler for a delta,
    applies it through ``LedgerService`` and stores the new dates, all in
    one transaction.

Architecture position:
    Kernel > Services -- owns the transaction boundary (commit/rollback)
    for agreement edits.

Invariants enforced:
    - A date edit and its budget changes commit together or not at all.
      On failure the agreement keeps its old dates and its old rows.
    - Editing to the current dates is a no-op: no rows are touched.

Failure modes:
    - AgreementNotFoundError for an unknown agreement ID.
    - InvalidAgreementError for a blank title at creation.
    - ReconciliationError (chaining the storage or validation error) when a
      date edit or a seeding pass fails.

Audit relevance:
    ``updated_by_id`` records the actor of every date edit and each budget
    row records its creator in ``created_by_id``.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy.orm import Session

from retainer_kernel.db.types import to_decimal
from retainer_kernel.domain.budgets import BudgetKind
from retainer_kernel.domain.clock import Clock, SystemClock
from retainer_kernel.domain.dtos import AgreementInfo, BudgetInfo
from retainer_kernel.domain.months import MonthRange
from retainer_kernel.domain.reconciliation import LedgerDelta, reconcile, seed_periods
from retainer_kernel.exceptions import (
    AgreementNotFoundError,
    InvalidAgreementError,
    ReconciliationError,
)
from retainer_kernel.logging_config import LogContext, get_logger
from retainer_kernel.models.agreement import AgreementStatus, RetainerAgreement
from retainer_kernel.selectors.budget_selector import BudgetSelector
from retainer_kernel.services.ledger_service import LedgerService

logger = get_logger("services.agreement")


class _Unchanged(Enum):
    TOKEN = 0


UNCHANGED = _Unchanged.TOKEN
"""Marker for a date argument the caller does not want to edit."""


class AgreementService:
    """
    Agreement creation, month queries and date-range reconciliation.

    Contract:
        Receives a SQLAlchemy ``Session`` and an optional ``Clock``.
        ``create_agreement``, ``add_template_budget``, ``update_dates`` and
        ``create_budgets_for_periods`` commit on success and roll back on
        failure.

    Non-goals:
        - Does NOT compute budget or spend totals -- see
          ``AggregationService``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._ledger = LedgerService(session)
        self._budgets = BudgetSelector(session)

    # =========================================================================
    # Creation and lookup
    # =========================================================================

    def create_agreement(
        self,
        title: str,
        actor_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        contract_id: UUID | None = None,
    ) -> AgreementInfo:
        if not title or not title.strip():
            raise InvalidAgreementError("title", "cannot be blank")

        agreement = RetainerAgreement(
            title=title.strip(),
            status=AgreementStatus.OPEN.value,
            start_date=start_date,
            end_date=end_date,
            contract_id=contract_id,
            created_by_id=actor_id,
        )
        try:
            self._session.add(agreement)
            self._session.flush()
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "agreement_created",
            extra={
                "agreement_id": str(agreement.id),
                "start_date": start_date,
                "end_date": end_date,
            },
        )
        return agreement.to_dto()

    def get_agreement(self, agreement_id: UUID) -> AgreementInfo:
        return self._load(agreement_id).to_dto()

    def _load(self, agreement_id: UUID) -> RetainerAgreement:
        agreement = self._session.get(RetainerAgreement, agreement_id)
        if agreement is None:
            raise AgreementNotFoundError(str(agreement_id))
        return agreement

    def add_template_budget(
        self,
        agreement_id: UUID,
        kind: BudgetKind,
        actor_id: UUID,
        amount: Decimal | int | str = 0,
        hours: Decimal | int | str = 0,
        activity: str | None = None,
    ) -> BudgetInfo:
        """Seed an undated budget for later distribution over the months."""
        agreement = self._load(agreement_id)
        try:
            row = self._ledger.add_template(
                kind, agreement, actor_id,
                amount=to_decimal(amount), hours=to_decimal(hours), activity=activity,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return row.to_dto()

    # =========================================================================
    # Month queries
    # =========================================================================

    def month_range(self, agreement_id: UUID) -> MonthRange:
        return self._load(agreement_id).month_range

    def months(self, agreement_id: UUID) -> list[date]:
        return self.month_range(agreement_id).months()

    def months_before(self, agreement_id: UUID, d: date) -> list[date]:
        return self.month_range(agreement_id).months_before(d)

    def months_after(self, agreement_id: UUID, d: date) -> list[date]:
        return self.month_range(agreement_id).months_after(d)

    def within_date_range(self, agreement_id: UUID, d: date) -> bool:
        return self.month_range(agreement_id).within_range(d)

    def current_date(self) -> date:
        return self._clock.today()

    def current_period(self) -> str:
        """Display label of the current month, e.g. "February 2010"."""
        return self.current_date().strftime("%B %Y")

    # =========================================================================
    # Reconciliation
    # =========================================================================

    def update_dates(
        self,
        agreement_id: UUID,
        actor_id: UUID,
        start_date: date | None | _Unchanged = UNCHANGED,
        end_date: date | None | _Unchanged = UNCHANGED,
    ) -> AgreementInfo:
        """
        Move the agreement's date range and reconcile both ledgers.

        New months after a later end date receive copies of the old end
        month's budgets; new months before an earlier start date receive
        copies of the old start month's budgets.  Then, if both bounds are
        set, templates and rows outside the new range are destroyed.

        Raises:
            AgreementNotFoundError: Unknown agreement.
            ReconciliationError: The edit failed and was rolled back.
        """
        agreement = self._load(agreement_id)
        old_range = agreement.month_range
        new_range = MonthRange(
            old_range.start_date if start_date is UNCHANGED else start_date,
            old_range.end_date if end_date is UNCHANGED else end_date,
        )
        if new_range == old_range:
            return agreement.to_dto()

        with LogContext.bind(agreement_id=str(agreement_id), actor_id=str(actor_id)):
            try:
                delta = reconcile(old_range, new_range, self._budgets.snapshot(agreement.id))
                self._ledger.apply(agreement, delta, actor_id)
                agreement.start_date = new_range.start_date
                agreement.end_date = new_range.end_date
                agreement.updated_by_id = actor_id
                self._session.flush()
                self._session.commit()
            except Exception as exc:
                self._session.rollback()
                logger.error(
                    "reconciliation_failed",
                    extra={"stage": "update_dates", "error": str(exc)},
                    exc_info=True,
                )
                raise ReconciliationError(str(agreement_id), "update_dates", str(exc)) from exc

            logger.info(
                "agreement_dates_updated",
                extra={
                    "old_start": old_range.start_date,
                    "old_end": old_range.end_date,
                    "new_start": new_range.start_date,
                    "new_end": new_range.end_date,
                    "created_count": len(delta.creates),
                    "destroyed_count": len(delta.destroys),
                },
            )
        return agreement.to_dto()

    def create_budgets_for_periods(self, agreement_id: UUID, actor_id: UUID) -> LedgerDelta:
        """
        Copy every template budget into every budget month, then drop the
        templates.  Leaves templates in place while the range has no months.
        """
        agreement = self._load(agreement_id)

        with LogContext.bind(agreement_id=str(agreement_id), actor_id=str(actor_id)):
            try:
                delta = seed_periods(agreement.month_range, self._budgets.snapshot(agreement.id))
                self._ledger.apply(agreement, delta, actor_id)
                self._session.commit()
            except Exception as exc:
                self._session.rollback()
                logger.error(
                    "reconciliation_failed",
                    extra={"stage": "seed_periods", "error": str(exc)},
                    exc_info=True,
                )
                raise ReconciliationError(str(agreement_id), "seed_periods", str(exc)) from exc

            logger.info(
                "budgets_seeded",
                extra={"created_count": len(delta.creates), "template_count": len(delta.destroys)},
            )
        return delta

    def delete_agreement(self, agreement_id: UUID) -> None:
        """Delete the agreement together with every budget it owns."""
        agreement = self._load(agreement_id)
        try:
            self._session.delete(agreement)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("agreement_deleted", extra={"agreement_id": str(agreement_id)})
