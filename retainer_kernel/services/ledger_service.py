"""
LedgerService -- write side of the monthly budget ledgers.

Responsibility:
    Creates template and dated budget rows, clones templates into a month,
    purges undated or out-of-range rows, and applies a ``LedgerDelta``
    computed by the reconciler.

Architecture position:
    Kernel > Services -- imperative shell around the pure reconciler.
    Flush-only: the caller owns commit/rollback, so a whole delta lands in
    the caller's transaction or not at all.

Invariants enforced:
    - Every row passes validation before it is attached: non-negative
      amount and hours here, month in 1..12 on the model.
    - Rows are attached to and removed from the agreement's collections,
      so the in-memory agreement always mirrors the ledger and removal
      deletes through the ``delete-orphan`` cascade.

Failure modes:
    - InvalidBudgetError on a row that fails validation.
    - Any storage error raised by ``session.flush()`` propagates.
"""

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from retainer_kernel.domain.budgets import BudgetKind, BudgetSpec, DatedBudget, TemplateBudget
from retainer_kernel.domain.months import Month, MonthRange
from retainer_kernel.domain.reconciliation import LedgerDelta
from retainer_kernel.exceptions import InvalidBudgetError
from retainer_kernel.logging_config import get_logger
from retainer_kernel.models.agreement import RetainerAgreement
from retainer_kernel.models.budget import MonthlyBudget, budget_model
from retainer_kernel.services.base import BaseService

logger = get_logger("services.ledger")


def _collection(agreement: RetainerAgreement, kind: BudgetKind) -> list[MonthlyBudget]:
    if kind == BudgetKind.LABOR:
        return agreement.labor_budgets
    return agreement.overhead_budgets


class LedgerService(BaseService[MonthlyBudget]):
    """
    Mutations of an agreement's labor and overhead ledgers.

    Guarantees:
        - Never commits or rolls back.
        - ``apply()`` performs every create before any destroy and flushes
          once at the end.
    """

    def _validate(self, kind: BudgetKind, spec: BudgetSpec) -> None:
        if spec.amount < 0:
            raise InvalidBudgetError(kind.value, "budget_amount", spec.amount, "cannot be negative")
        if spec.hours < 0:
            raise InvalidBudgetError(kind.value, "hours", spec.hours, "cannot be negative")

    def _attach(
        self,
        kind: BudgetKind,
        agreement: RetainerAgreement,
        spec: BudgetSpec,
        actor_id: UUID,
    ) -> MonthlyBudget:
        self._validate(kind, spec)
        period = spec.period if isinstance(spec, DatedBudget) else None
        row = budget_model(kind)(
            agreement_id=agreement.id,
            year=period.year if period else None,
            month=period.month if period else None,
            budget_amount=spec.amount,
            hours=spec.hours,
            activity=spec.activity,
            created_by_id=actor_id,
        )
        _collection(agreement, kind).append(row)
        return row

    def add_template(
        self,
        kind: BudgetKind,
        agreement: RetainerAgreement,
        actor_id: UUID,
        amount: Decimal = Decimal("0"),
        hours: Decimal = Decimal("0"),
        activity: str | None = None,
    ) -> MonthlyBudget:
        """Seed an undated budget, used during initial agreement setup."""
        row = self._attach(kind, agreement, TemplateBudget(amount, hours, activity), actor_id)
        self.session.flush()
        logger.info(
            "budget_template_added",
            extra={"kind": kind.value, "agreement_id": str(agreement.id), "amount": str(amount)},
        )
        return row

    def add_budget(
        self,
        kind: BudgetKind,
        agreement: RetainerAgreement,
        month: Month,
        actor_id: UUID,
        amount: Decimal = Decimal("0"),
        hours: Decimal = Decimal("0"),
        activity: str | None = None,
    ) -> MonthlyBudget:
        row = self._attach(kind, agreement, DatedBudget(month, amount, hours, activity), actor_id)
        self.session.flush()
        return row

    def create_from_templates(
        self,
        kind: BudgetKind,
        agreement: RetainerAgreement,
        month: Month,
        templates: Iterable[BudgetSpec],
        actor_id: UUID,
    ) -> list[MonthlyBudget]:
        """One new row per template, stamped with ``month``."""
        rows = [
            self._attach(kind, agreement, template.stamp(month), actor_id)
            for template in templates
        ]
        self.session.flush()
        logger.debug(
            "budgets_created",
            extra={"kind": kind.value, "month": str(month), "count": len(rows)},
        )
        return rows

    def purge_undated(self, kind: BudgetKind, agreement: RetainerAgreement) -> int:
        """Destroy every template row of ``kind``."""
        collection = _collection(agreement, kind)
        doomed = [row for row in collection if row.is_template]
        return self._remove(kind, agreement, doomed, "undated")

    def purge_outside_range(
        self,
        kind: BudgetKind,
        agreement: RetainerAgreement,
        month_range: MonthRange,
    ) -> int:
        """Destroy every dated row whose month starts outside ``month_range``."""
        collection = _collection(agreement, kind)
        doomed = [
            row for row in collection
            if not row.is_template and not month_range.contains_month(row.period)
        ]
        return self._remove(kind, agreement, doomed, "outside_range")

    def _remove(
        self,
        kind: BudgetKind,
        agreement: RetainerAgreement,
        rows: list[MonthlyBudget],
        reason: str,
    ) -> int:
        collection = _collection(agreement, kind)
        for row in rows:
            collection.remove(row)
        self.session.flush()
        if rows:
            logger.info(
                "budgets_purged",
                extra={"kind": kind.value, "reason": reason, "count": len(rows)},
            )
        return len(rows)

    def apply(self, agreement: RetainerAgreement, delta: LedgerDelta, actor_id: UUID) -> None:
        """Write a reconciler delta: creates first, then destroys."""
        if delta.is_empty:
            return

        for create in delta.creates:
            self._attach(create.kind, agreement, create.budget, actor_id)

        for destroy in delta.destroys:
            collection = _collection(agreement, destroy.kind)
            row = next((r for r in collection if r.id == destroy.budget_id), None)
            if row is None:
                logger.warning(
                    "budget_already_removed",
                    extra={"kind": destroy.kind.value, "budget_id": str(destroy.budget_id)},
                )
                continue
            collection.remove(row)

        self.session.flush()
        logger.info(
            "ledger_delta_applied",
            extra={
                "agreement_id": str(agreement.id),
                "created_count": len(delta.creates),
                "destroyed_count": len(delta.destroys),
            },
        )
