"""
Module: retainer_kernel.selectors.budget_selector
Responsibility: Read side of the monthly budget ledgers: month lookups with
    blank placeholders, template lookups, ledger snapshots for the
    reconciler, and Decimal sums for the aggregator.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - budgets_for_month() never returns an empty list.  When a month has no
      rows it returns one zero-valued row that is constructed but never
      added to the session.
    - Sums are Decimal; an empty selection sums to Decimal("0").
"""

from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select

from retainer_kernel.db.types import to_decimal
from retainer_kernel.domain.budgets import BudgetKind, LedgerEntry, LedgerSnapshot
from retainer_kernel.domain.months import Month
from retainer_kernel.logging_config import get_logger
from retainer_kernel.models.budget import MonthlyBudget, budget_model
from retainer_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.budget")


class BudgetSelector(BaseSelector):
    """Queries over the labor and overhead budget ledgers."""

    def all_budgets(self, kind: BudgetKind, agreement_id: UUID) -> Sequence[MonthlyBudget]:
        model = budget_model(kind)
        return self.session.scalars(
            select(model)
            .where(model.agreement_id == agreement_id)
            .order_by(model.year, model.month)
        ).all()

    def budgets_at(
        self,
        kind: BudgetKind,
        agreement_id: UUID,
        month: Month,
    ) -> Sequence[MonthlyBudget]:
        model = budget_model(kind)
        return self.session.scalars(
            select(model).where(
                model.agreement_id == agreement_id,
                model.year == month.year,
                model.month == month.month,
            )
        ).all()

    def budgets_for_month(
        self,
        kind: BudgetKind,
        agreement_id: UUID,
        month: Month,
    ) -> list[MonthlyBudget]:
        """
        Persisted budgets for ``month``, or a single unsaved blank budget
        stamped with that month so callers never branch on absence.
        """
        budgets = list(self.budgets_at(kind, agreement_id, month))
        if budgets:
            return budgets

        model = budget_model(kind)
        return [
            model(
                agreement_id=agreement_id,
                year=month.year,
                month=month.month,
                budget_amount=Decimal("0"),
                hours=Decimal("0"),
            )
        ]

    def undated(self, kind: BudgetKind, agreement_id: UUID) -> Sequence[MonthlyBudget]:
        model = budget_model(kind)
        return self.session.scalars(
            select(model).where(
                model.agreement_id == agreement_id,
                or_(model.year.is_(None), model.month.is_(None)),
            )
        ).all()

    def snapshot(self, agreement_id: UUID) -> LedgerSnapshot:
        """Every persisted budget of both kinds, as reconciler entries."""
        entries = []
        for kind in BudgetKind:
            for row in self.all_budgets(kind, agreement_id):
                entries.append(LedgerEntry(kind=kind, budget_id=row.id, spec=row.to_spec()))

        logger.debug(
            "ledger_snapshot_taken",
            extra={"agreement_id": str(agreement_id), "entry_count": len(entries)},
        )
        return LedgerSnapshot(entries=tuple(entries))

    def sum_amount(
        self,
        kind: BudgetKind,
        agreement_id: UUID,
        month: Month | None = None,
    ) -> Decimal:
        model = budget_model(kind)
        return self._sum(model, model.budget_amount, agreement_id, month)

    def sum_hours(
        self,
        kind: BudgetKind,
        agreement_id: UUID,
        month: Month | None = None,
    ) -> Decimal:
        model = budget_model(kind)
        return self._sum(model, model.hours, agreement_id, month)

    def _sum(self, model, column, agreement_id: UUID, month: Month | None) -> Decimal:
        stmt = select(func.sum(column)).where(model.agreement_id == agreement_id)
        if month is not None:
            stmt = stmt.where(model.year == month.year, model.month == month.month)
        return to_decimal(self.session.execute(stmt).scalar())
