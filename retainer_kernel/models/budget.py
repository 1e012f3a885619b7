"""
Module: retainer_kernel.models.budget
Responsibility: ORM persistence for the monthly labor and overhead budget
    ledgers of a retainer agreement.
Architecture position: Kernel > Models.  May import from db/ and domain/
    value objects only.

Invariants enforced:
    - One row per (agreement, year, month[, activity]).  A row whose year or
      month is NULL is a template: a seed for months not yet assigned.
      Templates never survive a date edit once the range is complete.
    - Rows are replaced (destroyed and recreated), never updated in place
      by the reconciliation engine.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship, validates

from retainer_kernel.db.base import TrackedBase
from retainer_kernel.db.types import Hours, Money
from retainer_kernel.domain.budgets import BudgetKind, BudgetSpec, DatedBudget, TemplateBudget
from retainer_kernel.domain.dtos import BudgetInfo
from retainer_kernel.domain.months import Month
from retainer_kernel.exceptions import InvalidBudgetError

if TYPE_CHECKING:
    from retainer_kernel.models.agreement import RetainerAgreement


class MonthlyBudget(TrackedBase):
    """Columns shared by both budget ledgers."""

    __abstract__ = True

    kind: ClassVar[BudgetKind]

    @declared_attr
    def agreement_id(cls) -> Mapped[UUID]:
        return mapped_column(
            ForeignKey("retainer_agreements.id"),
            nullable=False,
        )

    year: Mapped[int | None] = mapped_column(nullable=True)
    month: Mapped[int | None] = mapped_column(nullable=True)

    budget_amount: Mapped[Money] = mapped_column(default=Decimal("0"))
    hours: Mapped[Hours] = mapped_column(default=Decimal("0"))

    # Optional billable activity the budget is earmarked for
    activity: Mapped[str | None] = mapped_column(String(50), nullable=True)

    @validates("month")
    def _check_month(self, key: str, value: int | None) -> int | None:
        if value is not None and not 1 <= value <= 12:
            raise InvalidBudgetError(self.kind.value, "month", value, "must be in 1..12")
        return value

    @property
    def is_template(self) -> bool:
        return self.year is None or self.month is None

    @property
    def period(self) -> Month | None:
        if self.is_template:
            return None
        return Month(self.year, self.month)

    def to_spec(self) -> BudgetSpec:
        if self.is_template:
            return TemplateBudget(
                amount=self.budget_amount,
                hours=self.hours,
                activity=self.activity,
            )
        return DatedBudget(
            period=self.period,
            amount=self.budget_amount,
            hours=self.hours,
            activity=self.activity,
        )

    def to_dto(self) -> BudgetInfo:
        return BudgetInfo(
            id=self.id,
            kind=self.kind,
            agreement_id=self.agreement_id,
            year=self.year,
            month=self.month,
            amount=self.budget_amount,
            hours=self.hours,
            activity=self.activity,
        )

    def __repr__(self) -> str:
        when = "template" if self.is_template else str(self.period)
        return f"<{type(self).__name__} {when} {self.budget_amount}/{self.hours}h>"


class LaborBudget(MonthlyBudget):
    """Billable labor budgeted for one month."""

    __tablename__ = "labor_budgets"

    __table_args__ = (
        Index("idx_labor_budget_period", "agreement_id", "year", "month"),
    )

    kind = BudgetKind.LABOR

    agreement: Mapped["RetainerAgreement"] = relationship(
        "RetainerAgreement",
        back_populates="labor_budgets",
    )


class OverheadBudget(MonthlyBudget):
    """Non-billable overhead budgeted for one month."""

    __tablename__ = "overhead_budgets"

    __table_args__ = (
        Index("idx_overhead_budget_period", "agreement_id", "year", "month"),
    )

    kind = BudgetKind.OVERHEAD

    agreement: Mapped["RetainerAgreement"] = relationship(
        "RetainerAgreement",
        back_populates="overhead_budgets",
    )


BUDGET_MODELS: dict[BudgetKind, type[MonthlyBudget]] = {
    BudgetKind.LABOR: LaborBudget,
    BudgetKind.OVERHEAD: OverheadBudget,
}


def budget_model(kind: BudgetKind) -> type[MonthlyBudget]:
    return BUDGET_MODELS[kind]
