"""
Module: retainer_kernel.models.agreement
Responsibility: ORM persistence for retainer agreements -- recurring
    contracts billed monthly against rolling labor and overhead budgets.
Architecture position: Kernel > Models.  May import from db/ and domain/
    value objects only.

Invariants enforced:
    - The effective range is [beginning_of_month(start_date),
      end_of_month(end_date)]; empty if either bound is absent.
    - Labor and overhead budgets are exclusively owned: deleting the
      agreement deletes them (cascade all, delete-orphan).

Failure modes:
    - IntegrityError if contract_id references a missing contract.
"""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from retainer_kernel.db.base import TrackedBase
from retainer_kernel.domain.dtos import AgreementInfo
from retainer_kernel.domain.months import MonthRange

if TYPE_CHECKING:
    from retainer_kernel.models.budget import LaborBudget, OverheadBudget
    from retainer_kernel.models.contract import Contract
    from retainer_kernel.models.issue import Issue


class AgreementStatus(str, Enum):
    """Deliverable status carried for display; lifecycle rules live elsewhere."""

    OPEN = "open"
    LOCKED = "locked"
    CLOSED = "closed"


class RetainerAgreement(TrackedBase):
    """
    A deliverable renewed at regular calendar periods.

    The company bills a regular number of hours at an hourly rate, and the
    budgets reset every calendar month.  Each month in the range carries
    its own labor and overhead budget rows.
    """

    __tablename__ = "retainer_agreements"

    __table_args__ = (
        Index("idx_agreement_contract", "contract_id"),
        Index("idx_agreement_dates", "start_date", "end_date"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AgreementStatus.OPEN.value,
    )

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    contract_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("contracts.id"),
        nullable=True,
    )

    contract: Mapped["Contract"] = relationship(
        "Contract",
        back_populates="agreements",
    )

    issues: Mapped[list["Issue"]] = relationship(
        "Issue",
        back_populates="agreement",
        cascade="all, delete-orphan",
    )

    labor_budgets: Mapped[list["LaborBudget"]] = relationship(
        "LaborBudget",
        back_populates="agreement",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    overhead_budgets: Mapped[list["OverheadBudget"]] = relationship(
        "OverheadBudget",
        back_populates="agreement",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def short_type(self) -> str:
        return "R"

    @property
    def month_range(self) -> MonthRange:
        return MonthRange(self.start_date, self.end_date)

    def to_dto(self) -> AgreementInfo:
        month_range = self.month_range
        return AgreementInfo(
            id=self.id,
            title=self.title,
            short_type=self.short_type,
            status=self.status,
            start_date=self.start_date,
            end_date=self.end_date,
            beginning_date=month_range.beginning_date,
            ending_date=month_range.ending_date,
            contract_id=self.contract_id,
        )

    def __repr__(self) -> str:
        return f"<RetainerAgreement {self.title} {self.start_date}..{self.end_date}>"
