"""
Module: retainer_kernel.models.issue
Responsibility: ORM persistence for the issues assigned to an agreement and
    the time logged against them.  The kernel only reads time entries.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - TimeEntry.year/month default to the calendar month of spent_on, so
      month-scoped spend queries can filter on (year, month) directly.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from retainer_kernel.db.base import TrackedBase
from retainer_kernel.db.types import Hours, Money
from retainer_kernel.domain.dtos import TimeEntryInfo

if TYPE_CHECKING:
    from retainer_kernel.models.agreement import RetainerAgreement


class Issue(TrackedBase):
    """A unit of work assigned to an agreement."""

    __tablename__ = "issues"

    __table_args__ = (
        Index("idx_issue_agreement", "agreement_id"),
    )

    subject: Mapped[str] = mapped_column(String(255), nullable=False)

    agreement_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("retainer_agreements.id"),
        nullable=True,
    )

    agreement: Mapped["RetainerAgreement"] = relationship(
        "RetainerAgreement",
        back_populates="issues",
    )

    time_entries: Mapped[list["TimeEntry"]] = relationship(
        "TimeEntry",
        back_populates="issue",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Issue {self.subject}>"


class TimeEntry(TrackedBase):
    """
    Hours logged against an issue.

    ``billable`` partitions spend: billable entries are labor spend,
    non-billable entries are overhead spend.
    """

    __tablename__ = "time_entries"

    __table_args__ = (
        Index("idx_time_entry_issue_period", "issue_id", "year", "month"),
    )

    issue_id: Mapped[UUID] = mapped_column(
        ForeignKey("issues.id"),
        nullable=False,
    )

    spent_on: Mapped[date] = mapped_column(Date, nullable=False)

    year: Mapped[int] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)

    hours: Mapped[Hours] = mapped_column(nullable=False)
    cost: Mapped[Money] = mapped_column(default=Decimal("0"))
    billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    issue: Mapped["Issue"] = relationship(
        "Issue",
        back_populates="time_entries",
    )

    @validates("spent_on")
    def _stamp_period(self, key: str, value: date) -> date:
        if value is not None:
            if self.year is None:
                self.year = value.year
            if self.month is None:
                self.month = value.month
        return value

    def to_dto(self) -> TimeEntryInfo:
        return TimeEntryInfo(
            id=self.id,
            issue_id=self.issue_id,
            spent_on=self.spent_on,
            year=self.year,
            month=self.month,
            hours=self.hours,
            cost=self.cost,
            billable=self.billable,
        )

    def __repr__(self) -> str:
        flag = "billable" if self.billable else "overhead"
        return f"<TimeEntry {self.spent_on} {self.hours}h {flag}>"
