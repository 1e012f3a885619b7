"""
Module: retainer_kernel.selectors.time_entry_selector
Responsibility: Read access to the time logged against an agreement's issues.
Architecture position: Kernel > Selectors.

Time entries are owned by the time-tracking application; this selector is
the kernel's only window onto them and never mutates them.
"""

from uuid import UUID

from sqlalchemy import select

from retainer_kernel.domain.dtos import TimeEntryInfo
from retainer_kernel.domain.months import Month
from retainer_kernel.models.issue import Issue, TimeEntry
from retainer_kernel.selectors.base import BaseSelector


class TimeEntrySelector(BaseSelector):
    """Queries over issues and their time entries."""

    def issue_ids(self, agreement_id: UUID) -> list[UUID]:
        return list(
            self.session.scalars(
                select(Issue.id).where(Issue.agreement_id == agreement_id)
            ).all()
        )

    def entries_for_issues(
        self,
        issue_ids: list[UUID],
        month: Month | None = None,
    ) -> list[TimeEntryInfo]:
        """
        All entries logged on ``issue_ids``, optionally limited to one
        calendar month.  An empty id list short-circuits to no entries.
        """
        if not issue_ids:
            return []

        stmt = select(TimeEntry).where(TimeEntry.issue_id.in_(issue_ids))
        if month is not None:
            stmt = stmt.where(
                TimeEntry.year == month.year,
                TimeEntry.month == month.month,
            )
        stmt = stmt.order_by(TimeEntry.spent_on)
        return [row.to_dto() for row in self.session.scalars(stmt).all()]

    def entries_for_agreement(
        self,
        agreement_id: UUID,
        month: Month | None = None,
    ) -> list[TimeEntryInfo]:
        return self.entries_for_issues(self.issue_ids(agreement_id), month)
