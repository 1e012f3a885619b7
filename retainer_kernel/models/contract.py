"""
Module: retainer_kernel.models.contract
Responsibility: ORM persistence for the contract an agreement bills under.
    Only the billable rate is consumed by the kernel; contract lifecycle and
    locking rules are owned by the contracts application.
Architecture position: Kernel > Models.  May import from db/ only.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from retainer_kernel.db.base import TrackedBase
from retainer_kernel.db.types import Money

if TYPE_CHECKING:
    from retainer_kernel.models.agreement import RetainerAgreement


class Contract(TrackedBase):
    """
    A customer contract.

    ``billable_rate`` may be NULL for contracts whose rate has not been
    negotiated; labor spend against such a contract reads as zero.
    """

    __tablename__ = "contracts"

    __table_args__ = (
        UniqueConstraint("name", name="uq_contract_name"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    billable_rate: Mapped[Money | None] = mapped_column(nullable=True)

    agreements: Mapped[list["RetainerAgreement"]] = relationship(
        "RetainerAgreement",
        back_populates="contract",
    )

    def __repr__(self) -> str:
        return f"<Contract {self.name} @ {self.billable_rate}>"
