"""ORM models for the retainer kernel."""

from retainer_kernel.models.agreement import AgreementStatus, RetainerAgreement
from retainer_kernel.models.budget import (
    BUDGET_MODELS,
    LaborBudget,
    MonthlyBudget,
    OverheadBudget,
    budget_model,
)
from retainer_kernel.models.contract import Contract
from retainer_kernel.models.issue import Issue, TimeEntry

__all__ = [
    "AgreementStatus",
    "RetainerAgreement",
    "MonthlyBudget",
    "LaborBudget",
    "OverheadBudget",
    "BUDGET_MODELS",
    "budget_model",
    "Contract",
    "Issue",
    "TimeEntry",
]
