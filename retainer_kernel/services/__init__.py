"""Kernel services: agreement lifecycle, ledger writes and aggregation."""

from retainer_kernel.services.agreement_service import UNCHANGED, AgreementService
from retainer_kernel.services.aggregation_service import (
    AggregationService,
    ScopeStatus,
    scope_status,
)
from retainer_kernel.services.base import BaseService
from retainer_kernel.services.ledger_service import LedgerService

__all__ = [
    "BaseService",
    "LedgerService",
    "AgreementService",
    "UNCHANGED",
    "AggregationService",
    "ScopeStatus",
    "scope_status",
]
