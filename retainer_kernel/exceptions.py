"""
Typed exception hierarchy for the retainer kernel.

Every error has a typed class (catch by type, not by message), a ``code``
class attribute (machine-readable, API-safe), and structured attributes
carrying the context needed to act on it.

    RetainerKernelError (base)
    |
    +-- AgreementError
    |   +-- AgreementNotFoundError
    |   +-- InvalidAgreementError
    |
    +-- BudgetError
    |   +-- InvalidBudgetError
    |
    +-- ReconciliationError

Code                     | When raised
-------------------------|------------------------------------------------
AGREEMENT_NOT_FOUND      | Agreement ID does not exist
INVALID_AGREEMENT        | Agreement attributes rejected at creation
INVALID_BUDGET           | Budget month outside 1-12, negative amount/hours
RECONCILIATION_FAILED    | Storage failure while extending/shrinking/seeding

Degenerate inputs (missing dates, missing contract, missing billable rate,
no issues, empty ranges) are never errors: aggregates return zero and month
queries return empty sequences.

Handling pattern::

    try:
        agreement_service.update_dates(agreement_id, end_date=new_end, actor_id=actor)
    except ReconciliationError as e:
        # The whole edit was rolled back; the agreement keeps its old dates.
        log.warning("edit rejected", extra={"code": e.code, "stage": e.stage})
"""


class RetainerKernelError(Exception):
    """
    Base exception for all retainer kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "RETAINER_KERNEL_ERROR"


# Agreement-related exceptions


class AgreementError(RetainerKernelError):
    """Base exception for agreement-related errors."""

    code: str = "AGREEMENT_ERROR"


class AgreementNotFoundError(AgreementError):
    """Agreement with given ID was not found."""

    code: str = "AGREEMENT_NOT_FOUND"

    def __init__(self, agreement_id: str):
        self.agreement_id = agreement_id
        super().__init__(f"Retainer agreement not found: {agreement_id}")


class InvalidAgreementError(AgreementError):
    """Agreement attributes are invalid."""

    code: str = "INVALID_AGREEMENT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid agreement {field}: {reason}")


# Budget-related exceptions


class BudgetError(RetainerKernelError):
    """Base exception for budget ledger errors."""

    code: str = "BUDGET_ERROR"


class InvalidBudgetError(BudgetError):
    """
    A budget row failed validation before being written.

    Raised by the ledger for out-of-range months and negative amounts or
    hours.  During reconciliation this aborts the enclosing transaction.
    """

    code: str = "INVALID_BUDGET"

    def __init__(self, kind: str, field: str, value: object, reason: str):
        self.kind = kind
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid {kind} budget {field}={value!r}: {reason}"
        )


# Reconciliation exceptions


class ReconciliationError(RetainerKernelError):
    """
    Reconciliation of the budget ledger failed; the edit was rolled back.

    ``stage`` names the operation that failed ("update_dates" or
    "seed_periods").  The underlying error is chained as ``__cause__``.
    """

    code: str = "RECONCILIATION_FAILED"

    def __init__(self, agreement_id: str, stage: str, reason: str):
        self.agreement_id = agreement_id
        self.stage = stage
        self.reason = reason
        super().__init__(
            f"Reconciliation failed for agreement {agreement_id} "
            f"during {stage}: {reason}"
        )
