"""
Module: retainer_kernel.db.types
Responsibility: Annotated column type aliases and Decimal helpers shared by
    models, selectors and services.
Architecture position: Kernel > DB.  MUST NOT import from models/, domain/,
    services/ or selectors/.

Invariants enforced:
    - No floats for amounts or hours.  Values read back from aggregate SQL
      functions pass through to_decimal() before leaving a selector.
"""

from decimal import Decimal
from typing import Annotated

from sqlalchemy import Numeric

# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Logged or budgeted hours
Hours = Annotated[Decimal, Numeric(38, 9)]

ZERO = Decimal("0")


def to_decimal(value: object) -> Decimal:
    """
    Normalize a numeric value coming back from the database.

    ``None`` (SUM over no rows) becomes ``Decimal("0")``.  Floats are
    converted through ``str`` so no binary artefacts leak into results.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)
