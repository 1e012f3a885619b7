"""
BaseService -- abstract base for kernel write services.

Responsibility:
    Common constructor and session-handling contract.  Kernel services
    receive a SQLAlchemy ``Session`` and persist through
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services.  The transaction boundary belongs to the caller
    (``AgreementService`` or ``session_scope()``), so several kernel writes
    can be combined into one atomic unit.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from retainer_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for flush-only kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide read-only queries -- those belong in
          ``retainer_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
