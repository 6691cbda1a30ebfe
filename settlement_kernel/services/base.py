"""
BaseService -- abstract base for all settlement kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for every
    service in the kernel layer.  All concrete services inherit from
    BaseService, receiving a SQLAlchemy ``Session`` that they use through a
    RecordStore -- flush only, never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's transaction
      and never commit or rollback themselves.  SettlementOrchestrator (or
      session_scope(), or the test harness) owns commit/rollback.

Failure modes:
    - If a subclass calls ``session.commit()`` itself, a failure in a later
      step (for example the audit write) can no longer undo the earlier one.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from settlement_kernel.db.base import Base
from settlement_kernel.db.record_store import RecordStore
from settlement_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.
        - All timestamps come from the injected Clock.

    Non-goals:
        - Does NOT provide query-only listings -- those belong in
          ``settlement_kernel/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.store = RecordStore(session)
        self._clock = clock or SystemClock()
