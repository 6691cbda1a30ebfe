"""
Module: settlement_kernel.db.record_store
Responsibility: The single I/O boundary between ledger services and the
    database.  Exposes get/list/put over a caller-owned Session and translates
    every SQLAlchemy failure into RecordStoreError.
Architecture position: Kernel > DB.  Used by services/ and selectors/.

Invariants enforced:
    - No delete operation exists.  Ledger records are voided, never removed.
    - put() flushes but never commits; the caller owns the transaction.
    - Store failures surface only as RecordStoreError (a DependencyError);
      there is no retry at this layer.

Failure modes:
    - RecordStoreError wrapping any SQLAlchemyError (connection loss,
      constraint violation, lock timeout).  After such a failure the session
      must be rolled back by its owner.
"""

from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from settlement_kernel.db.base import Base
from settlement_kernel.exceptions import RecordStoreError
from settlement_kernel.logging_config import get_logger

logger = get_logger("db.record_store")

ModelType = TypeVar("ModelType", bound=Base)


class RecordStore:
    """
    Atomic single-record access to ledger tables.

    Contract:
        Wraps a Session supplied by the caller.  Each put() is one flush;
        multi-record atomicity is whatever the caller's transaction gives.
    """

    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def get(self, model: type[ModelType], record_id: UUID) -> ModelType | None:
        """Load one record by primary key, or None."""
        try:
            return self._session.get(model, record_id)
        except SQLAlchemyError as exc:
            raise self._failure("get", exc) from exc

    def list(self, statement: Select) -> list[Any]:
        """Run a SELECT and return the scalar results."""
        try:
            return list(self._session.execute(statement).scalars().all())
        except SQLAlchemyError as exc:
            raise self._failure("list", exc) from exc

    def scalar(self, statement: Select) -> Any:
        """Run a SELECT returning one scalar value (or None)."""
        try:
            return self._session.execute(statement).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._failure("scalar", exc) from exc

    def put(self, record: ModelType) -> ModelType:
        """Insert or update one record and flush it."""
        try:
            self._session.add(record)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise self._failure("put", exc) from exc
        return record

    def _failure(self, operation: str, exc: SQLAlchemyError) -> RecordStoreError:
        logger.error(
            "record_store_failed",
            extra={"operation": operation, "error": type(exc).__name__},
        )
        return RecordStoreError(operation=operation, detail=str(exc))
