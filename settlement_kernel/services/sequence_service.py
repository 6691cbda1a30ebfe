"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides strictly monotonically increasing sequence numbers for audit
    entries.  Uses a dedicated counter table with row-level locking
    (``SELECT ... FOR UPDATE``) to guarantee uniqueness and ordering under
    concurrent access.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by AuditRecorder.

Invariants enforced:
    - Sequence monotonicity: the locked counter row is the sole source of
      truth for the next value.  Aggregate max-plus-one is never used.
    - Transactional: the increment is only visible after the caller's
      transaction commits.  Rollback returns the value.

Failure modes:
    - RecordStoreError: two sessions creating the same counter row at once
      (unique constraint).  The first allocation of a sequence name should
      happen before concurrent use.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from settlement_kernel.db.record_store import RecordStore
from settlement_kernel.logging_config import get_logger
from settlement_kernel.models.sequence_counter import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.

    Usage:
        seq = sequence_service.next_value(SequenceService.AUDIT_ENTRY)
    """

    # Well-known sequence names
    AUDIT_ENTRY = "audit_entry"

    def __init__(self, session: Session):
        self._store = RecordStore(session)

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._store.scalar(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()  # Row-level lock
            .execution_options(populate_existing=True)
        )

    def next_value(self, sequence_name: str) -> int:
        """
        Get the next value for a named sequence.

        Postconditions:
            - Returns an integer > 0 strictly greater than any previously
              returned value for this sequence name.
            - The counter row is locked until the transaction completes.
        """
        counter = self._locked_counter(sequence_name)
        if counter is None:
            # First use of this sequence
            counter = self._store.put(
                SequenceCounter(name=sequence_name, current_value=0)
            )

        counter.current_value += 1
        self._store.put(counter)
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Current value of a sequence without incrementing (None if unused)."""
        return self._store.scalar(
            select(SequenceCounter.current_value).where(
                SequenceCounter.name == sequence_name
            )
        )
