"""
AuditRecorder -- append-only log of mutating ledger operations.

Responsibility:
    Writes one AuditEntry per mutating operation (partner create/update,
    calculation, payment, settlement, void) and lists recent entries for a
    business.

Architecture position:
    Kernel > Services -- imperative shell, called by PartnerRegistry,
    ProfitCalculationEngine, PaymentLedger and SettlementProcessor.

Invariants enforced:
    - Append-only: entries are never modified or deleted (ORM listener on
      the AuditEntry model).
    - Ordering: every entry takes the next value of the ``audit_entry``
      sequence, so "most recent first" is well defined even when two
      entries share a timestamp.

Audit relevance:
    This IS the audit trail.  It is write-only from the ledger's point of
    view; no balance is ever reconstructed from it.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from settlement_kernel.domain.clock import Clock
from settlement_kernel.domain.dtos import AuditEntryInfo
from settlement_kernel.exceptions import ValidationError
from settlement_kernel.logging_config import get_logger
from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType, AuditEntry
from settlement_kernel.selectors.base import audit_entry_to_dto
from settlement_kernel.services.base import BaseService
from settlement_kernel.services.sequence_service import SequenceService

logger = get_logger("services.audit_recorder")


class AuditRecorder(BaseService[AuditEntry]):
    """
    Service for writing and listing audit entries.

    Guarantees:
        - append() is a single write; the returned DTO carries the
          allocated seq.
        - list() never returns more than ``max_limit`` entries.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        default_limit: int = 50,
        max_limit: int = 500,
    ):
        super().__init__(session, clock)
        self._sequence_service = SequenceService(session)
        self._default_limit = default_limit
        self._max_limit = max_limit

    def append(
        self,
        business_id: str,
        entity_type: AuditEntityType,
        entity_id: UUID,
        action: AuditAction,
        description: str,
        actor: str,
        previous_value: dict[str, Any] | None = None,
        new_value: dict[str, Any] | None = None,
    ) -> AuditEntryInfo:
        """
        Append one audit entry.

        Args:
            business_id: Owning tenant.
            entity_type: Kind of record the entry refers to.
            entity_id: Id of that record.
            action: What was done.
            description: Human-readable summary.
            actor: Who did it.
            previous_value: JSON snapshot before the change, if any.
            new_value: JSON snapshot after the change, if any.

        Returns:
            AuditEntryInfo for the persisted entry.
        """
        seq = self._sequence_service.next_value(SequenceService.AUDIT_ENTRY)
        entry = AuditEntry(
            seq=seq,
            business_id=business_id,
            entity_type=AuditEntityType(entity_type).value,
            entity_id=entity_id,
            action=AuditAction(action).value,
            description=description,
            performed_by=actor,
            performed_at=self._clock.now(),
            previous_value=previous_value,
            new_value=new_value,
        )
        self.store.put(entry)

        logger.info(
            "audit_entry_recorded",
            extra={
                "seq": seq,
                "business_id": business_id,
                "entity_type": entry.entity_type,
                "entity_id": str(entity_id),
                "action": entry.action,
            },
        )
        return audit_entry_to_dto(entry)

    def list(self, business_id: str, limit: int | None = None) -> list[AuditEntryInfo]:
        """
        Most recent entries first.

        Raises:
            ValidationError: If ``limit`` is not a positive integer.
        """
        if limit is None:
            limit = self._default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError(
                f"Audit log limit must be a positive integer, got {limit!r}",
                field="limit",
            )
        effective = min(limit, self._max_limit)

        stmt = (
            select(AuditEntry)
            .where(AuditEntry.business_id == business_id)
            .order_by(AuditEntry.seq.desc())
            .limit(effective)
        )
        return [audit_entry_to_dto(e) for e in self.store.list(stmt)]
