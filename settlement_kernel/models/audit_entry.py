"""
Module: settlement_kernel.models.audit_entry
Responsibility: ORM persistence for the append-only settlement audit log.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Audit records are append-only; no UPDATE or DELETE (ORM listener in
      db/immutability.py).
    - seq is monotonically increasing, allocated by SequenceService, and is
      the ordering key for "most recent first" listings.

Audit relevance:
    AuditEntry IS the audit trail.  It is never consulted to reconstruct
    balances; those derive from calculations and payments only.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement_kernel.db.base import Base, UUIDString


class AuditAction(str, Enum):
    """Types of auditable actions."""

    CREATE = "create"
    UPDATE = "update"
    VOID = "void"
    PAYMENT = "payment"
    CALCULATE = "calculate"
    SETTLEMENT = "settlement"


class AuditEntityType(str, Enum):
    """Kinds of record the audit log refers to."""

    PARTNER = "partner"
    PAYMENT = "payment"
    CALCULATION = "calculation"


class AuditEntry(Base):
    """
    One mutating operation on the settlement ledger.

    Contract:
        AuditEntry rows are written once by AuditRecorder and never updated
        or deleted.
    """

    __tablename__ = "audit_entries"

    __table_args__ = (
        Index("idx_audit_business_seq", "business_id", "seq"),
        Index("idx_audit_entity", "entity_type", "entity_id"),
    )

    seq: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        unique=True,
    )

    business_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    entity_type: Mapped[AuditEntityType] = mapped_column(
        String(20),
        nullable=False,
    )

    entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    action: Mapped[AuditAction] = mapped_column(
        String(20),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        String(2000),
        nullable=False,
    )

    performed_by: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    performed_at: Mapped[datetime] = mapped_column(nullable=False)

    # JSON snapshots of the record before / after the change
    previous_value: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )

    new_value: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<AuditEntry #{self.seq} {self.action} on {self.entity_type}:{self.entity_id}>"
