"""
Module: settlement_kernel.models.partner_payment
Responsibility: ORM persistence for payments, adjustments, settlements and
    credit applications recorded against partners.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - amount > 0 for PAYMENT, SETTLEMENT and CREDIT_APPLIED; any non-zero
      signed amount for ADJUSTMENT (validated by PaymentLedger).
    - The only mutation is the void flag flip False -> True together with
      the void metadata (db/immutability.py).  Rows are never deleted.
    - partner_name is denormalized at write time and never refreshed.

Audit relevance:
    Every payment row is mirrored by an AuditEntry.  Voided rows remain for
    traceability and are excluded from balance derivation.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement_kernel.db.base import Base, UUIDString


class PaymentType(str, Enum):
    """Kind of partner ledger entry.

    Contract:
        PAYMENT, SETTLEMENT and CREDIT_APPLIED are strictly positive and count
        toward total_paid.  ADJUSTMENT is a signed manual correction: positive
        behaves like a payment, negative like additional due.
        CREDIT_APPLIED is reserved for explicitly drawing down an existing
        credit against a new due amount.
    """

    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"
    SETTLEMENT = "settlement"
    CREDIT_APPLIED = "credit_applied"

    @property
    def requires_positive_amount(self) -> bool:
        return self is not PaymentType.ADJUSTMENT


class PartnerPayment(Base):
    """
    A single signed movement on a partner's position.

    Contract:
        Created by PaymentLedger (directly or through SettlementProcessor).
        Reversal is expressed by setting is_voided, never by deleting.
    """

    __tablename__ = "partner_payments"

    __table_args__ = (
        Index("idx_payment_business", "business_id"),
        Index("idx_payment_business_partner", "business_id", "partner_id"),
    )

    business_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    partner_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("partners.id"),
        nullable=False,
    )

    # Denormalized at write time
    partner_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    payment_type: Mapped[PaymentType] = mapped_column(
        String(20),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        default="",
    )

    # External reference (bank transfer id, cheque number, ...)
    reference: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Period the payment is meant to cover (informational)
    period_start: Mapped[date | None] = mapped_column(Date, nullable=True)

    period_end: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False)

    created_by: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    is_voided: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    voided_at: Mapped[datetime | None] = mapped_column(nullable=True)

    voided_by: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    void_reason: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
    )

    def __repr__(self) -> str:
        state = " VOIDED" if self.is_voided else ""
        return f"<PartnerPayment {self.payment_type} {self.amount} -> {self.partner_name}{state}>"
