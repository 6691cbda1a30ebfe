"""
PaymentLedger -- payments, adjustments, settlements and credit applications.

Responsibility:
    Records signed movements against a partner's position and voids them.
    Balances are never stored; BalanceAggregator derives them from these
    rows.

Architecture position:
    Kernel > Services.  Depends on PartnerRegistry and AuditRecorder.

Invariants enforced:
    - amount > 0 for payment, settlement and credit_applied.
    - amount != 0 for adjustment (signed).
    - partner_name is copied from the partner at write time.
    - The only later mutation is the void flag flip, with a non-empty
      reason, at most once.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from settlement_kernel.domain.clock import Clock
from settlement_kernel.domain.dtos import PartnerPaymentInfo
from settlement_kernel.domain.money import to_nonzero_amount, to_positive_amount
from settlement_kernel.exceptions import (
    InvalidPeriodError,
    MissingVoidReasonError,
    PaymentAlreadyVoidedError,
    PaymentNotFoundError,
    ValidationError,
)
from settlement_kernel.logging_config import get_logger
from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType
from settlement_kernel.models.partner_payment import PartnerPayment, PaymentType
from settlement_kernel.selectors.base import payment_to_dto
from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.base import BaseService
from settlement_kernel.services.partner_registry import PartnerRegistry
from settlement_kernel.utils.hashing import snapshot

logger = get_logger("services.payment_ledger")

_SNAPSHOT_EXCLUDE = ("created_at", "voided_at")


def _coerce_payment_type(payment_type: PaymentType | str) -> PaymentType:
    try:
        return PaymentType(payment_type)
    except ValueError:
        allowed = ", ".join(t.value for t in PaymentType)
        raise ValidationError(
            f"Unknown payment type {payment_type!r}; expected one of {allowed}",
            field="payment_type",
        ) from None


class PaymentLedger(BaseService[PartnerPayment]):
    """
    Service for recording and voiding partner payments.

    All public methods return PartnerPaymentInfo DTOs.
    """

    def __init__(
        self,
        session: Session,
        registry: PartnerRegistry,
        audit: AuditRecorder,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self._registry = registry
        self._audit = audit

    def _get_owned(self, business_id: str, payment_id: UUID) -> PartnerPayment:
        payment = self.store.get(PartnerPayment, payment_id)
        if payment is None or payment.business_id != business_id:
            raise PaymentNotFoundError(str(payment_id))
        return payment

    def get_payment(self, business_id: str, payment_id: UUID) -> PartnerPaymentInfo:
        """
        Raises:
            PaymentNotFoundError: Unknown payment for the business.
        """
        return payment_to_dto(self._get_owned(business_id, payment_id))

    def record_payment(
        self,
        business_id: str,
        partner_id: UUID,
        amount: Decimal | int | str,
        payment_type: PaymentType | str,
        actor: str,
        description: str = "",
        reference: str | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> PartnerPaymentInfo:
        """
        Record a movement against a partner.

        Args:
            business_id: Owning tenant.
            partner_id: Partner the movement applies to.
            amount: Positive for payment/settlement/credit_applied, non-zero
                signed for adjustment.
            payment_type: Kind of movement.
            actor: Who recorded it.
            description: Free text.
            reference: External reference (bank transfer id, ...).
            period_start: Optional start of the period the payment covers.
            period_end: Optional end of that period.

        Returns:
            PartnerPaymentInfo for the new, non-voided entry.

        Raises:
            PartnerNotFoundError: Unknown partner for the business.
            ValidationError: Unknown type, wrong amount sign, or an inverted
                period.
        """
        kind = _coerce_payment_type(payment_type)
        partner = self._registry.get(business_id, partner_id)

        if kind.requires_positive_amount:
            value = to_positive_amount(amount)
        else:
            value = to_nonzero_amount(amount)

        if period_start is not None and period_end is not None and period_end <= period_start:
            raise InvalidPeriodError(str(period_start), str(period_end))

        if not partner.is_active:
            logger.warning(
                "payment_to_inactive_partner",
                extra={"business_id": business_id, "partner_id": str(partner_id)},
            )

        payment = PartnerPayment(
            business_id=business_id,
            partner_id=partner.id,
            partner_name=partner.name,
            amount=value,
            payment_type=kind.value,
            description=description or "",
            reference=reference,
            period_start=period_start,
            period_end=period_end,
            created_at=self._clock.now(),
            created_by=actor,
            is_voided=False,
        )
        self.store.put(payment)
        info = payment_to_dto(payment)

        # Adjustments change the position rather than paying it
        action = AuditAction.UPDATE if kind == PaymentType.ADJUSTMENT else AuditAction.PAYMENT
        self._audit.append(
            business_id=business_id,
            entity_type=AuditEntityType.PAYMENT,
            entity_id=payment.id,
            action=action,
            description=f"Recorded {kind.value} of {value} for {partner.name}",
            actor=actor,
            new_value=snapshot(info, exclude=_SNAPSHOT_EXCLUDE),
        )
        logger.info(
            "payment_recorded",
            extra={
                "business_id": business_id,
                "payment_id": str(payment.id),
                "partner_id": str(partner.id),
                "payment_type": kind.value,
                "amount": str(value),
            },
        )
        return info

    def void_payment(
        self,
        business_id: str,
        payment_id: UUID,
        reason: str,
        actor: str,
    ) -> PartnerPaymentInfo:
        """
        Void a payment.  Terminal and irreversible.

        Raises:
            MissingVoidReasonError: Empty or blank reason.
            PaymentNotFoundError: Unknown payment for the business.
            PaymentAlreadyVoidedError: Already voided.
        """
        if reason is None or not reason.strip():
            raise MissingVoidReasonError("payment", str(payment_id))

        payment = self._get_owned(business_id, payment_id)
        if payment.is_voided:
            raise PaymentAlreadyVoidedError(str(payment_id))

        payment.is_voided = True
        payment.voided_at = self._clock.now()
        payment.voided_by = actor
        payment.void_reason = reason.strip()
        self.store.put(payment)
        info = payment_to_dto(payment)

        self._audit.append(
            business_id=business_id,
            entity_type=AuditEntityType.PAYMENT,
            entity_id=payment.id,
            action=AuditAction.VOID,
            description=(
                f"Voided {payment.payment_type} of {payment.amount} "
                f"for {payment.partner_name}: {payment.void_reason}"
            ),
            actor=actor,
            previous_value={"is_voided": False},
            new_value={"is_voided": True, "void_reason": payment.void_reason},
        )
        logger.info(
            "payment_voided",
            extra={
                "business_id": business_id,
                "payment_id": str(payment.id),
                "partner_id": str(payment.partner_id),
                "reason": payment.void_reason,
            },
        )
        return info
