"""
SettlementProcessor -- settle a partner's outstanding balance.

Responsibility:
    Reads the partner's current position, records a ``settlement`` entry for
    the requested amount through PaymentLedger, and adds a ``settlement``
    audit entry describing the balance before the settlement.

Architecture position:
    Kernel > Services.  Built on PaymentLedger, BalanceAggregator and
    AuditRecorder.

Invariants enforced:
    - amount > 0.
    - The full requested amount is recorded.  Paying more than is
      outstanding is allowed; the excess shows up as credit_balance through
      derivation, never through a stored balance.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from settlement_kernel.domain.clock import Clock
from settlement_kernel.domain.dtos import SettlementResult
from settlement_kernel.domain.money import to_positive_amount
from settlement_kernel.logging_config import get_logger
from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType
from settlement_kernel.models.partner_payment import PartnerPayment, PaymentType
from settlement_kernel.selectors.balance_aggregator import BalanceAggregator
from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.base import BaseService
from settlement_kernel.services.payment_ledger import PaymentLedger

logger = get_logger("services.settlement_processor")

DEFAULT_SETTLEMENT_DESCRIPTION = "Balance settlement"


class SettlementProcessor(BaseService[PartnerPayment]):
    """Applies settlements against partner balances."""

    def __init__(
        self,
        session: Session,
        ledger: PaymentLedger,
        audit: AuditRecorder,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self._ledger = ledger
        self._audit = audit
        self._balances = BalanceAggregator(session)

    def settle_partner_balance(
        self,
        business_id: str,
        partner_id: UUID,
        amount: Decimal | int | str,
        description: str | None,
        actor: str,
    ) -> SettlementResult:
        """
        Settle ``amount`` against the partner's balance.

        Returns:
            SettlementResult with the recorded payment and the outstanding
            and credit balances as they were before the settlement.

        Raises:
            InvalidAmountError: amount <= 0.
            PartnerNotFoundError: Unknown partner for the business.
        """
        value = to_positive_amount(amount)
        before = self._balances.get_partner_summary(business_id, partner_id)

        payment = self._ledger.record_payment(
            business_id=business_id,
            partner_id=partner_id,
            amount=value,
            payment_type=PaymentType.SETTLEMENT,
            actor=actor,
            description=description or DEFAULT_SETTLEMENT_DESCRIPTION,
        )

        self._audit.append(
            business_id=business_id,
            entity_type=AuditEntityType.PAYMENT,
            entity_id=payment.id,
            action=AuditAction.SETTLEMENT,
            description=(
                f"Settled {value} for {payment.partner_name}; "
                f"outstanding before settlement {before.outstanding_balance}"
            ),
            actor=actor,
            previous_value={
                "outstanding_balance": str(before.outstanding_balance),
                "credit_balance": str(before.credit_balance),
            },
            new_value={"settled_amount": str(value)},
        )
        logger.info(
            "partner_balance_settled",
            extra={
                "business_id": business_id,
                "partner_id": str(partner_id),
                "payment_id": str(payment.id),
                "amount": str(value),
                "previous_outstanding": str(before.outstanding_balance),
                "overpayment": value > before.outstanding_balance,
            },
        )
        return SettlementResult(
            payment=payment,
            previous_outstanding=before.outstanding_balance,
            previous_credit=before.credit_balance,
        )
