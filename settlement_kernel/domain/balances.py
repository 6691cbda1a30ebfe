"""
Balances -- pure derivation of a partner's position.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  BalanceAggregator
    feeds it stored records; nothing here reads the database.

Derivation:
    total_profit_due  = sum of profit_due over non-voided calculations
    total_paid        = sum of non-voided payment/settlement/credit_applied
    total_adjustments = sum of non-voided adjustments (signed)
    effective_paid    = total_paid + total_adjustments
    outstanding       = max(total_profit_due - effective_paid, 0)
    credit            = max(effective_paid - total_profit_due, 0)

Invariants enforced:
    - outstanding_balance * credit_balance == 0.
    - Voided calculations and voided payments contribute nothing.
"""

from decimal import Decimal
from typing import Iterable

from settlement_kernel.domain.dtos import (
    PartnerInfo,
    PartnerPaymentInfo,
    PartnerSummary,
    ProfitCalculationInfo,
)
from settlement_kernel.domain.money import ZERO
from settlement_kernel.models.partner_payment import PaymentType


def sum_profit_due(
    partner: PartnerInfo,
    calculations: Iterable[ProfitCalculationInfo],
) -> Decimal:
    total = ZERO
    for calc in calculations:
        if calc.is_voided:
            continue
        due = calc.per_partner_due.get(partner.id)
        if due is not None:
            total += due
    return total


def derive_partner_summary(
    partner: PartnerInfo,
    calculations: Iterable[ProfitCalculationInfo],
    payments: Iterable[PartnerPaymentInfo],
) -> PartnerSummary:
    """
    Build the summary of ``partner`` from its calculations and payments.

    ``payments`` may contain entries for other partners and voided entries;
    both are ignored.
    """
    total_profit_due = sum_profit_due(partner, calculations)

    total_paid = ZERO
    total_adjustments = ZERO
    history: list[PartnerPaymentInfo] = []
    for payment in payments:
        if payment.is_voided or payment.partner_id != partner.id:
            continue
        history.append(payment)
        if payment.payment_type == PaymentType.ADJUSTMENT:
            total_adjustments += payment.amount
        else:
            total_paid += payment.amount

    effective_paid = total_paid + total_adjustments
    outstanding = max(total_profit_due - effective_paid, ZERO)
    credit = max(effective_paid - total_profit_due, ZERO)

    history.sort(key=lambda p: (p.created_at, str(p.id)), reverse=True)
    last_payment_date = next(
        (
            p.created_at
            for p in history
            if p.payment_type in (PaymentType.PAYMENT, PaymentType.SETTLEMENT)
        ),
        None,
    )

    return PartnerSummary(
        partner=partner,
        total_profit_due=total_profit_due,
        total_paid=total_paid,
        total_adjustments=total_adjustments,
        outstanding_balance=outstanding,
        credit_balance=credit,
        last_payment_date=last_payment_date,
        payment_history=tuple(history),
    )
