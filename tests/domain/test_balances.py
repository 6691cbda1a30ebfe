"""Tests for the pure balance derivation (domain/balances.py)."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from settlement_kernel.domain.balances import derive_partner_summary, sum_profit_due
from settlement_kernel.domain.dtos import (
    PartnerInfo,
    PartnerPaymentInfo,
    ProfitAllocationInfo,
    ProfitCalculationInfo,
)
from settlement_kernel.models.partner_payment import PaymentType
from settlement_kernel.models.profit_calculation import CalculationStatus

_T0 = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _partner(name="Alice", share="60") -> PartnerInfo:
    return PartnerInfo(
        id=uuid4(),
        business_id="biz",
        name=name,
        email=None,
        phone=None,
        profit_share_percentage=Decimal(share),
        is_active=True,
        created_at=_T0,
        updated_at=_T0,
        created_by="t",
        updated_by=None,
    )


def _calc(partner, due, status=CalculationStatus.FINALIZED) -> ProfitCalculationInfo:
    return ProfitCalculationInfo(
        id=uuid4(),
        business_id="biz",
        period_start=date(2024, 1, 1),
        period_end=date(2024, 1, 31),
        total_revenue=Decimal("0"),
        total_expenses=Decimal("0"),
        net_profit=Decimal("0"),
        allocations=(
            ProfitAllocationInfo(
                partner_id=partner.id,
                partner_name=partner.name,
                share_percentage=partner.profit_share_percentage,
                profit_due=Decimal(due),
            ),
        ),
        status=status,
        calculated_at=_T0,
        calculated_by="t",
    )


def _payment(partner, amount, kind=PaymentType.PAYMENT, voided=False, minutes=0):
    return PartnerPaymentInfo(
        id=uuid4(),
        business_id="biz",
        partner_id=partner.id,
        partner_name=partner.name,
        amount=Decimal(amount),
        payment_type=kind,
        description="",
        reference=None,
        period_start=None,
        period_end=None,
        created_at=_T0 + timedelta(minutes=minutes),
        created_by="t",
        is_voided=voided,
    )


class TestDerivePartnerSummary:
    def test_outstanding_after_partial_payment(self):
        p = _partner()
        summary = derive_partner_summary(p, [_calc(p, "1800")], [_payment(p, "1000")])

        assert summary.total_profit_due == Decimal("1800")
        assert summary.total_paid == Decimal("1000")
        assert summary.outstanding_balance == Decimal("800")
        assert summary.credit_balance == Decimal("0")
        assert summary.net_balance == Decimal("800")

    def test_overpayment_becomes_credit(self):
        p = _partner()
        payments = [_payment(p, "1000"), _payment(p, "1100", PaymentType.SETTLEMENT, minutes=1)]
        summary = derive_partner_summary(p, [_calc(p, "1800")], payments)

        assert summary.total_paid == Decimal("2100")
        assert summary.outstanding_balance == Decimal("0")
        assert summary.credit_balance == Decimal("300")
        assert summary.net_balance == Decimal("-300")

    def test_adjustments_tracked_separately(self):
        p = _partner()
        payments = [
            _payment(p, "500"),
            _payment(p, "-200", PaymentType.ADJUSTMENT, minutes=1),
        ]
        summary = derive_partner_summary(p, [_calc(p, "1000")], payments)

        assert summary.total_paid == Decimal("500")
        assert summary.total_adjustments == Decimal("-200")
        assert summary.effective_paid == Decimal("300")
        assert summary.outstanding_balance == Decimal("700")

    def test_credit_applied_counts_as_paid(self):
        p = _partner()
        summary = derive_partner_summary(
            p, [_calc(p, "100")], [_payment(p, "40", PaymentType.CREDIT_APPLIED)]
        )
        assert summary.total_paid == Decimal("40")
        assert summary.outstanding_balance == Decimal("60")

    def test_voided_records_ignored(self):
        p = _partner()
        calcs = [_calc(p, "1000"), _calc(p, "999", CalculationStatus.VOIDED)]
        payments = [_payment(p, "100"), _payment(p, "900", voided=True)]

        summary = derive_partner_summary(p, calcs, payments)

        assert summary.total_profit_due == Decimal("1000")
        assert summary.total_paid == Decimal("100")
        assert len(summary.payment_history) == 1

    def test_other_partners_ignored(self):
        p = _partner("Alice")
        q = _partner("Bob")
        summary = derive_partner_summary(
            p, [_calc(p, "10"), _calc(q, "500")], [_payment(q, "5")]
        )
        assert summary.total_profit_due == Decimal("10")
        assert summary.total_paid == Decimal("0")

    def test_loss_period_reduces_due(self):
        p = _partner()
        summary = derive_partner_summary(p, [_calc(p, "1000"), _calc(p, "-400")], [])
        assert summary.total_profit_due == Decimal("600")

    def test_net_loss_shows_as_credit(self):
        p = _partner()
        summary = derive_partner_summary(p, [_calc(p, "-400")], [])
        assert summary.total_profit_due == Decimal("-400")
        assert summary.outstanding_balance == Decimal("0")
        assert summary.credit_balance == Decimal("400")

    def test_history_newest_first_and_last_payment_date(self):
        p = _partner()
        first = _payment(p, "10", minutes=0)
        adj = _payment(p, "5", PaymentType.ADJUSTMENT, minutes=5)
        second = _payment(p, "20", PaymentType.SETTLEMENT, minutes=2)

        summary = derive_partner_summary(p, [], [first, adj, second])

        assert [x.id for x in summary.payment_history] == [adj.id, second.id, first.id]
        assert summary.last_payment_date == second.created_at

    def test_no_records(self):
        p = _partner()
        summary = derive_partner_summary(p, [], [])
        assert summary.total_profit_due == Decimal("0")
        assert summary.outstanding_balance == Decimal("0")
        assert summary.credit_balance == Decimal("0")
        assert summary.last_payment_date is None
        assert summary.payment_history == ()


class TestSumProfitDue:
    def test_calculations_without_partner_contribute_nothing(self):
        p = _partner()
        q = _partner("Bob")
        assert sum_profit_due(p, [_calc(q, "100")]) == Decimal("0")
