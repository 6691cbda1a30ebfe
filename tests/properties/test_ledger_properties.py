"""
Property tests for the settlement ledger.

Each example runs against its own in-memory database, so Hypothesis never
shares state between examples.

Properties:
- A partner never has both an outstanding balance and a credit
- Voiding a payment never raises total_paid and leaves other partners alone
- Voiding a calculation never raises total_profit_due and leaves other
  calculations' contributions alone
- Voiding twice fails and changes nothing
- Summaries are stable across reads when nothing is written
"""

from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from sqlalchemy.orm import sessionmaker

from settlement_kernel.db.engine import build_engine, create_tables
from settlement_kernel.db.immutability import register_immutability_listeners
from settlement_kernel.domain.clock import DeterministicClock
from settlement_kernel.domain.finance_source import FixedTotalsSource
from settlement_kernel.exceptions import AlreadyVoidedError
from settlement_kernel.models.partner_payment import PaymentType
from settlement_kernel.services.settlement_orchestrator import SettlementOrchestrator

BUSINESS = "biz-prop"
ACTOR = "property-actor"

# At most four partners of up to 25% each, so calculations never exceed 100%
shares = st.lists(st.integers(min_value=0, max_value=25), min_size=1, max_size=4)
money = st.decimals(min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2)
signed_money = st.decimals(min_value=Decimal("-50000"), max_value=Decimal("50000"), places=2).filter(
    lambda d: d != 0
)
totals = st.tuples(
    st.decimals(min_value=Decimal("0"), max_value=Decimal("1000000"), places=2),
    st.decimals(min_value=Decimal("0"), max_value=Decimal("1000000"), places=2),
)

# LogContext is cleared by an autouse fixture; it holds no per-example state
PROPERTY_SETTINGS = settings(
    max_examples=25,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


@contextmanager
def fresh_ledger(revenue=Decimal("0"), expenses=Decimal("0")):
    register_immutability_listeners()
    engine = build_engine("sqlite://")
    create_tables(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    source = FixedTotalsSource(revenue, expenses)
    clock = DeterministicClock(datetime(2024, 3, 1, tzinfo=timezone.utc))
    try:
        yield SettlementOrchestrator(session, source, clock=clock), source, clock
    finally:
        session.close()
        engine.dispose()


def _create_partners(orch, share_list):
    return [
        orch.create_partner(BUSINESS, f"Partner {i}", share, ACTOR)
        for i, share in enumerate(share_list)
    ]


def _by_partner(orch):
    return {s.partner_id: s for s in orch.get_all_partner_summaries(BUSINESS)}


class TestBalanceExclusivity:
    @PROPERTY_SETTINGS
    @given(
        share_list=shares,
        period_totals=totals,
        movements=st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=3),
                st.sampled_from(list(PaymentType)),
                signed_money,
            ),
            max_size=8,
        ),
    )
    def test_outstanding_and_credit_never_both_positive(self, share_list, period_totals, movements):
        revenue, expenses = period_totals
        with fresh_ledger(revenue, expenses) as (orch, _, clock):
            partners = _create_partners(orch, share_list)
            orch.calculate_profit(BUSINESS, date(2024, 1, 1), date(2024, 1, 31), ACTOR)

            for index, payment_type, amount in movements:
                partner = partners[index % len(partners)]
                if payment_type.requires_positive_amount:
                    amount = abs(amount)
                clock.advance(1)
                orch.record_payment(BUSINESS, partner.id, amount, payment_type, ACTOR)

            for summary in orch.get_all_partner_summaries(BUSINESS):
                assert summary.outstanding_balance * summary.credit_balance == 0
                assert summary.outstanding_balance >= 0
                assert summary.credit_balance >= 0


class TestVoidMonotonicity:
    @PROPERTY_SETTINGS
    @given(
        share_list=st.lists(st.integers(min_value=0, max_value=25), min_size=2, max_size=4),
        amounts=st.lists(money, min_size=1, max_size=5),
        pick=st.integers(min_value=0),
    )
    def test_voiding_payment(self, share_list, amounts, pick):
        with fresh_ledger(Decimal("10000"), Decimal("2500")) as (orch, _, clock):
            first, *others = _create_partners(orch, share_list)
            orch.calculate_profit(BUSINESS, date(2024, 1, 1), date(2024, 1, 31), ACTOR)

            payments = []
            for amount in amounts:
                clock.advance(1)
                payments.append(orch.record_payment(BUSINESS, first.id, amount, PaymentType.PAYMENT, ACTOR))
            for other in others:
                orch.record_payment(BUSINESS, other.id, Decimal("1"), PaymentType.PAYMENT, ACTOR)

            before = _by_partner(orch)
            target = payments[pick % len(payments)]
            orch.void_payment(BUSINESS, target.id, "property void", ACTOR)
            after = _by_partner(orch)

            assert after[first.id].total_paid <= before[first.id].total_paid
            assert after[first.id].total_paid == before[first.id].total_paid - target.amount
            for other in others:
                assert after[other.id] == before[other.id]

    @PROPERTY_SETTINGS
    @given(share_list=shares, first_totals=totals, second_totals=totals)
    def test_voiding_calculation(self, share_list, first_totals, second_totals):
        # Profitable periods only: voiding a loss period legitimately raises the due
        first_revenue, first_expenses = sorted(first_totals, reverse=True)
        second_revenue, second_expenses = sorted(second_totals, reverse=True)

        with fresh_ledger(first_revenue, first_expenses) as (orch, source, clock):
            partners = _create_partners(orch, share_list)
            voided = orch.calculate_profit(BUSINESS, date(2024, 1, 1), date(2024, 1, 31), ACTOR)
            clock.advance(1)
            source.set_totals(second_revenue, second_expenses)
            kept = orch.calculate_profit(BUSINESS, date(2024, 2, 1), date(2024, 2, 29), ACTOR)

            before = _by_partner(orch)
            orch.void_calculation(BUSINESS, voided.id, "property void", ACTOR)
            after = _by_partner(orch)

            for partner in partners:
                assert after[partner.id].total_profit_due <= before[partner.id].total_profit_due
                assert after[partner.id].total_profit_due == kept.per_partner_due.get(
                    partner.id, Decimal("0")
                )


class TestVoidIdempotence:
    @PROPERTY_SETTINGS
    @given(amount=money)
    def test_double_void_payment(self, amount):
        with fresh_ledger(Decimal("5000"), Decimal("2000")) as (orch, _, _clock):
            (partner,) = _create_partners(orch, [100])
            payment = orch.record_payment(BUSINESS, partner.id, amount, PaymentType.PAYMENT, ACTOR)
            orch.void_payment(BUSINESS, payment.id, "first", ACTOR)
            snapshot = orch.get_all_partner_summaries(BUSINESS)

            with pytest.raises(AlreadyVoidedError):
                orch.void_payment(BUSINESS, payment.id, "second", ACTOR)

            assert orch.get_all_partner_summaries(BUSINESS) == snapshot

    def test_double_void_calculation(self):
        with fresh_ledger(Decimal("5000"), Decimal("2000")) as (orch, _, _clock):
            _create_partners(orch, [60, 40])
            calc = orch.calculate_profit(BUSINESS, date(2024, 1, 1), date(2024, 1, 31), ACTOR)
            orch.void_calculation(BUSINESS, calc.id, "first", ACTOR)
            snapshot = orch.get_all_partner_summaries(BUSINESS)

            with pytest.raises(AlreadyVoidedError):
                orch.void_calculation(BUSINESS, calc.id, "second", ACTOR)

            assert orch.get_all_partner_summaries(BUSINESS) == snapshot


class TestReadStability:
    @PROPERTY_SETTINGS
    @given(share_list=shares, period_totals=totals, amounts=st.lists(money, max_size=4))
    def test_consecutive_reads_equal(self, share_list, period_totals, amounts):
        revenue, expenses = period_totals
        with fresh_ledger(revenue, expenses) as (orch, _, clock):
            partners = _create_partners(orch, share_list)
            orch.calculate_profit(BUSINESS, date(2024, 1, 1), date(2024, 1, 31), ACTOR)
            for amount in amounts:
                clock.advance(1)
                orch.record_payment(BUSINESS, partners[0].id, amount, PaymentType.SETTLEMENT, ACTOR)

            assert orch.get_all_partner_summaries(BUSINESS) == orch.get_all_partner_summaries(BUSINESS)
