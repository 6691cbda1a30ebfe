"""
Pytest fixtures for the settlement kernel test suite.

Provides:
- An isolated in-memory SQLite database per test
- A deterministic clock and a fixed-totals finance source
- Service, selector and orchestrator fixtures wired to the same session
- Structured log capture
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from settlement_kernel.db.engine import build_engine, create_tables
from settlement_kernel.db.immutability import register_immutability_listeners
from settlement_kernel.domain.clock import DeterministicClock
from settlement_kernel.domain.finance_source import FixedTotalsSource
from settlement_kernel.domain.policy import LedgerPolicy
from settlement_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from settlement_kernel.selectors.balance_aggregator import BalanceAggregator
from settlement_kernel.selectors.ledger_selector import LedgerSelector
from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.partner_registry import PartnerRegistry
from settlement_kernel.services.payment_ledger import PaymentLedger
from settlement_kernel.services.profit_calculation_engine import ProfitCalculationEngine
from settlement_kernel.services.settlement_orchestrator import SettlementOrchestrator
from settlement_kernel.services.settlement_processor import SettlementProcessor

# Test actor for all test operations
TEST_ACTOR = "test-actor"
TEST_BUSINESS_ID = "biz-001"
OTHER_BUSINESS_ID = "biz-002"

PERIOD_START = date(2024, 1, 1)
PERIOD_END = date(2024, 1, 31)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture settlement_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.create_partner(...)
            logs = captured_logs()
            assert any(r["message"] == "partner_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("settlement_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all ledger tables."""
    register_immutability_listeners()
    eng = build_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    sess = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def session_factory(engine):
    """Factory for extra sessions on the same database (fresh identity maps)."""
    return sessionmaker(bind=engine, expire_on_commit=False)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def test_actor() -> str:
    return TEST_ACTOR


@pytest.fixture
def business_id() -> str:
    return TEST_BUSINESS_ID


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 2, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def finance_source() -> FixedTotalsSource:
    """Revenue 5000, expenses 2000 unless a test says otherwise."""
    return FixedTotalsSource(total_revenue=Decimal("5000"), total_expenses=Decimal("2000"))


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def audit_recorder(session, deterministic_clock) -> AuditRecorder:
    return AuditRecorder(session, deterministic_clock)


@pytest.fixture
def partner_registry(session, audit_recorder, deterministic_clock) -> PartnerRegistry:
    return PartnerRegistry(session, audit_recorder, deterministic_clock)


@pytest.fixture
def enforcing_registry(session, audit_recorder, deterministic_clock) -> PartnerRegistry:
    return PartnerRegistry(
        session, audit_recorder, deterministic_clock, enforce_share_total=True
    )


@pytest.fixture
def calculation_engine(
    session, finance_source, partner_registry, audit_recorder, deterministic_clock
) -> ProfitCalculationEngine:
    return ProfitCalculationEngine(
        session, finance_source, partner_registry, audit_recorder, deterministic_clock
    )


@pytest.fixture
def payment_ledger(session, partner_registry, audit_recorder, deterministic_clock) -> PaymentLedger:
    return PaymentLedger(session, partner_registry, audit_recorder, deterministic_clock)


@pytest.fixture
def settlement_processor(
    session, payment_ledger, audit_recorder, deterministic_clock
) -> SettlementProcessor:
    return SettlementProcessor(session, payment_ledger, audit_recorder, deterministic_clock)


@pytest.fixture
def balance_aggregator(session) -> BalanceAggregator:
    return BalanceAggregator(session)


@pytest.fixture
def ledger_selector(session) -> LedgerSelector:
    return LedgerSelector(session)


@pytest.fixture
def orchestrator(session, finance_source, deterministic_clock) -> SettlementOrchestrator:
    return SettlementOrchestrator(session, finance_source, clock=deterministic_clock)


@pytest.fixture
def enforcing_orchestrator(session, finance_source, deterministic_clock) -> SettlementOrchestrator:
    return SettlementOrchestrator(
        session,
        finance_source,
        clock=deterministic_clock,
        policy=LedgerPolicy(enforce_share_total=True),
    )


# =============================================================================
# Scenario fixtures
# =============================================================================


@pytest.fixture
def two_partners(partner_registry, business_id, test_actor):
    """Partner A (60%) and partner B (40%)."""
    a = partner_registry.create(business_id, "Alice", Decimal("60"), test_actor)
    b = partner_registry.create(business_id, "Bob", Decimal("40"), test_actor)
    return a, b
