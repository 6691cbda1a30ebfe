"""
Settlement Orchestrator - Coordinates the settlement ledger.

The Orchestrator ties together:
- PartnerRegistry: partner identity and shares
- ProfitCalculationEngine: period profit snapshots
- PaymentLedger: payments, adjustments, voids
- SettlementProcessor: balance settlement
- BalanceAggregator / LedgerSelector: derived reads
- AuditRecorder: audit trail

Manages its own transaction boundary.  Every state-changing operation is one
unit of work: commit on success, rollback on failure.  Set auto_commit=False
to delegate transaction control to the caller.
"""

from __future__ import annotations

import time
from datetime import date
from decimal import Decimal
from typing import Any, Callable, TypeVar
from uuid import UUID
from uuid import uuid4 as _uuid4

from sqlalchemy.orm import Session

from settlement_kernel.domain.clock import Clock, SystemClock
from settlement_kernel.domain.dtos import (
    AuditEntryInfo,
    PartnerInfo,
    PartnerPaymentInfo,
    PartnerSummary,
    ProfitCalculationInfo,
    SettlementResult,
    ShareTotal,
)
from settlement_kernel.domain.finance_source import FinanceAggregationSource
from settlement_kernel.domain.policy import LedgerPolicy
from settlement_kernel.logging_config import LogContext, get_logger
from settlement_kernel.models.partner_payment import PaymentType
from settlement_kernel.selectors.balance_aggregator import BalanceAggregator
from settlement_kernel.selectors.ledger_selector import LedgerSelector
from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.partner_registry import PartnerRegistry
from settlement_kernel.services.payment_ledger import PaymentLedger
from settlement_kernel.services.profit_calculation_engine import ProfitCalculationEngine
from settlement_kernel.services.settlement_processor import SettlementProcessor

logger = get_logger("services.settlement_orchestrator")

T = TypeVar("T")


class SettlementOrchestrator:
    """
    Caller-facing facade of the settlement ledger.

    All components share one Session.  By default each write commits on
    success and rolls back on failure.  Reads never commit.
    """

    def __init__(
        self,
        session: Session,
        finance_source: FinanceAggregationSource,
        clock: Clock | None = None,
        policy: LedgerPolicy | None = None,
        auto_commit: bool = True,
    ):
        """
        Args:
            session: SQLAlchemy session shared by every component.
            finance_source: Revenue/expense aggregation collaborator.
            clock: Clock for timestamps (defaults to SystemClock).
            policy: Share total and audit limit settings.
            auto_commit: If True (default), commits on success, rolls back on
                failure.  If False, the caller owns the transaction.
        """
        self._session = session
        self._clock = clock or SystemClock()
        self._policy = policy or LedgerPolicy()
        self._auto_commit = auto_commit

        self._audit = AuditRecorder(
            session,
            self._clock,
            default_limit=self._policy.audit_default_limit,
            max_limit=self._policy.audit_max_limit,
        )
        self._registry = PartnerRegistry(
            session,
            self._audit,
            self._clock,
            enforce_share_total=self._policy.enforce_share_total,
        )
        self._engine = ProfitCalculationEngine(
            session, finance_source, self._registry, self._audit, self._clock
        )
        self._ledger = PaymentLedger(session, self._registry, self._audit, self._clock)
        self._settlements = SettlementProcessor(
            session, self._ledger, self._audit, self._clock
        )
        self._balances = BalanceAggregator(session)
        self._ledger_selector = LedgerSelector(session)

    @property
    def policy(self) -> LedgerPolicy:
        return self._policy

    def _write(
        self,
        operation: str,
        business_id: str,
        actor: str,
        fn: Callable[[], T],
        **log_fields: Any,
    ) -> T:
        """Run one unit of work inside a log context and transaction boundary."""
        with LogContext.bind(
            correlation_id=str(_uuid4()),
            business_id=business_id,
            actor_id=actor,
        ):
            logger.info(f"{operation}_started", extra=log_fields)
            t0 = time.monotonic()
            try:
                result = fn()
                if self._auto_commit:
                    self._session.commit()
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                logger.info(f"{operation}_completed", extra={"duration_ms": duration_ms})
                return result
            except Exception:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                if self._auto_commit:
                    self._session.rollback()
                logger.error(
                    f"{operation}_failed",
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                raise

    # ------------------------------------------------------------------
    # Partners
    # ------------------------------------------------------------------

    def list_partners(self, business_id: str) -> list[PartnerInfo]:
        return self._registry.list(business_id)

    def get_partner(self, business_id: str, partner_id: UUID) -> PartnerInfo:
        return self._registry.get(business_id, partner_id)

    def share_total(self, business_id: str) -> ShareTotal:
        return self._registry.share_total(business_id)

    def create_partner(
        self,
        business_id: str,
        name: str,
        profit_share_percentage: Decimal | int | str,
        actor: str,
        email: str | None = None,
        phone: str | None = None,
        is_active: bool = True,
    ) -> PartnerInfo:
        return self._write(
            "partner_create",
            business_id,
            actor,
            lambda: self._registry.create(
                business_id,
                name,
                profit_share_percentage,
                actor,
                email=email,
                phone=phone,
                is_active=is_active,
            ),
        )

    def update_partner(
        self,
        business_id: str,
        partner_id: UUID,
        actor: str,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        profit_share_percentage: Decimal | int | str | None = None,
        is_active: bool | None = None,
    ) -> PartnerInfo:
        return self._write(
            "partner_update",
            business_id,
            actor,
            lambda: self._registry.update(
                business_id,
                partner_id,
                actor,
                name=name,
                email=email,
                phone=phone,
                profit_share_percentage=profit_share_percentage,
                is_active=is_active,
            ),
            partner_id=str(partner_id),
        )

    def deactivate_partner(self, business_id: str, partner_id: UUID, actor: str) -> PartnerInfo:
        return self._write(
            "partner_deactivate",
            business_id,
            actor,
            lambda: self._registry.deactivate(business_id, partner_id, actor),
            partner_id=str(partner_id),
        )

    def reactivate_partner(self, business_id: str, partner_id: UUID, actor: str) -> PartnerInfo:
        return self._write(
            "partner_reactivate",
            business_id,
            actor,
            lambda: self._registry.reactivate(business_id, partner_id, actor),
            partner_id=str(partner_id),
        )

    # ------------------------------------------------------------------
    # Profit calculations
    # ------------------------------------------------------------------

    def calculate_profit(
        self,
        business_id: str,
        period_start: date,
        period_end: date,
        actor: str,
    ) -> ProfitCalculationInfo:
        return self._write(
            "profit_calculation",
            business_id,
            actor,
            lambda: self._engine.calculate_profit(
                business_id, period_start, period_end, actor
            ),
            period_start=period_start,
            period_end=period_end,
        )

    def void_calculation(
        self,
        business_id: str,
        calculation_id: UUID,
        reason: str,
        actor: str,
    ) -> ProfitCalculationInfo:
        return self._write(
            "calculation_void",
            business_id,
            actor,
            lambda: self._engine.void_calculation(
                business_id, calculation_id, reason, actor
            ),
            calculation_id=str(calculation_id),
        )

    def get_calculation(self, business_id: str, calculation_id: UUID) -> ProfitCalculationInfo:
        return self._engine.get_calculation(business_id, calculation_id)

    def list_calculations(
        self,
        business_id: str,
        include_voided: bool = True,
    ) -> list[ProfitCalculationInfo]:
        return self._ledger_selector.list_calculations(business_id, include_voided)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

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
        return self._write(
            "payment_record",
            business_id,
            actor,
            lambda: self._ledger.record_payment(
                business_id,
                partner_id,
                amount,
                payment_type,
                actor,
                description=description,
                reference=reference,
                period_start=period_start,
                period_end=period_end,
            ),
            partner_id=str(partner_id),
        )

    def void_payment(
        self,
        business_id: str,
        payment_id: UUID,
        reason: str,
        actor: str,
    ) -> PartnerPaymentInfo:
        return self._write(
            "payment_void",
            business_id,
            actor,
            lambda: self._ledger.void_payment(business_id, payment_id, reason, actor),
            payment_id=str(payment_id),
        )

    def get_payment(self, business_id: str, payment_id: UUID) -> PartnerPaymentInfo:
        return self._ledger.get_payment(business_id, payment_id)

    def list_payments(
        self,
        business_id: str,
        partner_id: UUID | None = None,
        include_voided: bool = True,
    ) -> list[PartnerPaymentInfo]:
        return self._ledger_selector.list_payments(business_id, partner_id, include_voided)

    def settle_partner_balance(
        self,
        business_id: str,
        partner_id: UUID,
        amount: Decimal | int | str,
        description: str | None,
        actor: str,
    ) -> SettlementResult:
        return self._write(
            "settlement",
            business_id,
            actor,
            lambda: self._settlements.settle_partner_balance(
                business_id, partner_id, amount, description, actor
            ),
            partner_id=str(partner_id),
        )

    # ------------------------------------------------------------------
    # Balances and audit
    # ------------------------------------------------------------------

    def get_partner_summary(self, business_id: str, partner_id: UUID) -> PartnerSummary:
        return self._balances.get_partner_summary(business_id, partner_id)

    def get_all_partner_summaries(self, business_id: str) -> list[PartnerSummary]:
        return self._balances.get_all_partner_summaries(business_id)

    def list_audit_log(self, business_id: str, limit: int | None = None) -> list[AuditEntryInfo]:
        return self._audit.list(business_id, limit)
