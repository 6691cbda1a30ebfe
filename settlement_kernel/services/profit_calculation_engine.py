"""
ProfitCalculationEngine -- period profit snapshots and per-partner dues.

Responsibility:
    Asks the finance aggregation source for a period's revenue and expenses,
    splits the net profit across the active partners, and persists the
    result as an immutable ProfitCalculation.  Also voids calculations.

Architecture position:
    Kernel > Services.  Depends on a FinanceAggregationSource,
    PartnerRegistry and AuditRecorder.  The allocation math itself lives in
    ``domain/allocation.py``.

Invariants enforced:
    - net_profit == total_revenue - total_expenses.
    - profit_due == net_profit * share / 100 for every active partner.
    - The only mutation of a stored calculation is FINALIZED -> VOIDED,
      which requires a non-empty reason and happens at most once.

Failure modes:
    - InvalidPeriodError: period_end <= period_start.
    - DependencyError raised by the source propagates unchanged; any other
      source failure becomes FinanceSourceError.  Nothing is retried.
    - ShareTotalExceededError: active shares above 100, under any policy.
"""

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from settlement_kernel.domain.allocation import allocate_profit
from settlement_kernel.domain.clock import Clock
from settlement_kernel.domain.dtos import PeriodTotals, ProfitCalculationInfo
from settlement_kernel.domain.finance_source import FinanceAggregationSource
from settlement_kernel.domain.money import to_decimal
from settlement_kernel.exceptions import (
    CalculationAlreadyVoidedError,
    CalculationNotFoundError,
    DependencyError,
    FinanceSourceError,
    InvalidPeriodError,
    MissingVoidReasonError,
)
from settlement_kernel.logging_config import get_logger
from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType
from settlement_kernel.models.profit_calculation import (
    CalculationStatus,
    ProfitAllocation,
    ProfitCalculation,
)
from settlement_kernel.selectors.base import calculation_to_dto
from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.base import BaseService
from settlement_kernel.services.partner_registry import PartnerRegistry
from settlement_kernel.utils.hashing import snapshot

logger = get_logger("services.profit_calculation")


class ProfitCalculationEngine(BaseService[ProfitCalculation]):
    """
    Creates and voids profit calculations.

    Guarantees:
        - Recalculating a period creates a new, independent record.
        - Voided calculations stay stored; they simply stop contributing to
          partner balances.
    """

    def __init__(
        self,
        session: Session,
        finance_source: FinanceAggregationSource,
        registry: PartnerRegistry,
        audit: AuditRecorder,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self._finance_source = finance_source
        self._registry = registry
        self._audit = audit

    def _get_owned(self, business_id: str, calculation_id: UUID) -> ProfitCalculation:
        calc = self.store.get(ProfitCalculation, calculation_id)
        if calc is None or calc.business_id != business_id:
            raise CalculationNotFoundError(str(calculation_id))
        return calc

    def _fetch_totals(
        self,
        business_id: str,
        period_start: date,
        period_end: date,
    ) -> PeriodTotals:
        try:
            totals = self._finance_source.get_revenue_and_expenses(
                business_id, period_start, period_end
            )
            return PeriodTotals(
                total_revenue=to_decimal(totals.total_revenue),
                total_expenses=to_decimal(totals.total_expenses),
            )
        except DependencyError:
            raise
        except Exception as exc:
            logger.error(
                "finance_source_failed",
                extra={"business_id": business_id, "error": type(exc).__name__},
            )
            raise FinanceSourceError(business_id, str(exc)) from exc

    def get_calculation(self, business_id: str, calculation_id: UUID) -> ProfitCalculationInfo:
        """
        Raises:
            CalculationNotFoundError: Unknown calculation for the business.
        """
        return calculation_to_dto(self._get_owned(business_id, calculation_id))

    def calculate_profit(
        self,
        business_id: str,
        period_start: date,
        period_end: date,
        actor: str,
    ) -> ProfitCalculationInfo:
        """
        Compute and persist a profit snapshot for the period.

        Preconditions:
            - period_end > period_start.

        Postconditions:
            - One ProfitCalculation with status FINALIZED and one allocation
              per active partner is flushed.
            - One ``calculate`` audit entry is written.

        Returns:
            ProfitCalculationInfo for the new snapshot.
        """
        if period_end <= period_start:
            raise InvalidPeriodError(str(period_start), str(period_end))

        totals = self._fetch_totals(business_id, period_start, period_end)
        self._registry.check_allocatable(business_id)
        plan = allocate_profit(
            totals.total_revenue,
            totals.total_expenses,
            self._registry.list_active(business_id),
        )

        calc = ProfitCalculation(
            business_id=business_id,
            period_start=period_start,
            period_end=period_end,
            total_revenue=totals.total_revenue,
            total_expenses=totals.total_expenses,
            net_profit=plan.net_profit,
            status=CalculationStatus.FINALIZED.value,
            calculated_at=self._clock.now(),
            calculated_by=actor,
        )
        calc.allocations = [
            ProfitAllocation(
                partner_id=a.partner_id,
                partner_name=a.partner_name,
                share_percentage=a.share_percentage,
                profit_due=a.profit_due,
            )
            for a in plan.allocations
        ]
        self.store.put(calc)
        info = calculation_to_dto(calc)

        self._audit.append(
            business_id=business_id,
            entity_type=AuditEntityType.CALCULATION,
            entity_id=calc.id,
            action=AuditAction.CALCULATE,
            description=(
                f"Calculated profit {plan.net_profit} for {period_start} to {period_end} "
                f"across {len(plan.allocations)} partner(s)"
            ),
            actor=actor,
            new_value=snapshot(info, exclude=("calculated_at",)),
        )
        logger.info(
            "profit_calculated",
            extra={
                "business_id": business_id,
                "calculation_id": str(calc.id),
                "period_start": period_start,
                "period_end": period_end,
                "net_profit": str(plan.net_profit),
                "allocation_count": len(plan.allocations),
            },
        )
        return info

    def void_calculation(
        self,
        business_id: str,
        calculation_id: UUID,
        reason: str,
        actor: str,
    ) -> ProfitCalculationInfo:
        """
        Void a calculation.  Terminal and irreversible.

        Raises:
            MissingVoidReasonError: Empty or blank reason.
            CalculationNotFoundError: Unknown calculation for the business.
            CalculationAlreadyVoidedError: Already voided.
        """
        if reason is None or not reason.strip():
            raise MissingVoidReasonError("calculation", str(calculation_id))

        calc = self._get_owned(business_id, calculation_id)
        if calc.is_voided:
            raise CalculationAlreadyVoidedError(str(calculation_id))
        prior_status = CalculationStatus(calc.status)

        calc.status = CalculationStatus.VOIDED.value
        calc.voided_at = self._clock.now()
        calc.voided_by = actor
        calc.void_reason = reason.strip()
        self.store.put(calc)
        info = calculation_to_dto(calc)

        self._audit.append(
            business_id=business_id,
            entity_type=AuditEntityType.CALCULATION,
            entity_id=calc.id,
            action=AuditAction.VOID,
            description=f"Voided profit calculation: {calc.void_reason}",
            actor=actor,
            previous_value={"status": prior_status.value},
            new_value={
                "status": CalculationStatus.VOIDED.value,
                "void_reason": calc.void_reason,
            },
        )
        logger.info(
            "calculation_voided",
            extra={
                "business_id": business_id,
                "calculation_id": str(calc.id),
                "reason": calc.void_reason,
            },
        )
        return info
