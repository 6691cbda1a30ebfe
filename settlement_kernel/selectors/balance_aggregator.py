"""
BalanceAggregator -- derives partner positions from stored records.

Responsibility:
    Reads partners, non-voided profit calculations and non-voided payments
    for a business and hands them to the pure derivation in
    ``domain/balances.py``.

Architecture position:
    Kernel > Selectors.  Read-only; no caching.  Two calls with no write in
    between return equal summaries.

Invariants enforced:
    - outstanding_balance * credit_balance == 0 for every partner.
    - Voided calculations and voided payments contribute nothing.
"""

from uuid import UUID

from sqlalchemy import select

from settlement_kernel.domain.balances import derive_partner_summary
from settlement_kernel.domain.dtos import (
    PartnerPaymentInfo,
    PartnerSummary,
    ProfitCalculationInfo,
)
from settlement_kernel.exceptions import PartnerNotFoundError
from settlement_kernel.logging_config import get_logger
from settlement_kernel.models.partner import Partner
from settlement_kernel.models.partner_payment import PartnerPayment
from settlement_kernel.models.profit_calculation import (
    CalculationStatus,
    ProfitAllocation,
    ProfitCalculation,
)
from settlement_kernel.selectors.base import (
    BaseSelector,
    calculation_to_dto,
    partner_to_dto,
    payment_to_dto,
)

logger = get_logger("selectors.balance_aggregator")


class BalanceAggregator(BaseSelector[Partner]):
    """
    Partner summary queries.

    Guarantees:
        - A pure function of stored state: nothing is cached between calls.
        - get_all_partner_summaries includes inactive partners, ordered by
          name.
    """

    def get_partner_summary(self, business_id: str, partner_id: UUID) -> PartnerSummary:
        """
        Summary for one partner.

        Raises:
            PartnerNotFoundError: If the partner does not exist for the business.
        """
        partner = self.store.get(Partner, partner_id)
        if partner is None or partner.business_id != business_id:
            raise PartnerNotFoundError(str(partner_id))

        calculations = self._live_calculations(business_id, partner_id)
        payments = self._live_payments(business_id, partner_id)
        return derive_partner_summary(partner_to_dto(partner), calculations, payments)

    def get_all_partner_summaries(self, business_id: str) -> list[PartnerSummary]:
        partners = self.store.list(
            select(Partner)
            .where(Partner.business_id == business_id)
            .order_by(Partner.name, Partner.id)
        )
        calculations = self._live_calculations(business_id)
        payments = self._live_payments(business_id)

        summaries = [
            derive_partner_summary(partner_to_dto(p), calculations, payments)
            for p in partners
        ]
        logger.debug(
            "partner_summaries_derived",
            extra={
                "business_id": business_id,
                "partner_count": len(summaries),
                "calculation_count": len(calculations),
                "payment_count": len(payments),
            },
        )
        return summaries

    def _live_calculations(
        self,
        business_id: str,
        partner_id: UUID | None = None,
    ) -> list[ProfitCalculationInfo]:
        stmt = select(ProfitCalculation).where(
            ProfitCalculation.business_id == business_id,
            ProfitCalculation.status != CalculationStatus.VOIDED.value,
        )
        if partner_id is not None:
            stmt = stmt.where(
                ProfitCalculation.id.in_(
                    select(ProfitAllocation.calculation_id).where(
                        ProfitAllocation.partner_id == partner_id
                    )
                )
            )
        stmt = stmt.order_by(ProfitCalculation.calculated_at, ProfitCalculation.id)
        return [calculation_to_dto(c) for c in self.store.list(stmt)]

    def _live_payments(
        self,
        business_id: str,
        partner_id: UUID | None = None,
    ) -> list[PartnerPaymentInfo]:
        stmt = select(PartnerPayment).where(
            PartnerPayment.business_id == business_id,
            PartnerPayment.is_voided == False,  # noqa: E712
        )
        if partner_id is not None:
            stmt = stmt.where(PartnerPayment.partner_id == partner_id)
        return [payment_to_dto(p) for p in self.store.list(stmt)]
