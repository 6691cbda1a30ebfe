"""
LedgerSelector -- read-only listings of calculations and payments.

Both listings return the most recent record first.  Voided records are
included unless ``include_voided=False``.
"""

from uuid import UUID

from sqlalchemy import select

from settlement_kernel.domain.dtos import PartnerPaymentInfo, ProfitCalculationInfo
from settlement_kernel.models.partner_payment import PartnerPayment
from settlement_kernel.models.profit_calculation import CalculationStatus, ProfitCalculation
from settlement_kernel.selectors.base import BaseSelector, calculation_to_dto, payment_to_dto


class LedgerSelector(BaseSelector[ProfitCalculation]):
    """Listings over the calculation and payment tables."""

    def list_calculations(
        self,
        business_id: str,
        include_voided: bool = True,
    ) -> list[ProfitCalculationInfo]:
        stmt = select(ProfitCalculation).where(
            ProfitCalculation.business_id == business_id
        )
        if not include_voided:
            stmt = stmt.where(ProfitCalculation.status != CalculationStatus.VOIDED.value)
        stmt = stmt.order_by(
            ProfitCalculation.calculated_at.desc(),
            ProfitCalculation.period_start.desc(),
        )
        return [calculation_to_dto(c) for c in self.store.list(stmt)]

    def list_payments(
        self,
        business_id: str,
        partner_id: UUID | None = None,
        include_voided: bool = True,
    ) -> list[PartnerPaymentInfo]:
        stmt = select(PartnerPayment).where(PartnerPayment.business_id == business_id)
        if partner_id is not None:
            stmt = stmt.where(PartnerPayment.partner_id == partner_id)
        if not include_voided:
            stmt = stmt.where(PartnerPayment.is_voided == False)  # noqa: E712
        stmt = stmt.order_by(PartnerPayment.created_at.desc())
        return [payment_to_dto(p) for p in self.store.list(stmt)]
