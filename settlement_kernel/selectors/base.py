"""
Module: settlement_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors, plus
    the ORM -> DTO conversions shared by selectors and services.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: Selectors never add, flush or commit.
    - DTO return convention: Selectors return frozen dataclasses, never ORM
      instances.
    - Session ownership: the caller owns the session and its transaction.

Audit relevance:
    Selectors are the canonical read path for partner balances.  There are no
    stored balances; every figure is derived from calculations and payments.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from settlement_kernel.db.base import Base
from settlement_kernel.db.record_store import RecordStore
from settlement_kernel.domain.dtos import (
    AuditEntryInfo,
    PartnerInfo,
    PartnerPaymentInfo,
    ProfitAllocationInfo,
    ProfitCalculationInfo,
)
from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType, AuditEntry
from settlement_kernel.models.partner import Partner
from settlement_kernel.models.partner_payment import PartnerPayment, PaymentType
from settlement_kernel.models.profit_calculation import CalculationStatus, ProfitCalculation

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries
        through a RecordStore, and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session
        self.store = RecordStore(session)


def partner_to_dto(partner: Partner) -> PartnerInfo:
    return PartnerInfo(
        id=partner.id,
        business_id=partner.business_id,
        name=partner.name,
        email=partner.email,
        phone=partner.phone,
        profit_share_percentage=partner.profit_share_percentage,
        is_active=partner.is_active,
        created_at=partner.created_at,
        updated_at=partner.updated_at,
        created_by=partner.created_by,
        updated_by=partner.updated_by,
    )


def calculation_to_dto(calc: ProfitCalculation) -> ProfitCalculationInfo:
    return ProfitCalculationInfo(
        id=calc.id,
        business_id=calc.business_id,
        period_start=calc.period_start,
        period_end=calc.period_end,
        total_revenue=calc.total_revenue,
        total_expenses=calc.total_expenses,
        net_profit=calc.net_profit,
        allocations=tuple(
            ProfitAllocationInfo(
                partner_id=a.partner_id,
                partner_name=a.partner_name,
                share_percentage=a.share_percentage,
                profit_due=a.profit_due,
            )
            for a in calc.allocations
        ),
        status=CalculationStatus(calc.status),
        calculated_at=calc.calculated_at,
        calculated_by=calc.calculated_by,
        voided_at=calc.voided_at,
        voided_by=calc.voided_by,
        void_reason=calc.void_reason,
    )


def payment_to_dto(payment: PartnerPayment) -> PartnerPaymentInfo:
    return PartnerPaymentInfo(
        id=payment.id,
        business_id=payment.business_id,
        partner_id=payment.partner_id,
        partner_name=payment.partner_name,
        amount=payment.amount,
        payment_type=PaymentType(payment.payment_type),
        description=payment.description,
        reference=payment.reference,
        period_start=payment.period_start,
        period_end=payment.period_end,
        created_at=payment.created_at,
        created_by=payment.created_by,
        is_voided=payment.is_voided,
        voided_at=payment.voided_at,
        voided_by=payment.voided_by,
        void_reason=payment.void_reason,
    )


def audit_entry_to_dto(entry: AuditEntry) -> AuditEntryInfo:
    return AuditEntryInfo(
        id=entry.id,
        seq=entry.seq,
        business_id=entry.business_id,
        entity_type=AuditEntityType(entry.entity_type),
        entity_id=entry.entity_id,
        action=AuditAction(entry.action),
        description=entry.description,
        performed_by=entry.performed_by,
        performed_at=entry.performed_at,
        previous_value=entry.previous_value,
        new_value=entry.new_value,
    )
