"""ORM models for the settlement ledger."""

from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType, AuditEntry
from settlement_kernel.models.partner import Partner
from settlement_kernel.models.partner_payment import PartnerPayment, PaymentType
from settlement_kernel.models.profit_calculation import (
    CalculationStatus,
    ProfitAllocation,
    ProfitCalculation,
)
from settlement_kernel.models.sequence_counter import SequenceCounter

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditEntry",
    "CalculationStatus",
    "Partner",
    "PartnerPayment",
    "PaymentType",
    "ProfitAllocation",
    "ProfitCalculation",
    "SequenceCounter",
]
