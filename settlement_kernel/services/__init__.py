"""Imperative shell: ledger services and the orchestrator facade."""

from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.base import BaseService
from settlement_kernel.services.partner_registry import PartnerRegistry
from settlement_kernel.services.payment_ledger import PaymentLedger
from settlement_kernel.services.profit_calculation_engine import ProfitCalculationEngine
from settlement_kernel.services.sequence_service import SequenceService
from settlement_kernel.services.settlement_orchestrator import SettlementOrchestrator
from settlement_kernel.services.settlement_processor import SettlementProcessor

__all__ = [
    "AuditRecorder",
    "BaseService",
    "PartnerRegistry",
    "PaymentLedger",
    "ProfitCalculationEngine",
    "SequenceService",
    "SettlementOrchestrator",
    "SettlementProcessor",
]
