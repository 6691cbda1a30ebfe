"""
Pure domain core for the settlement ledger.

Nothing in this package performs I/O (SystemClock aside).  Services feed it
DTOs and persist what it returns.
"""

from settlement_kernel.domain.allocation import (
    AllocationPlan,
    active_share_total,
    allocate_profit,
    compute_profit_due,
)
from settlement_kernel.domain.balances import derive_partner_summary
from settlement_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from settlement_kernel.domain.dtos import (
    AuditEntryInfo,
    PartnerInfo,
    PartnerPaymentInfo,
    PartnerSummary,
    PeriodTotals,
    ProfitAllocationInfo,
    ProfitCalculationInfo,
    SettlementResult,
    ShareTotal,
)
from settlement_kernel.domain.policy import LedgerPolicy
from settlement_kernel.domain.finance_source import (
    FinanceAggregationSource,
    FixedTotalsSource,
)

__all__ = [
    "AllocationPlan",
    "AuditEntryInfo",
    "Clock",
    "DeterministicClock",
    "FinanceAggregationSource",
    "FixedTotalsSource",
    "LedgerPolicy",
    "PartnerInfo",
    "PartnerPaymentInfo",
    "PartnerSummary",
    "PeriodTotals",
    "ProfitAllocationInfo",
    "ProfitCalculationInfo",
    "SettlementResult",
    "ShareTotal",
    "SystemClock",
    "active_share_total",
    "allocate_profit",
    "compute_profit_due",
    "derive_partner_summary",
]
