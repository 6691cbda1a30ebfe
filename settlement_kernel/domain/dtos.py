"""
Domain Data Transfer Objects.

These are pure data structures with no ORM dependencies.
They define the contract between services, selectors and callers: every
public operation returns one of these, never an ORM instance.

All DTOs are frozen dataclasses; collections are tuples.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping
from uuid import UUID

from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType
from settlement_kernel.models.partner_payment import PaymentType
from settlement_kernel.models.profit_calculation import CalculationStatus


@dataclass(frozen=True)
class PartnerInfo:
    """Immutable view of a partner."""

    id: UUID
    business_id: str
    name: str
    email: str | None
    phone: str | None
    profit_share_percentage: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str | None


@dataclass(frozen=True)
class ShareTotal:
    """Sum of active partner share percentages for a business."""

    business_id: str
    total: Decimal
    active_partner_count: int

    @property
    def is_complete(self) -> bool:
        return self.total == Decimal("100")

    @property
    def exceeds_hundred(self) -> bool:
        return self.total > Decimal("100")


@dataclass(frozen=True)
class PeriodTotals:
    """Revenue and expense totals reported by a finance source."""

    total_revenue: Decimal
    total_expenses: Decimal

    @property
    def net_profit(self) -> Decimal:
        return self.total_revenue - self.total_expenses


@dataclass(frozen=True)
class ProfitAllocationInfo:
    """One partner's slice of a calculation."""

    partner_id: UUID
    partner_name: str
    share_percentage: Decimal
    profit_due: Decimal


@dataclass(frozen=True)
class ProfitCalculationInfo:
    """
    Immutable snapshot of a period profit calculation.

    ``per_partner_due`` is derived from ``allocations`` and is read-only.
    """

    id: UUID
    business_id: str
    period_start: date
    period_end: date
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    allocations: tuple[ProfitAllocationInfo, ...]
    status: CalculationStatus
    calculated_at: datetime
    calculated_by: str
    voided_at: datetime | None = None
    voided_by: str | None = None
    void_reason: str | None = None

    @property
    def is_voided(self) -> bool:
        return self.status == CalculationStatus.VOIDED

    @property
    def per_partner_due(self) -> Mapping[UUID, Decimal]:
        return MappingProxyType(
            {a.partner_id: a.profit_due for a in self.allocations}
        )


@dataclass(frozen=True)
class PartnerPaymentInfo:
    """Immutable view of a partner ledger entry."""

    id: UUID
    business_id: str
    partner_id: UUID
    partner_name: str
    amount: Decimal
    payment_type: PaymentType
    description: str
    reference: str | None
    period_start: date | None
    period_end: date | None
    created_at: datetime
    created_by: str
    is_voided: bool
    voided_at: datetime | None = None
    voided_by: str | None = None
    void_reason: str | None = None


@dataclass(frozen=True)
class PartnerSummary:
    """
    Derived financial position of one partner.

    Never persisted.  outstanding_balance and credit_balance are never both
    positive.
    """

    partner: PartnerInfo
    total_profit_due: Decimal
    total_paid: Decimal
    total_adjustments: Decimal
    outstanding_balance: Decimal
    credit_balance: Decimal
    last_payment_date: datetime | None = None
    payment_history: tuple[PartnerPaymentInfo, ...] = field(default_factory=tuple)

    @property
    def partner_id(self) -> UUID:
        return self.partner.id

    @property
    def effective_paid(self) -> Decimal:
        return self.total_paid + self.total_adjustments

    @property
    def net_balance(self) -> Decimal:
        """Positive when owed to the partner, negative when in credit."""
        return self.total_profit_due - self.effective_paid


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of a balance settlement."""

    payment: PartnerPaymentInfo
    previous_outstanding: Decimal
    previous_credit: Decimal


@dataclass(frozen=True)
class AuditEntryInfo:
    """Immutable view of one audit log entry."""

    id: UUID
    seq: int
    business_id: str
    entity_type: AuditEntityType
    entity_id: UUID
    action: AuditAction
    description: str
    performed_by: str
    performed_at: datetime
    previous_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
