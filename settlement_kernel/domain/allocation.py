"""
Allocation -- pure profit split across partners.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - net_profit == total_revenue - total_expenses.
    - profit_due == net_profit * share_percentage / 100 for every partner,
      rounded only to the 9-place storage scale.
    - Only active partners receive an allocation.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from settlement_kernel.domain.dtos import PartnerInfo, ProfitAllocationInfo
from settlement_kernel.domain.money import HUNDRED, ZERO, quantize_money


@dataclass(frozen=True)
class AllocationPlan:
    """Net profit and the allocations derived from it."""

    net_profit: Decimal
    allocations: tuple[ProfitAllocationInfo, ...]

    @property
    def allocated_total(self) -> Decimal:
        return sum((a.profit_due for a in self.allocations), ZERO)

    def due_for(self, partner_id: UUID) -> Decimal | None:
        for allocation in self.allocations:
            if allocation.partner_id == partner_id:
                return allocation.profit_due
        return None


def compute_profit_due(net_profit: Decimal, share_percentage: Decimal) -> Decimal:
    """Signed share of ``net_profit`` at storage scale; negative in a loss period."""
    return quantize_money(net_profit * share_percentage / HUNDRED)


def active_share_total(partners: Iterable[PartnerInfo]) -> Decimal:
    return sum(
        (p.profit_share_percentage for p in partners if p.is_active), ZERO
    )


def allocate_profit(
    total_revenue: Decimal,
    total_expenses: Decimal,
    partners: Iterable[PartnerInfo],
) -> AllocationPlan:
    """
    Split the period's net profit across the active partners.

    Inactive partners are skipped; ordering follows partner name so the
    snapshot reads the same way every time.
    """
    net_profit = total_revenue - total_expenses
    active = sorted(
        (p for p in partners if p.is_active),
        key=lambda p: (p.name, str(p.id)),
    )
    allocations = tuple(
        ProfitAllocationInfo(
            partner_id=p.id,
            partner_name=p.name,
            share_percentage=p.profit_share_percentage,
            profit_due=compute_profit_due(net_profit, p.profit_share_percentage),
        )
        for p in active
    )
    return AllocationPlan(net_profit=net_profit, allocations=allocations)
