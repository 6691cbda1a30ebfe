"""
Module: settlement_kernel.models.profit_calculation
Responsibility: ORM persistence for period profit snapshots and the per-partner
    allocations they fix at calculation time.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - net_profit == total_revenue - total_expenses (computed by the engine,
      stored once, never recomputed).
    - allocation.profit_due == net_profit * allocation.share_percentage / 100.
    - A calculation is mutated only by the void transition: status moves to
      VOIDED and the void metadata is filled in.  Any other change, and any
      change after voiding, is rejected by db/immutability.py.
    - Allocation rows are immutable from creation.
    - Neither calculations nor allocations are ever deleted.

Audit relevance:
    ProfitCalculation is the only source of "profit due".  Voided rows stay
    stored so the audit trail remains total; BalanceAggregator filters them
    out of every derivation.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from settlement_kernel.db.base import Base, UUIDString


class CalculationStatus(str, Enum):
    """Lifecycle status of a profit calculation.

    Contract: The engine only ever creates FINALIZED calculations.  The sole
    transition is FINALIZED -> VOIDED (terminal).  SETTLED is reserved; no
    operation produces it yet.
    """

    FINALIZED = "finalized"
    SETTLED = "settled"
    VOIDED = "voided"


class ProfitCalculation(Base):
    """
    Snapshot allocating one period's net profit across partners.

    Contract:
        Created only by ProfitCalculationEngine.  Recalculating a period
        creates a new, independent snapshot rather than amending this one.
    """

    __tablename__ = "profit_calculations"

    __table_args__ = (
        Index("idx_calculation_business", "business_id"),
        Index("idx_calculation_business_status", "business_id", "status"),
    )

    business_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    period_start: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    period_end: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    total_revenue: Mapped[Decimal] = mapped_column(nullable=False)

    total_expenses: Mapped[Decimal] = mapped_column(nullable=False)

    # May be negative for a loss period
    net_profit: Mapped[Decimal] = mapped_column(nullable=False)

    status: Mapped[CalculationStatus] = mapped_column(
        String(20),
        nullable=False,
        default=CalculationStatus.FINALIZED,
    )

    calculated_at: Mapped[datetime] = mapped_column(nullable=False)

    calculated_by: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    # Void metadata (set together, exactly once)
    voided_at: Mapped[datetime | None] = mapped_column(nullable=True)

    voided_by: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    void_reason: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
    )

    # Deleting a calculation must never touch its allocation rows
    allocations: Mapped[list["ProfitAllocation"]] = relationship(
        back_populates="calculation",
        lazy="selectin",
        order_by="ProfitAllocation.partner_name",
        passive_deletes="all",
    )

    @property
    def is_voided(self) -> bool:
        return self.status == CalculationStatus.VOIDED

    def __repr__(self) -> str:
        return (
            f"<ProfitCalculation {self.period_start}..{self.period_end} "
            f"net={self.net_profit} ({self.status})>"
        )


class ProfitAllocation(Base):
    """
    One partner's share of a calculation's net profit.

    Partner name and share percentage are copied at calculation time so the
    snapshot stays readable after the partner record is edited.
    """

    __tablename__ = "profit_allocations"

    __table_args__ = (
        Index("idx_allocation_calculation", "calculation_id"),
        Index("idx_allocation_partner", "partner_id"),
    )

    calculation_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("profit_calculations.id"),
        nullable=False,
    )

    partner_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("partners.id"),
        nullable=False,
    )

    partner_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    share_percentage: Mapped[Decimal] = mapped_column(nullable=False)

    # Signed: negative in a loss period
    profit_due: Mapped[Decimal] = mapped_column(nullable=False)

    calculation: Mapped[ProfitCalculation] = relationship(
        back_populates="allocations",
    )

    def __repr__(self) -> str:
        return f"<ProfitAllocation {self.partner_name}: {self.profit_due}>"
