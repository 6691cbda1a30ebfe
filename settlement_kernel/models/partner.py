"""
Module: settlement_kernel.models.partner
Responsibility: ORM persistence for revenue-sharing partners of a business.
    Partner rows are the identity anchor referenced by profit allocations and
    partner payments.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Partners are never hard-deleted (ORM listener in db/immutability.py).
      Historical allocations and payments reference partners by id and must
      remain resolvable; retirement is expressed through is_active.
    - profit_share_percentage lies in [0, 100] (validated by PartnerRegistry).

Audit relevance:
    Every create/update of a partner produces an AuditEntry.  The share
    percentage in force at calculation time is copied onto each
    ProfitAllocation, so later edits never rewrite history.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement_kernel.db.base import TrackedBase


class Partner(TrackedBase):
    """
    Stakeholder entitled to a percentage of a business's profit.

    Contract:
        A partner belongs to exactly one business.  Only active partners
        receive allocations from new profit calculations; inactive partners
        keep their historical balances.

    Non-goals:
        - This model does NOT enforce that active shares sum to 100; that
          policy lives in PartnerRegistry and is configurable.
    """

    __tablename__ = "partners"

    __table_args__ = (
        Index("idx_partner_business", "business_id"),
        Index("idx_partner_business_active", "business_id", "is_active"),
    )

    # Owning tenant
    business_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    # Display name
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    phone: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    # e.g. 30 for 30%
    profit_share_percentage: Mapped[Decimal] = mapped_column(
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<Partner {self.name} ({self.profit_share_percentage}%)>"
