"""
PartnerRegistry -- partner identity and profit share percentages.

Responsibility:
    Creates, updates, deactivates and lists the revenue-sharing partners of a
    business.  Every write is mirrored by an audit entry.

Architecture position:
    Kernel > Services.  Depends on AuditRecorder only.

Invariants enforced:
    - profit_share_percentage lies in [0, 100].
    - Partners are never deleted; retirement is ``is_active = False``.
    - Share total policy: under ``enforce_share_total`` no write may push
      the active total above 100.  Otherwise a total different from 100 is
      logged as ``partner_share_total_mismatch`` and the write succeeds.
    - check_allocatable() rejects an active total above 100 regardless of
      the policy; calculations depend on it.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from settlement_kernel.domain.allocation import active_share_total
from settlement_kernel.domain.clock import Clock
from settlement_kernel.domain.dtos import PartnerInfo, ShareTotal
from settlement_kernel.domain.money import HUNDRED, ZERO, to_share_percentage
from settlement_kernel.exceptions import (
    PartnerNotFoundError,
    ShareTotalExceededError,
    ValidationError,
)
from settlement_kernel.logging_config import get_logger
from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType
from settlement_kernel.models.partner import Partner
from settlement_kernel.selectors.base import partner_to_dto
from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.base import BaseService
from settlement_kernel.utils.hashing import snapshot

logger = get_logger("services.partner_registry")

_SNAPSHOT_EXCLUDE = ("created_at", "updated_at", "created_by", "updated_by")


def _require_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValidationError("Partner name is required", field="name")
    return name.strip()


class PartnerRegistry(BaseService[Partner]):
    """
    Service for managing partners.

    All public methods return PartnerInfo DTOs, not ORM Partner entities.
    There is no delete operation.
    """

    def __init__(
        self,
        session: Session,
        audit: AuditRecorder,
        clock: Clock | None = None,
        enforce_share_total: bool = False,
    ):
        super().__init__(session, clock)
        self._audit = audit
        self._enforce_share_total = enforce_share_total

    def _get_owned(self, business_id: str, partner_id: UUID) -> Partner:
        """Get partner by ID, raising if missing or owned by another business."""
        partner = self.store.get(Partner, partner_id)
        if partner is None or partner.business_id != business_id:
            raise PartnerNotFoundError(str(partner_id))
        return partner

    def _active_partners(self, business_id: str) -> list[Partner]:
        return self.store.list(
            select(Partner)
            .where(Partner.business_id == business_id, Partner.is_active == True)  # noqa: E712
            .order_by(Partner.name, Partner.id)
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, business_id: str, partner_id: UUID) -> PartnerInfo:
        """
        Get a partner of ``business_id``.

        Raises:
            PartnerNotFoundError: If missing or owned by another business.
        """
        return partner_to_dto(self._get_owned(business_id, partner_id))

    def list(self, business_id: str) -> list[PartnerInfo]:
        """All partners of the business, inactive included, ordered by name."""
        partners = self.store.list(
            select(Partner)
            .where(Partner.business_id == business_id)
            .order_by(Partner.name, Partner.id)
        )
        return [partner_to_dto(p) for p in partners]

    def list_active(self, business_id: str) -> list[PartnerInfo]:
        return [partner_to_dto(p) for p in self._active_partners(business_id)]

    def share_total(self, business_id: str) -> ShareTotal:
        active = self.list_active(business_id)
        return ShareTotal(
            business_id=business_id,
            total=active_share_total(active),
            active_partner_count=len(active),
        )

    def check_allocatable(self, business_id: str) -> ShareTotal:
        """
        Check that the active partners can split net profit.

        Independent of the share total policy: a calculation never hands out
        more than 100% of net profit.  A total below 100 is only warned about.

        Raises:
            ShareTotalExceededError: If the active total is above 100.
        """
        total = self.share_total(business_id)
        if total.exceeds_hundred:
            logger.warning(
                "partner_share_total_rejected",
                extra={"business_id": business_id, "share_total": str(total.total)},
            )
            raise ShareTotalExceededError(business_id, str(total.total))
        self._warn_on_mismatch(total)
        return total

    def _warn_on_mismatch(self, total: ShareTotal) -> None:
        if total.active_partner_count and not total.is_complete:
            logger.warning(
                "partner_share_total_mismatch",
                extra={
                    "business_id": total.business_id,
                    "share_total": str(total.total),
                    "active_partner_count": total.active_partner_count,
                },
            )

    def _ensure_room_for(
        self,
        business_id: str,
        share: Decimal,
        is_active: bool,
        exclude_id: UUID | None = None,
    ) -> None:
        """Reject, under the enforce policy, a write that would pass 100%."""
        if not self._enforce_share_total or not is_active:
            return
        others = sum(
            (
                p.profit_share_percentage
                for p in self._active_partners(business_id)
                if p.id != exclude_id
            ),
            ZERO,
        )
        prospective = others + share
        if prospective > HUNDRED:
            logger.warning(
                "partner_share_total_rejected",
                extra={"business_id": business_id, "share_total": str(prospective)},
            )
            raise ShareTotalExceededError(business_id, str(prospective))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(
        self,
        business_id: str,
        name: str,
        profit_share_percentage: Decimal | int | str,
        actor: str,
        email: str | None = None,
        phone: str | None = None,
        is_active: bool = True,
    ) -> PartnerInfo:
        """
        Create a new partner.

        Args:
            business_id: Owning tenant.
            name: Display name (non-empty).
            profit_share_percentage: Share of net profit, 0-100.
            actor: Who is creating the partner.
            email: Optional contact email.
            phone: Optional contact phone.
            is_active: Whether the partner takes part in new calculations.

        Returns:
            Created PartnerInfo DTO.

        Raises:
            ValidationError: Blank name.
            InvalidShareError: Percentage outside [0, 100].
            ShareTotalExceededError: Enforce policy and active total above 100.
        """
        clean_name = _require_name(name)
        share = to_share_percentage(profit_share_percentage)
        self._ensure_room_for(business_id, share, is_active)

        now = self._clock.now()
        partner = Partner(
            business_id=business_id,
            name=clean_name,
            email=email,
            phone=phone,
            profit_share_percentage=share,
            is_active=is_active,
            created_at=now,
            updated_at=now,
            created_by=actor,
        )
        self.store.put(partner)
        info = partner_to_dto(partner)

        self._audit.append(
            business_id=business_id,
            entity_type=AuditEntityType.PARTNER,
            entity_id=partner.id,
            action=AuditAction.CREATE,
            description=f"Created partner {clean_name} with {share}% profit share",
            actor=actor,
            new_value=snapshot(info, exclude=_SNAPSHOT_EXCLUDE),
        )
        logger.info(
            "partner_created",
            extra={
                "business_id": business_id,
                "partner_id": str(partner.id),
                "profit_share_percentage": str(share),
                "is_active": is_active,
            },
        )
        self._warn_on_mismatch(self.share_total(business_id))
        return info

    def update(
        self,
        business_id: str,
        partner_id: UUID,
        actor: str,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        profit_share_percentage: Decimal | int | str | None = None,
        is_active: bool | None = None,
    ) -> PartnerInfo:
        """
        Update partner details.  ``None`` leaves a field unchanged.

        Returns:
            Updated PartnerInfo DTO.

        Raises:
            PartnerNotFoundError: Unknown partner for the business.
            ValidationError: Blank name.
            InvalidShareError: Percentage outside [0, 100].
            ShareTotalExceededError: Enforce policy and active total above 100.
        """
        partner = self._get_owned(business_id, partner_id)
        previous = partner_to_dto(partner)

        new_name = _require_name(name) if name is not None else partner.name
        new_share = (
            to_share_percentage(profit_share_percentage)
            if profit_share_percentage is not None
            else partner.profit_share_percentage
        )
        new_active = is_active if is_active is not None else partner.is_active
        self._ensure_room_for(business_id, new_share, new_active, exclude_id=partner.id)

        partner.name = new_name
        if email is not None:
            partner.email = email
        if phone is not None:
            partner.phone = phone
        partner.profit_share_percentage = new_share
        partner.is_active = new_active
        partner.updated_at = self._clock.now()
        partner.updated_by = actor
        self.store.put(partner)
        info = partner_to_dto(partner)

        self._audit.append(
            business_id=business_id,
            entity_type=AuditEntityType.PARTNER,
            entity_id=partner.id,
            action=AuditAction.UPDATE,
            description=f"Updated partner {new_name}",
            actor=actor,
            previous_value=snapshot(previous, exclude=_SNAPSHOT_EXCLUDE),
            new_value=snapshot(info, exclude=_SNAPSHOT_EXCLUDE),
        )
        logger.info(
            "partner_updated",
            extra={
                "business_id": business_id,
                "partner_id": str(partner.id),
                "is_active": new_active,
            },
        )
        self._warn_on_mismatch(self.share_total(business_id))
        return info

    def deactivate(self, business_id: str, partner_id: UUID, actor: str) -> PartnerInfo:
        """Retire a partner from future calculations.  Balances are kept."""
        return self.update(business_id, partner_id, actor, is_active=False)

    def reactivate(self, business_id: str, partner_id: UUID, actor: str) -> PartnerInfo:
        return self.update(business_id, partner_id, actor, is_active=True)
