"""
ORM-Level Immutability Enforcement for ledger records.

===============================================================================
WHY THIS EXISTS
===============================================================================

Settlement records are reversed by voiding, never by editing or deleting.
Services already follow that rule; these listeners make it impossible for any
Python/SQLAlchemy code path to break it by accident.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database:

    session.flush()
         |
         v
    [before_update event] --> _check_*_update() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _reject_delete() ---> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity             | Mutable fields                         | Delete
-------------------|----------------------------------------|--------
Partner            | all (identity edits are legitimate)    | never
ProfitCalculation  | void transition only, while not voided | never
ProfitAllocation   | none                                   | never
PartnerPayment     | void flag flip only, while not voided  | never
AuditEntry         | none                                   | never

===============================================================================
DESIGN DECISIONS
===============================================================================

1. updated_at/updated_by are audit metadata and may always change.
2. The "was voided" test reads attribute history, so the void transition
   itself is allowed while every change after it is blocked.
3. Model imports are inline to avoid a db -> models import cycle.

To temporarily disable (TESTS ONLY - never in production):

    unregister_immutability_listeners()
    ...
    register_immutability_listeners()
===============================================================================
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from settlement_kernel.exceptions import ImmutabilityViolationError
from settlement_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_METADATA_FIELDS = frozenset({"updated_at", "updated_by"})

_CALCULATION_VOID_FIELDS = frozenset(
    {"status", "voided_at", "voided_by", "void_reason"}
)

_PAYMENT_VOID_FIELDS = frozenset(
    {"is_voided", "voided_at", "voided_by", "void_reason"}
)


def _changed_columns(target) -> set[str]:
    """Column attributes with pending changes, excluding audit metadata."""
    insp = inspect(target)
    changed = set()
    for attr in insp.mapper.column_attrs:
        if attr.key in _AUDIT_METADATA_FIELDS:
            continue
        if insp.attrs[attr.key].history.has_changes():
            changed.add(attr.key)
    return changed


def _previous_value(target, key: str):
    """Value of ``key`` as it was before the pending change."""
    history = get_history(target, key)
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    return getattr(target, key)


def _block(entity_type: str, target, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
            "reason": reason,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_calculation_update(mapper, connection, target) -> None:
    """Allow only FINALIZED -> VOIDED with its metadata."""
    from settlement_kernel.models.profit_calculation import CalculationStatus

    changed = _changed_columns(target)
    if not changed:
        return

    if _previous_value(target, "status") == CalculationStatus.VOIDED:
        _block(
            "ProfitCalculation", target, "UPDATE",
            "voided calculations are sealed",
        )

    illegal = changed - _CALCULATION_VOID_FIELDS
    if illegal:
        _block(
            "ProfitCalculation", target, "UPDATE",
            f"cannot modify field(s) {sorted(illegal)} on a calculation",
        )

    if "status" in changed and target.status != CalculationStatus.VOIDED:
        _block(
            "ProfitCalculation", target, "UPDATE",
            f"status may only transition to voided, not {target.status}",
        )


def _check_payment_update(mapper, connection, target) -> None:
    """Allow only is_voided False -> True with its metadata."""
    changed = _changed_columns(target)
    if not changed:
        return

    if _previous_value(target, "is_voided"):
        _block(
            "PartnerPayment", target, "UPDATE",
            "voided payments are sealed",
        )

    illegal = changed - _PAYMENT_VOID_FIELDS
    if illegal:
        _block(
            "PartnerPayment", target, "UPDATE",
            f"cannot modify field(s) {sorted(illegal)} on a payment",
        )

    if "is_voided" in changed and not target.is_voided:
        _block(
            "PartnerPayment", target, "UPDATE",
            "the void flag cannot be cleared",
        )


def _check_sealed_update(mapper, connection, target) -> None:
    """Records that never change after INSERT."""
    if _changed_columns(target):
        _block(type(target).__name__, target, "UPDATE", "record is append-only")


def _reject_delete(mapper, connection, target) -> None:
    _block(
        type(target).__name__, target, "DELETE",
        "ledger records are never deleted",
    )


def _listener_table():
    from settlement_kernel.models.audit_entry import AuditEntry
    from settlement_kernel.models.partner import Partner
    from settlement_kernel.models.partner_payment import PartnerPayment
    from settlement_kernel.models.profit_calculation import (
        ProfitAllocation,
        ProfitCalculation,
    )

    return [
        (ProfitCalculation, "before_update", _check_calculation_update),
        (PartnerPayment, "before_update", _check_payment_update),
        (ProfitAllocation, "before_update", _check_sealed_update),
        (AuditEntry, "before_update", _check_sealed_update),
        (Partner, "before_delete", _reject_delete),
        (ProfitCalculation, "before_delete", _reject_delete),
        (ProfitAllocation, "before_delete", _reject_delete),
        (PartnerPayment, "before_delete", _reject_delete),
        (AuditEntry, "before_delete", _reject_delete),
    ]


def register_immutability_listeners() -> None:
    """Register all ORM immutability listeners (idempotent)."""
    for model, identifier, fn in _listener_table():
        if not event.contains(model, identifier, fn):
            event.listen(model, identifier, fn)
    logger.debug("immutability_listeners_registered")


def unregister_immutability_listeners() -> None:
    """Remove all ORM immutability listeners. FOR TESTING ONLY."""
    for model, identifier, fn in _listener_table():
        if event.contains(model, identifier, fn):
            event.remove(model, identifier, fn)
    logger.debug("immutability_listeners_unregistered")
