"""
Typed Exception Hierarchy for the Settlement Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the ledger (dashboards, reports, batch jobs) must react to errors
precisely. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example:
    try:
        orchestrator.void_payment(business_id, payment_id, reason, actor)
    except PaymentAlreadyVoidedError as e:
        api_response(code=e.code, payment_id=e.payment_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from SettlementKernelError:

    SettlementKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidPeriodError
    |   +-- InvalidAmountError
    |   +-- InvalidShareError
    |   +-- MissingVoidReasonError
    |   +-- ShareTotalExceededError
    |
    +-- NotFoundError
    |   +-- PartnerNotFoundError
    |   +-- CalculationNotFoundError
    |   +-- PaymentNotFoundError
    |
    +-- AlreadyVoidedError
    |   +-- CalculationAlreadyVoidedError
    |   +-- PaymentAlreadyVoidedError
    |
    +-- DependencyError
    |   +-- RecordStoreError
    |   +-- FinanceSourceError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | VALIDATION_ERROR            | Bad input shape or range
                | INVALID_PERIOD              | period_end <= period_start
                | INVALID_AMOUNT              | Non-positive / zero / non-decimal amount
                | INVALID_SHARE_PERCENTAGE    | Share outside [0, 100]
                | MISSING_VOID_REASON         | Void attempted with an empty reason
                | SHARE_TOTAL_EXCEEDED        | Active shares above 100 (enforce policy)
----------------|-----------------------------|-----------------------------------------
Not found       | PARTNER_NOT_FOUND           | Unknown partner id for the business
                | CALCULATION_NOT_FOUND       | Unknown calculation id
                | PAYMENT_NOT_FOUND           | Unknown payment id
----------------|-----------------------------|-----------------------------------------
Void            | CALCULATION_ALREADY_VOIDED  | Second void of a calculation
                | PAYMENT_ALREADY_VOIDED      | Second void of a payment
----------------|-----------------------------|-----------------------------------------
Dependency      | RECORD_STORE_ERROR          | Database read/write failed
                | FINANCE_SOURCE_ERROR        | Revenue/expense source failed
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | Modifying a sealed ledger record

===============================================================================
HANDLING PATTERNS
===============================================================================

Validation and not-found errors indicate caller misuse and are never retried.
DependencyError is transient from the caller's point of view, but this core
never retries it: blindly retrying a ledger write risks duplicate entries.
===============================================================================
"""


class SettlementKernelError(Exception):
    """
    Base exception for all settlement kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SETTLEMENT_KERNEL_ERROR"


# Validation exceptions


class ValidationError(SettlementKernelError):
    """Input failed a shape or range check."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidPeriodError(ValidationError):
    """Period end does not fall strictly after period start."""

    code: str = "INVALID_PERIOD"

    def __init__(self, period_start: str, period_end: str):
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Period end {period_end} must be after period start {period_start}",
            field="period_end",
        )


class InvalidAmountError(ValidationError):
    """Amount is missing, non-decimal, or has the wrong sign for its type."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: str, reason: str):
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount}: {reason}", field="amount")


class InvalidShareError(ValidationError):
    """Profit share percentage outside [0, 100]."""

    code: str = "INVALID_SHARE_PERCENTAGE"

    def __init__(self, percentage: str):
        self.percentage = percentage
        super().__init__(
            f"Profit share percentage must be between 0 and 100, got {percentage}",
            field="profit_share_percentage",
        )


class MissingVoidReasonError(ValidationError):
    """Void requested without a reason."""

    code: str = "MISSING_VOID_REASON"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"A reason is required to void {entity_type} {entity_id}",
            field="reason",
        )


class ShareTotalExceededError(ValidationError):
    """Active partner shares exceed 100%, on a calculation or an enforced write."""

    code: str = "SHARE_TOTAL_EXCEEDED"

    def __init__(self, business_id: str, total: str):
        self.business_id = business_id
        self.total = total
        super().__init__(
            f"Active partner shares for business {business_id} total {total}%, "
            "which exceeds 100%",
            field="profit_share_percentage",
        )


# Not-found exceptions


class NotFoundError(SettlementKernelError):
    """Referenced record does not exist for the business."""

    code: str = "NOT_FOUND"


class PartnerNotFoundError(NotFoundError):
    """Partner with given ID was not found."""

    code: str = "PARTNER_NOT_FOUND"

    def __init__(self, partner_id: str):
        self.partner_id = partner_id
        super().__init__(f"Partner not found: {partner_id}")


class CalculationNotFoundError(NotFoundError):
    """Profit calculation with given ID was not found."""

    code: str = "CALCULATION_NOT_FOUND"

    def __init__(self, calculation_id: str):
        self.calculation_id = calculation_id
        super().__init__(f"Profit calculation not found: {calculation_id}")


class PaymentNotFoundError(NotFoundError):
    """Partner payment with given ID was not found."""

    code: str = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: str):
        self.payment_id = payment_id
        super().__init__(f"Partner payment not found: {payment_id}")


# Void exceptions


class AlreadyVoidedError(SettlementKernelError):
    """Void attempted on a record that is already voided."""

    code: str = "ALREADY_VOIDED"


class CalculationAlreadyVoidedError(AlreadyVoidedError):
    """Profit calculation was already voided."""

    code: str = "CALCULATION_ALREADY_VOIDED"

    def __init__(self, calculation_id: str):
        self.calculation_id = calculation_id
        super().__init__(f"Profit calculation {calculation_id} is already voided")


class PaymentAlreadyVoidedError(AlreadyVoidedError):
    """Partner payment was already voided."""

    code: str = "PAYMENT_ALREADY_VOIDED"

    def __init__(self, payment_id: str):
        self.payment_id = payment_id
        super().__init__(f"Partner payment {payment_id} is already voided")


# Dependency exceptions


class DependencyError(SettlementKernelError):
    """An external collaborator (record store, finance source) failed."""

    code: str = "DEPENDENCY_ERROR"


class RecordStoreError(DependencyError):
    """The underlying record store failed to read or write."""

    code: str = "RECORD_STORE_ERROR"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Record store {operation} failed: {detail}")


class FinanceSourceError(DependencyError):
    """The revenue/expense aggregation source failed."""

    code: str = "FINANCE_SOURCE_ERROR"

    def __init__(self, business_id: str, detail: str):
        self.business_id = business_id
        self.detail = detail
        super().__init__(
            f"Finance source failed for business {business_id}: {detail}"
        )


# Immutability exceptions


class ImmutabilityViolationError(SettlementKernelError):
    """
    Attempted to modify or delete a sealed ledger record.

    Raised by ORM listeners; indicates a programming error rather than
    caller misuse.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )
