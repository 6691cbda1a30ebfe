"""
Money -- input coercion for monetary amounts and share percentages.

Responsibility:
    The one place where loosely-typed caller input (int, str, Decimal) becomes
    a Decimal the rest of the kernel can trust.  Defaulting and coercion happen
    here, at the edge, so services never branch on input shape.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Invariants enforced:
    - No floats: float and bool inputs are rejected, never converted.
    - No NaN or infinity ever enters the ledger.
"""

from decimal import Decimal, InvalidOperation

from settlement_kernel.exceptions import InvalidAmountError, InvalidShareError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Storage scale of every money and percentage column
MONEY_QUANTUM = Decimal("1e-9")


def to_decimal(value: object) -> Decimal:
    """
    Coerce ``value`` to a finite Decimal.

    Raises:
        InvalidAmountError: for floats, bools, non-numeric strings, NaN and
            infinities.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(repr(value), "use Decimal, int or str, never float")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise InvalidAmountError(repr(value), "not a number") from None
    else:
        raise InvalidAmountError(repr(value), f"unsupported type {type(value).__name__}")

    if not result.is_finite():
        raise InvalidAmountError(repr(value), "must be finite")
    return quantize_money(result, value)


def quantize_money(amount: Decimal, original: object = None) -> Decimal:
    """Round to the 9-place storage scale (banker's rounding)."""
    try:
        return amount.quantize(MONEY_QUANTUM)
    except InvalidOperation:
        shown = repr(original) if original is not None else str(amount)
        raise InvalidAmountError(shown, "out of range") from None


def to_positive_amount(value: object) -> Decimal:
    """Coerce to Decimal and require > 0."""
    amount = to_decimal(value)
    if amount <= ZERO:
        raise InvalidAmountError(str(amount), "must be greater than zero")
    return amount


def to_nonzero_amount(value: object) -> Decimal:
    """Coerce to Decimal and require != 0 (signed adjustments)."""
    amount = to_decimal(value)
    if amount == ZERO:
        raise InvalidAmountError(str(amount), "must not be zero")
    return amount


def to_share_percentage(value: object) -> Decimal:
    """
    Coerce a profit share percentage and require 0 <= value <= 100.

    Raises:
        InvalidShareError: if out of range or not a number.
    """
    try:
        share = to_decimal(value)
    except InvalidAmountError:
        raise InvalidShareError(repr(value)) from None
    if share < ZERO or share > HUNDRED:
        raise InvalidShareError(str(share))
    return share
