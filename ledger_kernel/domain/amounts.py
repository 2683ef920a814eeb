"""
Amounts -- fixed-point monetary values in currency minor units.

Every amount that enters the kernel passes through ``to_amount()``, which
converts it to a Decimal with exactly ``MINOR_UNITS`` places and refuses
values that would lose precision.  Equality checks on amounts (most
importantly Σdebit == Σcredit) are therefore exact.

Floats are accepted only through their shortest ``repr`` (``0.1`` becomes
``Decimal("0.1")``, not the binary expansion) and then quantized.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ledger_kernel.exceptions import InvalidAmountError

MINOR_UNITS = 2
ZERO = Decimal("0.00")
_QUANTUM = Decimal(1).scaleb(-MINOR_UNITS)

AmountLike = Decimal | int | str | float


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert ``value`` to a Decimal quantized to currency minor units.

    Raises:
        InvalidAmountError: not a finite number, or has more decimal
            places than the currency allows.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(str(value), "booleans are not amounts")
    try:
        raw = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError(str(value), "not a number") from exc

    if not raw.is_finite():
        raise InvalidAmountError(str(value), "must be finite")

    quantized = raw.quantize(_QUANTUM, rounding=ROUND_HALF_UP)
    if quantized != raw:
        raise InvalidAmountError(
            str(value), f"more than {MINOR_UNITS} decimal places"
        )
    return quantized


def round_amount(value: Decimal) -> Decimal:
    """Round a computed value (e.g. a ratio product) half-up to minor units."""
    return value.quantize(_QUANTUM, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Integer count of minor units (cents) in ``amount``."""
    return int(to_amount(amount).scaleb(MINOR_UNITS))


def from_minor_units(units: int) -> Decimal:
    return Decimal(units).scaleb(-MINOR_UNITS).quantize(_QUANTUM)


def total(amounts) -> Decimal:
    """Sum of amounts, ZERO for an empty iterable."""
    return sum(amounts, ZERO)
