"""SOL <-> lamport conversion."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from tipjar.core.constants import LAMPORTS_PER_SOL, U64_MAX
from tipjar.core.errors import InvalidAmount

Amount = Union[Decimal, int, float, str]


def to_decimal(value: Amount) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        # str() keeps floats like 0.1 exact instead of their binary expansion
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Invalid amount: {value!r}") from e


def to_minor_units(major: Amount) -> int:
    """Convert SOL to lamports, rounding half-up to the nearest lamport."""
    amount = to_decimal(major)
    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {major!r}")
    if amount < 0:
        raise InvalidAmount(f"Amount must not be negative, got {major!r}")
    # Anything past 10^20 SOL is far outside u64 and would overflow the scaling below
    if amount and amount.adjusted() > 20:
        raise InvalidAmount(f"Amount {major!r} exceeds the u64 lamport range")

    lamports = int((amount * LAMPORTS_PER_SOL).to_integral_value(rounding=ROUND_HALF_UP))
    if lamports > U64_MAX:
        raise InvalidAmount(f"Amount {major!r} exceeds the u64 lamport range")
    return lamports


def to_major_units(minor: int) -> Decimal:
    """Convert lamports to SOL."""
    if minor < 0:
        raise InvalidAmount(f"Lamports must not be negative, got {minor}")
    return Decimal(minor) / Decimal(LAMPORTS_PER_SOL)
