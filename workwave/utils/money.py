"""
Currency amounts travel through the API as decimal units (12.50) and reach the
payment provider as integer minor units (1250). Conversion goes through Decimal so
two-decimal values round-trip exactly.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")


def to_minor_units(amount: Union[float, int, str, Decimal]) -> int:
    """12.5 -> 1250. Sub-cent fractions round half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int) -> float:
    """1250 -> 12.5"""
    return float((Decimal(minor) / 100).quantize(CENT))


def amounts_match(first: Union[float, Decimal], second: Union[float, Decimal]) -> bool:
    """True when two currency amounts agree to the cent"""
    return abs(Decimal(str(first)) - Decimal(str(second))) <= CENT
