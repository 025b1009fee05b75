"""
Amount arithmetic for split editing.

Amounts travel as decimal strings with two fraction digits. Everything here
works in Decimal so that summing many small splits never drifts.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional, Union

AmountLike = Union[str, int, float, Decimal, None]

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def parse_amount(value: AmountLike) -> Optional[Decimal]:
    """
    Parse a user- or API-supplied amount.

    Returns None for empty, non-numeric, NaN or infinite input.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    if not parsed.is_finite():
        return None
    return parsed


def round_amount(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def normalize(value: Decimal) -> str:
    """Fixed 2-decimal string. Negative zero becomes "0.00"."""
    rounded = round_amount(value)
    if rounded == 0:
        rounded = ZERO
    return f"{rounded:.2f}"


def signed_format(value: AmountLike, reference: Decimal) -> str:
    """
    Format the magnitude of value with the sign of reference.

    Splits of a debit are debits: typing "30" against a -100.00 original
    yields "-30.00".
    """
    parsed = parse_amount(value)
    if parsed is None:
        return "0.00"
    magnitude = abs(parsed)
    return normalize(-magnitude if reference < 0 else magnitude)


def sum_amounts(values: Iterable[AmountLike]) -> Decimal:
    """Sum amounts, counting unparsable entries as zero and rounding each term."""
    total = ZERO
    for value in values:
        parsed = parse_amount(value)
        if parsed is not None:
            total += round_amount(parsed)
    return total


def format_currency(value: AmountLike) -> str:
    """
    Dollar display used in user-facing messages: "$1,234.56" / "-$1,234.56".

    Unparsable input is returned unchanged.
    """
    parsed = parse_amount(value)
    if parsed is None:
        return "" if value is None else str(value)
    rounded = round_amount(parsed)
    formatted = f"${abs(rounded):,.2f}"
    return f"-{formatted}" if rounded < 0 else formatted
