"""Amount parsing and rounding utilities."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥\s]")


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to cents using half-up rounding."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(amount_str: str) -> Decimal:
    """Parse a user-entered amount into a Decimal.

    Accepts "123.45", "-$1,234.56" and accounting notation "(123.45)" for
    negative amounts. The result is rounded to cents.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    text = str(amount_str).strip()
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    text = _CURRENCY_SYMBOLS.sub("", text).replace(",", "")

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return quantize_amount(-amount if negative else amount)
