"""Currency parsing and formatting helpers."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated

from pydantic import BeforeValidator, PlainSerializer

_CENTS = Decimal("0.01")
_UNSET_MARKERS = {"", "n/a", "na", "none", "null", "flexible", "flexible budget"}
_FIRST_AMOUNT = re.compile(r"\d[\d,]*(?:\.\d+)?")


def parse_money(value: object) -> Decimal:
    """Parse a currency amount such as ``"$1,204.5"`` into a two-decimal value."""
    if isinstance(value, bool):
        raise ValueError("Boolean is not a currency amount")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int | float):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace("$", "").replace(",", "").strip()
        try:
            amount = Decimal(cleaned)
        except InvalidOperation as exc:
            raise ValueError(f"Not a currency amount: {value!r}") from exc
    else:
        raise ValueError(f"Not a currency amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a currency amount: {value!r}")
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def parse_optional_money(value: object) -> Decimal | None:
    """Parse a currency amount, treating blanks and placeholders as unset."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in _UNSET_MARKERS:
        return None
    return parse_money(value)


def parse_display_money(value: object) -> Decimal | None:
    """Parse a display price such as ``"$1.99/lb"``, or None when it has no amount."""
    if isinstance(value, str) and value.strip().lower() not in _UNSET_MARKERS:
        match = _FIRST_AMOUNT.search(value)
        return parse_money(match.group(0)) if match else None
    try:
        return parse_optional_money(value)
    except ValueError:
        return None


def format_money(amount: Decimal) -> str:
    """Format an amount for display, e.g. ``$100.00``."""
    return f"${amount.quantize(_CENTS, rounding=ROUND_HALF_UP):,.2f}"


def _serialize(amount: Decimal) -> str:
    return format(amount.quantize(_CENTS, rounding=ROUND_HALF_UP), "f")


Money = Annotated[
    Decimal,
    BeforeValidator(parse_money),
    PlainSerializer(_serialize, return_type=str, when_used="json"),
]
OptionalMoney = Annotated[
    Decimal | None,
    BeforeValidator(parse_optional_money),
    PlainSerializer(
        lambda amount: None if amount is None else _serialize(amount),
        return_type=str | None,
        when_used="json",
    ),
]
DisplayMoney = Annotated[
    Decimal | None,
    BeforeValidator(parse_display_money),
    PlainSerializer(
        lambda amount: None if amount is None else _serialize(amount),
        return_type=str | None,
        when_used="json",
    ),
]
