"""Fridge inventory models."""

import re
from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel, ConfigDict

from fridge_planner.domain.recipes import GeneratedRecipe, IngredientSource

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)(?:\s*/\s*(\d+(?:\.\d+)?))?")


class FridgeItem(BaseModel):
    """A user-tracked inventory record."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    quantity: float
    unit: str = ""
    expiration_date: date | None = None
    category: str = "Other"


def parse_amount(amount: str) -> float | None:
    """Parse the leading quantity of an amount such as ``"1/2"`` or ``"2 cups"``."""
    match = _LEADING_NUMBER.match(amount)
    if match is None:
        return None
    value = float(match.group(1))
    if match.group(2):
        denominator = float(match.group(2))
        if denominator == 0:
            return None
        value /= denominator
    return value


def remaining_quantities(
    items: Iterable[FridgeItem], recipes: Iterable[GeneratedRecipe]
) -> dict[str, float]:
    """Return the quantity left per fridge item id after the recipes use theirs.

    Only ingredients marked as coming from the fridge are subtracted; amounts
    that cannot be parsed are ignored and quantities never go below zero. An
    amount is drawn from items sharing the ingredient name in inventory order.
    """
    items = list(items)
    remaining = {item.id: item.quantity for item in items}
    by_name: dict[str, list[str]] = {}
    for item in items:
        by_name.setdefault(item.name.strip().lower(), []).append(item.id)
    for recipe in recipes:
        for ingredient in recipe.ingredients:
            if ingredient.source is not IngredientSource.FRIDGE:
                continue
            item_ids = by_name.get(ingredient.item.strip().lower())
            amount = parse_amount(ingredient.amount)
            if item_ids is None or amount is None:
                continue
            for item_id in item_ids:
                used = min(amount, remaining[item_id])
                remaining[item_id] -= used
                amount -= used
                if amount <= 0:
                    break
    return remaining
