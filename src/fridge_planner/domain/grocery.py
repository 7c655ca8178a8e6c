"""Grocery list models produced by the generation workflow."""

from decimal import Decimal

from pydantic import Field, field_validator

from fridge_planner.domain.money import DisplayMoney, Money, OptionalMoney
from fridge_planner.domain.recipes import GeneratedRecipe, ProviderModel, coerce_text

STORE_CATEGORIES = (
    "Produce",
    "Dairy & Eggs",
    "Meat & Seafood",
    "Pantry",
    "Frozen",
    "Beverages",
    "Household",
    "Other",
)


class ShoppingItem(ProviderModel):
    """A single line of the shopping list."""

    name: str
    quantity: str
    unit: str | None = None
    category: str | None = None
    unit_price: DisplayMoney = None
    total_price: Money
    note: str | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: object) -> object:
        return coerce_text(value)


class ShoppingCategory(ProviderModel):
    """Shopping items grouped under a store category."""

    category: str
    items: list[ShoppingItem]


class FridgeItemUsage(ProviderModel):
    """A fridge item consumed by the plan."""

    item: str
    amount_needed: str = ""
    recipes_referencing: list[str] = Field(default_factory=list)

    @field_validator("amount_needed", mode="before")
    @classmethod
    def _coerce_amount(cls, value: object) -> object:
        if value is None:
            return ""
        return coerce_text(value)

    @field_validator("recipes_referencing", mode="before")
    @classmethod
    def _wrap_single(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value


class MealPlanDraft(ProviderModel):
    """Result of the meal plan stage."""

    recipes: list[GeneratedRecipe]


class ShoppingListDraft(ProviderModel):
    """Result of the shopping list stage."""

    items: list[ShoppingItem]
    fridge_items_used: list[FridgeItemUsage] = Field(default_factory=list)


class GroceryListResult(ProviderModel):
    """Final aggregate of a generation run."""

    categories: list[ShoppingCategory] = Field(alias="finalList")
    fridge_items_used: list[FridgeItemUsage] = Field(default_factory=list)
    total_cost: Money
    remaining_budget: OptionalMoney = None
    optimization_notes: str | None = None
    recipes: list[GeneratedRecipe] = Field(default_factory=list)

    def items_total(self) -> Decimal:
        """Sum of every item's total price."""
        return sum(
            (item.total_price for category in self.categories for item in category.items),
            Decimal("0.00"),
        )

    def ordered_categories(self) -> list[ShoppingCategory]:
        """Categories in store aisle order, unknown ones last."""
        order = {name.lower(): index for index, name in enumerate(STORE_CATEGORIES)}
        return sorted(
            self.categories,
            key=lambda group: order.get(group.category.lower(), len(order)),
        )
