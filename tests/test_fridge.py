"""Tests for fridge inventory helpers and services."""

from datetime import date

import pytest

from fridge_planner.domain.fridge import FridgeItem, parse_amount, remaining_quantities
from fridge_planner.domain.recipes import GeneratedRecipe
from fridge_planner.services.fridge import FridgeService
from tests.conftest import InMemoryFridgeRepository


@pytest.mark.parametrize(
    ("amount", "expected"),
    [("2", 2.0), ("1/2", 0.5), ("2 cups", 2.0), ("1.5 lb", 1.5), ("a pinch", None)],
)
def test_parse_amount(amount: str, expected: float | None) -> None:
    assert parse_amount(amount) == expected


def test_remaining_quantities_subtracts_fridge_ingredients_only() -> None:
    items = [
        FridgeItem(id="1", name="Eggs", quantity=6, unit="count"),
        FridgeItem(id="2", name="Milk", quantity=1, unit="l"),
    ]
    recipe = GeneratedRecipe.model_validate(
        {
            "name": "Omelette",
            "cuisine": "French",
            "instructions": "Cook.",
            "ingredients": [
                {"item": "eggs", "amount": "4", "source": "fridge"},
                {"item": "Milk", "amount": "2", "source": "grocery"},
            ],
        }
    )
    second = recipe.model_copy(update={"name": "Frittata"})

    remaining = remaining_quantities(items, [recipe, second])

    assert remaining == {"1": 0.0, "2": 1.0}


def test_remaining_quantities_keeps_same_name_items_apart() -> None:
    items = [
        FridgeItem(id="a", name="Milk", quantity=1, unit="l"),
        FridgeItem(id="b", name="Milk", quantity=2, unit="l"),
    ]
    recipe = GeneratedRecipe.model_validate(
        {
            "name": "Pancakes",
            "cuisine": "American",
            "instructions": "Whisk and fry.",
            "ingredients": [{"item": "milk", "amount": "1.5", "source": "fridge"}],
        }
    )

    assert remaining_quantities(items, []) == {"a": 1.0, "b": 2.0}
    assert remaining_quantities(items, [recipe]) == {"a": 0.0, "b": 1.5}


def test_list_items_groups_by_category_and_expiry() -> None:
    repository = InMemoryFridgeRepository()
    service = FridgeService(repository)
    service.add_item("u1", {"name": "Yogurt", "quantity": 1, "category": "Dairy"})
    service.add_item(
        "u1",
        {
            "name": "Milk",
            "quantity": 1,
            "category": "Dairy",
            "expiration_date": date(2026, 1, 2),
        },
    )
    service.add_item("u1", {"name": "Apples", "quantity": 3, "category": "Produce"})

    names = [item.name for item in service.list_items("u1")]

    assert names == ["Milk", "Yogurt", "Apples"]


def test_snapshot_filters_selected_ids() -> None:
    service = FridgeService(InMemoryFridgeRepository())
    kept = service.add_item("u1", {"name": "Eggs", "quantity": 6})
    service.add_item("u1", {"name": "Butter", "quantity": 1})

    assert [item.name for item in service.snapshot("u1", [kept.id])] == ["Eggs"]
    assert len(service.snapshot("u1")) == 2
    assert service.snapshot("u1", []) == []


def test_update_missing_item_returns_none() -> None:
    service = FridgeService(InMemoryFridgeRepository())

    assert service.update_item("u1", "missing", {"quantity": 2}) is None
