"""Tests for stage response parsing and validation."""

import json
from decimal import Decimal

import pytest

from fridge_planner.domain.errors import MalformedResponse, SchemaMismatch
from fridge_planner.domain.grocery import GroceryListResult
from fridge_planner.domain.recipes import GeneratedRecipe
from fridge_planner.domain.workflow import StageName
from fridge_planner.services.validation import (
    RECIPE_STAGE,
    normalize,
    strip_code_fences,
    validate_response,
    verify_totals,
)
from tests.conftest import (
    MEAL_PLAN_RESPONSE,
    OPTIMIZATION_RESPONSE,
    RECIPE_RESPONSE,
    SHOPPING_LIST_RESPONSE,
)


def test_strip_code_fences() -> None:
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


def test_fenced_response_parses_like_plain_json() -> None:
    text = json.dumps(MEAL_PLAN_RESPONSE)

    fenced = validate_response(StageName.MEAL_PLAN, f"```json\n{text}\n```")
    plain = validate_response(StageName.MEAL_PLAN, text)

    assert fenced.payload == plain.payload == MEAL_PLAN_RESPONSE


def test_json_surrounded_by_prose_is_recovered() -> None:
    payload = normalize('Here is your plan: {"recipes": []} Enjoy!')

    assert payload == {"recipes": []}


def test_unparseable_text_is_malformed() -> None:
    with pytest.raises(MalformedResponse) as exc_info:
        validate_response(StageName.MEAL_PLAN, "{incomplete")

    assert exc_info.value.raw_text == "{incomplete"
    assert exc_info.value.stage == StageName.MEAL_PLAN


def test_non_object_json_is_a_schema_mismatch() -> None:
    with pytest.raises(SchemaMismatch) as exc_info:
        validate_response(StageName.MEAL_PLAN, "[1, 2]")

    assert exc_info.value.field == "$"


def test_missing_required_key_is_named() -> None:
    with pytest.raises(SchemaMismatch) as exc_info:
        validate_response(StageName.SHOPPING_LIST, '{"fridgeItemsUsed": []}')

    assert exc_info.value.field == "items"


def test_wrong_container_type_is_rejected() -> None:
    with pytest.raises(SchemaMismatch) as exc_info:
        validate_response(StageName.MEAL_PLAN, '{"recipes": {"name": "Soup"}}')

    assert exc_info.value.field == "recipes"


def test_entry_missing_field_reports_index() -> None:
    recipes = [dict(MEAL_PLAN_RESPONSE["recipes"][0]), {"name": "Soup"}]

    with pytest.raises(SchemaMismatch) as exc_info:
        validate_response(StageName.MEAL_PLAN, json.dumps({"recipes": recipes}))

    assert exc_info.value.field == "cuisine"
    assert exc_info.value.index == 1


def test_nested_optimization_items_are_checked() -> None:
    payload = json.loads(json.dumps(OPTIMIZATION_RESPONSE))
    del payload["finalList"][0]["items"][0]["totalPrice"]

    with pytest.raises(SchemaMismatch) as exc_info:
        validate_response(StageName.OPTIMIZATION, json.dumps(payload))

    assert exc_info.value.field == "totalPrice"
    assert exc_info.value.path == "finalList[0].items[0]"


def test_total_cost_must_be_scalar() -> None:
    payload = {**OPTIMIZATION_RESPONSE, "totalCost": {"amount": 3.49}}

    with pytest.raises(SchemaMismatch) as exc_info:
        validate_response(StageName.OPTIMIZATION, json.dumps(payload))

    assert exc_info.value.field == "totalCost"


def test_unparseable_price_is_a_schema_mismatch() -> None:
    payload = json.loads(json.dumps(SHOPPING_LIST_RESPONSE))
    payload["items"][0]["totalPrice"] = "cheap"

    with pytest.raises(SchemaMismatch) as exc_info:
        validate_response(StageName.SHOPPING_LIST, json.dumps(payload))

    assert exc_info.value.field == "totalPrice"
    assert exc_info.value.index == 0


def test_optimization_result_is_typed() -> None:
    result = validate_response(StageName.OPTIMIZATION, json.dumps(OPTIMIZATION_RESPONSE))

    assert isinstance(result.model, GroceryListResult)
    assert result.model.total_cost == Decimal("3.49")
    assert result.model.fridge_items_used[0].item == "Eggs"


def test_recipe_stage_accepts_instruction_lists() -> None:
    result = validate_response(RECIPE_STAGE, json.dumps(RECIPE_RESPONSE))

    assert result.model.instructions == "Rinse lentils.\nSimmer for 30 minutes."
    assert result.model.servings == 2


@pytest.mark.parametrize(
    ("servings", "expected"),
    [("2-4", 2), ("4 people", 4), ("serves 6", None), (3, 3)],
)
def test_servings_use_the_leading_number(
    servings: object, expected: int | None
) -> None:
    recipe = GeneratedRecipe.model_validate({**RECIPE_RESPONSE, "servings": servings})

    assert recipe.servings == expected


def test_unit_price_with_unit_suffix_is_accepted() -> None:
    payload = json.loads(json.dumps(SHOPPING_LIST_RESPONSE))
    payload["items"][0]["unitPrice"] = "$1.99/lb"

    result = validate_response(StageName.SHOPPING_LIST, json.dumps(payload))

    assert result.model.items[0].unit_price == Decimal("1.99")


def _result(total: str, remaining: str | None) -> GroceryListResult:
    return GroceryListResult.model_validate(
        {**OPTIMIZATION_RESPONSE, "totalCost": total, "remainingBudget": remaining}
    )


def test_verify_totals_accepts_consistent_arithmetic() -> None:
    verify_totals(_result("$3.49", None), None, Decimal("0.05"))
    verify_totals(_result("$3.49", "$46.51"), Decimal("50"), Decimal("0.05"))
    verify_totals(_result("$3.52", "$46.48"), Decimal("50"), Decimal("0.05"))


def test_verify_totals_rejects_wrong_total() -> None:
    with pytest.raises(SchemaMismatch) as exc_info:
        verify_totals(_result("$10.00", None), None, Decimal("0.05"))

    assert exc_info.value.field == "totalCost"


def test_verify_totals_rejects_wrong_remaining_budget() -> None:
    with pytest.raises(SchemaMismatch) as exc_info:
        verify_totals(_result("$3.49", "$40.00"), Decimal("50"), Decimal("0.05"))

    assert exc_info.value.field == "remainingBudget"

    with pytest.raises(SchemaMismatch):
        verify_totals(_result("$3.49", None), Decimal("50"), Decimal("0.05"))
