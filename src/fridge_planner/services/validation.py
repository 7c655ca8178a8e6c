"""Parsing and shape validation of completion provider responses."""

import json
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal

from pydantic import BaseModel, ValidationError

from fridge_planner.domain.errors import MalformedResponse, SchemaMismatch
from fridge_planner.domain.grocery import (
    GroceryListResult,
    MealPlanDraft,
    ShoppingListDraft,
)
from fridge_planner.domain.money import format_money
from fridge_planner.domain.recipes import GeneratedRecipe
from fridge_planner.domain.workflow import StageName

_logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)

RECIPE_STAGE = "recipe"

# Sentinel container type for keys that must hold a single value.
SCALAR = (str, int, float)


@dataclass(frozen=True)
class EntrySpec:
    """Required fields of every entry in a list-valued key."""

    key: str
    fields: dict[str, type | None]
    nested: "EntrySpec | None" = None


@dataclass(frozen=True)
class StageSchema:
    """Required shape of one stage's response."""

    stage: str
    required: dict[str, type | tuple[type, ...]]
    model: type[BaseModel]
    optional: dict[str, type] = field(default_factory=dict)
    entries: tuple[EntrySpec, ...] = ()


_RECIPE_FIELDS: dict[str, type | None] = {
    "name": None,
    "cuisine": None,
    "ingredients": list,
    "instructions": None,
}
_ITEM_FIELDS: dict[str, type | None] = {
    "name": None,
    "quantity": None,
    "totalPrice": None,
}

STAGE_SCHEMAS: dict[str, StageSchema] = {
    StageName.MEAL_PLAN: StageSchema(
        stage=StageName.MEAL_PLAN,
        required={"recipes": list},
        model=MealPlanDraft,
        entries=(EntrySpec("recipes", _RECIPE_FIELDS),),
    ),
    StageName.SHOPPING_LIST: StageSchema(
        stage=StageName.SHOPPING_LIST,
        required={"items": list},
        optional={"fridgeItemsUsed": list},
        model=ShoppingListDraft,
        entries=(EntrySpec("items", _ITEM_FIELDS),),
    ),
    StageName.OPTIMIZATION: StageSchema(
        stage=StageName.OPTIMIZATION,
        required={"finalList": list, "totalCost": SCALAR},
        optional={"fridgeItemsUsed": list},
        model=GroceryListResult,
        entries=(
            EntrySpec(
                "finalList",
                {"category": None, "items": list},
                nested=EntrySpec("items", _ITEM_FIELDS),
            ),
        ),
    ),
    RECIPE_STAGE: StageSchema(
        stage=RECIPE_STAGE,
        required={
            "name": SCALAR,
            "cuisine": SCALAR,
            "ingredients": list,
            "instructions": (str, list),
        },
        model=GeneratedRecipe,
    ),
}


@dataclass(frozen=True)
class StageResult:
    """A validated stage response: the parsed payload and its typed model."""

    payload: dict[str, object]
    model: BaseModel


def strip_code_fences(text: str) -> str:
    """Trim whitespace and remove a wrapping Markdown code fence."""
    cleaned = text.strip()
    match = _FENCE.match(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def parse_json_text(text: str, *, stage: str | None = None) -> object:
    """Parse provider text as JSON, tolerating fences and surrounding prose."""
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError:
            pass
    _logger.warning("Unparseable response for stage %s: %r", stage, text[:500])
    raise MalformedResponse(
        "Response is not valid JSON", raw_text=text, stage=stage
    )


def normalize(text: str, *, stage: str | None = None) -> dict[str, object]:
    """Parse provider text into a JSON object."""
    payload = parse_json_text(text, stage=stage)
    if not isinstance(payload, dict):
        raise SchemaMismatch(
            f"Expected a JSON object, got {type(payload).__name__}",
            field="$",
            stage=stage,
        )
    return payload


def validate_response(stage: str, text: str) -> StageResult:
    """Parse and validate a stage response.

    Raises ``MalformedResponse`` when the text is not JSON and
    ``SchemaMismatch`` naming the first missing or wrongly typed key.
    """
    schema = STAGE_SCHEMAS[stage]
    payload = normalize(text, stage=stage)
    check_shape(schema, payload)
    try:
        model = schema.model.model_validate(payload)
    except ValidationError as exc:
        raise _mismatch_from(exc, stage) from exc
    return StageResult(payload=payload, model=model)


def check_shape(schema: StageSchema, payload: dict[str, object]) -> None:
    """Check required keys, container types and per-entry fields."""
    for key, expected in schema.required.items():
        if key not in payload or payload[key] is None:
            raise SchemaMismatch(
                f"Missing required key '{key}'", field=key, stage=schema.stage
            )
        _check_type(schema.stage, key, payload[key], expected)
    for key, expected in schema.optional.items():
        if payload.get(key) is not None:
            _check_type(schema.stage, key, payload[key], expected)
    for spec in schema.entries:
        _check_entries(schema.stage, spec, payload[spec.key], spec.key)


def _check_type(
    stage: str, key: str, value: object, expected: type | tuple[type, ...]
) -> None:
    if isinstance(value, bool) or not isinstance(value, expected):
        raise SchemaMismatch(
            f"Key '{key}' must be {_describe(expected)}", field=key, stage=stage
        )


def _check_entries(stage: str, spec: EntrySpec, entries: object, path: str) -> None:
    if not isinstance(entries, list):
        raise SchemaMismatch(f"Key '{path}' must be a list", field=spec.key, stage=stage)
    for index, entry in enumerate(entries):
        entry_path = f"{path}[{index}]"
        if not isinstance(entry, dict):
            raise SchemaMismatch(
                f"Entry {entry_path} must be an object",
                field=spec.key,
                index=index,
                path=entry_path,
                stage=stage,
            )
        for name, expected in spec.fields.items():
            if entry.get(name) is None:
                raise SchemaMismatch(
                    f"Entry {entry_path} is missing '{name}'",
                    field=name,
                    index=index,
                    path=entry_path,
                    stage=stage,
                )
            if expected is not None and not isinstance(entry[name], expected):
                raise SchemaMismatch(
                    f"Field '{name}' of {entry_path} must be {_describe(expected)}",
                    field=name,
                    index=index,
                    path=entry_path,
                    stage=stage,
                )
        if spec.nested is not None:
            _check_entries(
                stage,
                spec.nested,
                entry[spec.nested.key],
                f"{entry_path}.{spec.nested.key}",
            )


def _describe(expected: type | tuple[type, ...]) -> str:
    if expected is list:
        return "a list"
    if expected is dict:
        return "an object"
    return "a value"


def _mismatch_from(exc: ValidationError, stage: str) -> SchemaMismatch:
    """Translate the first pydantic error into a SchemaMismatch."""
    error = exc.errors()[0]
    location = list(error["loc"])
    names = [str(part) for part in location if isinstance(part, str)]
    indexes = [part for part in location if isinstance(part, int)]
    path = "".join(
        f"[{part}]" if isinstance(part, int) else f".{part}" for part in location
    ).lstrip(".")
    return SchemaMismatch(
        f"Invalid value at '{path}': {error['msg']}",
        field=names[-1] if names else "$",
        index=indexes[-1] if indexes else None,
        path=path or None,
        stage=stage,
    )


def verify_totals(
    result: GroceryListResult,
    budget: Decimal | None,
    tolerance: Decimal,
    *,
    stage: str = StageName.OPTIMIZATION,
) -> None:
    """Check that provider totals add up; raise SchemaMismatch when they don't."""
    items_total = result.items_total()
    if abs(items_total - result.total_cost) > tolerance:
        raise SchemaMismatch(
            f"totalCost {format_money(result.total_cost)} does not match the sum "
            f"of item prices {format_money(items_total)}",
            field="totalCost",
            stage=stage,
        )
    if budget is None:
        return
    if result.remaining_budget is None:
        raise SchemaMismatch(
            "Missing remainingBudget for a set budget",
            field="remainingBudget",
            stage=stage,
        )
    expected = budget - result.total_cost
    if abs(expected - result.remaining_budget) > tolerance:
        raise SchemaMismatch(
            f"remainingBudget {format_money(result.remaining_budget)} does not "
            f"match budget minus totalCost {format_money(expected)}",
            field="remainingBudget",
            stage=stage,
        )
