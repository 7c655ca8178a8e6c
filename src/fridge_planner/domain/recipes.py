"""Recipe models for generated and saved recipes."""

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_LEADING_INTEGER = re.compile(r"\s*(\d+)")


class IngredientSource(StrEnum):
    """Where an ingredient comes from."""

    GROCERY = "grocery"
    FRIDGE = "fridge"


class Difficulty(StrEnum):
    """Difficulty levels for saved recipes."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class ProviderModel(BaseModel):
    """Base for models parsed from completion provider JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def coerce_text(value: object) -> object:
    """Render numeric provider values as text."""
    if isinstance(value, int | float) and not isinstance(value, bool):
        return f"{value:g}"
    return value


class RecipeIngredient(ProviderModel):
    """Ingredient line of a generated recipe."""

    item: str
    amount: str = ""
    unit: str = ""
    source: IngredientSource = IngredientSource.GROCERY

    @field_validator("amount", "unit", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> object:
        if value is None:
            return ""
        return coerce_text(value)

    @field_validator("source", mode="before")
    @classmethod
    def _normalize_source(cls, value: object) -> object:
        if value is None:
            return IngredientSource.GROCERY
        if isinstance(value, str):
            return value.strip().lower()
        return value


class GeneratedRecipe(ProviderModel):
    """Recipe produced by the generation workflow."""

    name: str
    cuisine: str
    ingredients: list[RecipeIngredient]
    instructions: str
    prep_time: str | None = None
    cook_time: str | None = None
    servings: int | None = None
    difficulty: str | None = None
    day: str | None = None
    meal_type: str | None = None

    @field_validator("instructions", mode="before")
    @classmethod
    def _join_steps(cls, value: object) -> object:
        if isinstance(value, list):
            return "\n".join(str(step) for step in value)
        return value

    @field_validator("prep_time", "cook_time", mode="before")
    @classmethod
    def _coerce_times(cls, value: object) -> object:
        return coerce_text(value)

    @field_validator("servings", mode="before")
    @classmethod
    def _coerce_servings(cls, value: object) -> object:
        if isinstance(value, str):
            match = _LEADING_INTEGER.match(value)
            return int(match.group(1)) if match else None
        return value


class SavedIngredient(BaseModel):
    """Ingredient line of a saved recipe."""

    item: str
    amount: str = ""
    unit: str = ""


class UserRecipe(BaseModel):
    """Recipe saved in the user's collection."""

    id: str
    name: str
    cuisine: str = ""
    prep_time: str = ""
    cook_time: str = ""
    servings: int = 1
    difficulty: Difficulty = Difficulty.EASY
    ingredients: list[SavedIngredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    notes: str | None = None
    is_favorite: bool = False


def saved_recipe_payload(recipe: GeneratedRecipe) -> dict[str, object]:
    """Convert a generated recipe into a saved-recipe payload."""
    steps = [line.strip() for line in recipe.instructions.splitlines() if line.strip()]
    difficulty = (recipe.difficulty or "").capitalize()
    return {
        "name": recipe.name,
        "cuisine": recipe.cuisine,
        "prep_time": recipe.prep_time or "",
        "cook_time": recipe.cook_time or "",
        "servings": recipe.servings or 1,
        "difficulty": (
            difficulty
            if difficulty in {level.value for level in Difficulty}
            else Difficulty.EASY.value
        ),
        "ingredients": [
            {"item": ing.item, "amount": ing.amount, "unit": ing.unit}
            for ing in recipe.ingredients
        ],
        "instructions": steps,
        "notes": None,
        "is_favorite": False,
    }
