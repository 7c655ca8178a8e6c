"""Request bodies accepted by the API."""

from datetime import date

from pydantic import BaseModel, Field

from fridge_planner.domain.preferences import MealType
from fridge_planner.domain.recipes import Difficulty, SavedIngredient


class FridgeItemCreate(BaseModel):
    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str = ""
    expiration_date: date | None = None
    category: str = "Other"


class FridgeItemUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    quantity: float | None = Field(default=None, ge=0)
    unit: str | None = None
    expiration_date: date | None = None
    category: str | None = None


class RecipeCreate(BaseModel):
    name: str = Field(min_length=1)
    cuisine: str = ""
    prep_time: str = ""
    cook_time: str = ""
    servings: int = Field(default=1, ge=1)
    difficulty: Difficulty = Difficulty.EASY
    ingredients: list[SavedIngredient] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    notes: str | None = None
    is_favorite: bool = False


class RecipeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    cuisine: str | None = None
    prep_time: str | None = None
    cook_time: str | None = None
    servings: int | None = Field(default=None, ge=1)
    difficulty: Difficulty | None = None
    ingredients: list[SavedIngredient] | None = None
    instructions: list[str] | None = None
    notes: str | None = None
    is_favorite: bool | None = None


class MealPlanRequest(BaseModel):
    """Start a run, optionally restricted to selected fridge items."""

    fridge_item_ids: list[str] | None = None


class RegenerateRecipeRequest(BaseModel):
    day: str = Field(min_length=1)
    meal_type: MealType


class SaveRecipeRequest(BaseModel):
    name: str = Field(min_length=1)
