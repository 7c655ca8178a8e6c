"""User planning preferences and store selection."""

from collections.abc import Iterable
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fridge_planner.domain.money import OptionalMoney

MIN_DAYS = 1
MAX_DAYS = 7

DAY_NAMES = {
    "SUN": "Sunday",
    "MON": "Monday",
    "TUE": "Tuesday",
    "WED": "Wednesday",
    "THU": "Thursday",
    "FRI": "Friday",
    "SAT": "Saturday",
}


class DietaryRestriction(StrEnum):
    """Dietary restriction tags."""

    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    GLUTEN_FREE = "gluten-free"
    DAIRY_FREE = "dairy-free"
    NUT_FREE = "nut-free"
    KETO = "keto"
    PALEO = "paleo"
    LOW_CARB = "low-carb"
    HALAL = "halal"
    KOSHER = "kosher"


class Cuisine(StrEnum):
    """Cuisine preference tags."""

    ITALIAN = "italian"
    MEXICAN = "mexican"
    AMERICAN = "american"
    ASIAN = "asian"
    MEDITERRANEAN = "mediterranean"
    INDIAN = "indian"
    THAI = "thai"
    JAPANESE = "japanese"
    CHINESE = "chinese"
    GREEK = "greek"
    SPANISH = "spanish"
    FRENCH = "french"
    VIETNAMESE = "vietnamese"
    KOREAN = "korean"
    CARIBBEAN = "caribbean"


class MealType(StrEnum):
    """Meal slots that can be planned for a day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


def tag_label(tag: str) -> str:
    """Render a tag for display, e.g. ``gluten-free`` -> ``Gluten-Free``."""
    return "-".join(part.capitalize() for part in str(tag).split("-"))


def day_label(day: str) -> str:
    """Expand three-letter day codes to full names."""
    return DAY_NAMES.get(day.strip().upper(), day.strip())


def clamp_days(days: int) -> int:
    """Clamp a requested plan length to the supported range."""
    return max(MIN_DAYS, min(MAX_DAYS, days))


class StorePreference(BaseModel):
    """Preferred shopping location."""

    id: str
    name: str
    address: str
    lat: float | None = None
    lng: float | None = None

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None


class UserPreferences(BaseModel):
    """Durable per-user planning preferences."""

    model_config = ConfigDict(frozen=True)

    dietary_restrictions: list[DietaryRestriction] = Field(default_factory=list)
    cuisine_types: list[Cuisine] = Field(default_factory=list)
    meal_types: list[MealType] = Field(
        default_factory=lambda: [MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER]
    )
    budget: OptionalMoney = None
    days_to_plan: int = MAX_DAYS
    allow_repetition: bool = False
    portion_size: int = Field(default=2, ge=1)
    selected_days: dict[str, list[MealType]] = Field(default_factory=dict)
    selected_user_recipe_ids: list[str] = Field(default_factory=list)
    preferred_store: StorePreference | None = None

    @field_validator("dietary_restrictions", "cuisine_types", "meal_types", mode="before")
    @classmethod
    def _normalize_tags(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, Iterable):
            return _unique(str(tag).strip().lower() for tag in value)
        return value

    @field_validator("selected_days", mode="before")
    @classmethod
    def _normalize_selected_days(cls, value: object) -> object:
        if not isinstance(value, dict):
            return value
        normalized: dict[str, list[str]] = {}
        for day, meals in value.items():
            # The mobile client stores {"MON": {"dinner": true, "lunch": false}}.
            if isinstance(meals, dict):
                meals = [meal for meal, selected in meals.items() if selected]
            if isinstance(meals, str):
                meals = [meals]
            normalized[str(day)] = _unique(str(meal).strip().lower() for meal in meals)
        return normalized

    @field_validator("selected_user_recipe_ids", mode="before")
    @classmethod
    def _normalize_recipe_ids(cls, value: object) -> object:
        if isinstance(value, Iterable) and not isinstance(value, str):
            return _unique(str(item) for item in value)
        return value

    @field_validator("days_to_plan", mode="before")
    @classmethod
    def _clamp_days(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            value = int(value.strip())
        if isinstance(value, int) and not isinstance(value, bool):
            return clamp_days(value)
        return value

    @field_validator("budget")
    @classmethod
    def _positive_budget(cls, value: Decimal | None) -> Decimal | None:
        if value is not None and value <= 0:
            raise ValueError("Budget must be a positive amount")
        return value

    def planned_days(self) -> list[tuple[str, list[MealType]]]:
        """Return the day/meal slots the plan should cover."""
        days = clamp_days(self.days_to_plan)
        if self.selected_days:
            slots = [
                (day, meals or list(self.meal_types))
                for day, meals in self.selected_days.items()
            ]
            return slots[:days]
        meals = list(self.meal_types) or [MealType.DINNER]
        return [(f"Day {index}", meals) for index in range(1, days + 1)]

    def merged(self, changes: dict[str, object]) -> "UserPreferences":
        """Return preferences with top-level fields replaced by ``changes``."""
        payload = self.model_dump(mode="json")
        payload.update(changes)
        return UserPreferences.model_validate(payload)


def _unique(values: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen
