"""Prompt construction for each generation stage.

Every builder is a pure function of the run's input snapshot and the
validated results of earlier stages. Each prompt ends with a literal
description of the JSON the stage must return.
"""

import json
from collections.abc import Iterable, Mapping, Sequence

from fridge_planner.domain.fridge import FridgeItem, remaining_quantities
from fridge_planner.domain.grocery import STORE_CATEGORIES, MealPlanDraft
from fridge_planner.domain.money import format_money
from fridge_planner.domain.preferences import (
    StorePreference,
    UserPreferences,
    clamp_days,
    day_label,
    tag_label,
)
from fridge_planner.domain.recipes import UserRecipe
from fridge_planner.domain.workflow import StageName, WorkflowInputs

JSON_ONLY = (
    "Respond with a single valid JSON object only. Do not include markdown "
    "formatting, backticks, or any text outside the JSON."
)

SYSTEM_INSTRUCTIONS: dict[StageName, str] = {
    StageName.MEAL_PLAN: (
        "You are a meal planner that creates recipes around the user's "
        "preferences, using ingredients from their fridge when they make sense "
        "for the recipe. " + JSON_ONLY
    ),
    StageName.SHOPPING_LIST: (
        "You are a grocery list generator that understands standard store "
        "packaging sizes and typical store prices. " + JSON_ONLY
    ),
    StageName.OPTIMIZATION: (
        "You are a grocery budget optimizer. You group shopping lists by store "
        "section and keep the arithmetic of every total exact. " + JSON_ONLY
    ),
}

RECIPE_SYSTEM_INSTRUCTION = (
    "You are a recipe generator that specializes in creating recipes using "
    "available ingredients when appropriate. Incorporate ingredients from the "
    "user's fridge when they fit naturally, but don't force their usage. "
    + JSON_ONLY
)

_RECIPE_SHAPE = """{
      "day": "Day label exactly as given in the meal schedule",
      "mealType": "breakfast | lunch | dinner | snack",
      "name": "Recipe Name",
      "cuisine": "Cuisine Type",
      "ingredients": [
        {
          "item": "Ingredient Name",
          "amount": "Amount",
          "unit": "Unit",
          "source": "fridge or grocery"
        }
      ],
      "instructions": "Step-by-step instructions",
      "prepTime": "15 minutes",
      "cookTime": "30 minutes",
      "servings": 2,
      "difficulty": "Easy | Medium | Hard"
    }"""

MEAL_PLAN_SCHEMA = '{\n  "recipes": [\n    ' + _RECIPE_SHAPE + "\n  ]\n}"

RECIPE_SCHEMA = _RECIPE_SHAPE.replace("\n    ", "\n")

SHOPPING_LIST_SCHEMA = """{
  "items": [
    {
      "name": "Item name",
      "quantity": "Standard store quantity (e.g. '1 package', '1 bunch')",
      "unit": "package | container | count | lb | ...",
      "category": "Store category",
      "unitPrice": "$X.XX",
      "totalPrice": "$X.XX",
      "note": "Optional note about packaging or quantity"
    }
  ],
  "fridgeItemsUsed": [
    {
      "item": "Fridge item name",
      "amountNeeded": "Amount used across the plan",
      "recipesReferencing": ["Recipe Name"]
    }
  ]
}"""

OPTIMIZATION_SCHEMA = """{
  "finalList": [
    {
      "category": "Store category",
      "items": [
        {
          "name": "Item name",
          "quantity": "Standard store quantity",
          "unitPrice": "$X.XX",
          "totalPrice": "$X.XX",
          "note": "Optional note"
        }
      ]
    }
  ],
  "fridgeItemsUsed": [
    {
      "item": "Fridge item name",
      "amountNeeded": "Amount used across the plan",
      "recipesReferencing": ["Recipe Name"]
    }
  ],
  "totalCost": "$X.XX",
  "remainingBudget": "$X.XX",
  "optimizationNotes": "What was changed to fit the budget"
}"""


def serialize_stage_result(payload: Mapping[str, object]) -> str:
    """Serialize a validated stage payload for embedding in a later prompt."""
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _labels(tags: Iterable[str], empty: str) -> str:
    rendered = [tag_label(tag) for tag in tags]
    return ", ".join(rendered) if rendered else empty


def render_budget(preferences: UserPreferences) -> str:
    """Render the budget line value."""
    if preferences.budget is None:
        return "Flexible budget"
    return format_money(preferences.budget)


def render_store(store: StorePreference | None) -> str:
    """Render the shopping location for pricing context."""
    if store is None:
        return "local stores"
    return f"{store.name}, {store.address}"


def render_preferences(preferences: UserPreferences) -> str:
    """Render every selected preference, never a sample of them."""
    repetition = (
        "Allowed"
        if preferences.allow_repetition
        else "Not allowed, every meal must be a different recipe"
    )
    lines = [
        "Dietary Restrictions: "
        + _labels(preferences.dietary_restrictions, "None"),
        "Cuisine Preferences: " + _labels(preferences.cuisine_types, "Any"),
        "Meal Types: " + _labels(preferences.meal_types, "Any"),
        f"Weekly Budget: {render_budget(preferences)}",
        f"Portion Size: {preferences.portion_size} people",
        f"Repeat Meals: {repetition}",
        f"Shopping Location: {render_store(preferences.preferred_store)}",
    ]
    return "\n".join(lines)


def render_fridge(
    items: Sequence[FridgeItem], remaining: Mapping[str, float] | None = None
) -> str:
    """Render the fridge inventory, or ``Empty`` when there is nothing in it."""
    if not items:
        return "Empty"
    remaining = remaining or {}
    lines = []
    for item in items:
        quantity = remaining.get(item.id, item.quantity)
        details = [item.category] if item.category else []
        if item.expiration_date is not None:
            details.append(f"expires {item.expiration_date.isoformat()}")
        suffix = f" ({', '.join(details)})" if details else ""
        lines.append(f"- {item.name}: {quantity:g} {item.unit}".rstrip() + suffix)
    return "\n".join(lines)


def render_schedule(preferences: UserPreferences) -> str:
    """Render one line per planned day with its meal types."""
    return "\n".join(
        f"- {day_label(day)}: {_labels(meals, 'Any')}"
        for day, meals in preferences.planned_days()
    )


def _render_saved_recipes(recipes: Sequence[UserRecipe]) -> str:
    lines = []
    for recipe in recipes:
        ingredients = ", ".join(
            " ".join(part for part in (ing.amount, ing.unit, ing.item) if part)
            for ing in recipe.ingredients
        )
        cuisine = f" ({recipe.cuisine})" if recipe.cuisine else ""
        lines.append(f"- {recipe.name}{cuisine}: {ingredients or 'no ingredients'}")
    return "\n".join(lines)


def _budget_instruction(preferences: UserPreferences, subject: str) -> str:
    if preferences.budget is None:
        return (
            f"There is no strict budget ceiling; keep {subject} reasonably priced "
            "without enforcing a limit."
        )
    return f"Keep {subject} within {format_money(preferences.budget)}."


def build_meal_plan_prompt(inputs: WorkflowInputs) -> str:
    """Build the first stage prompt: recipes for every planned slot."""
    preferences = inputs.preferences
    days = len(preferences.planned_days()) or clamp_days(preferences.days_to_plan)
    sections = [
        f"Create a {days}-day meal plan with one recipe per meal in the schedule.",
        f"Meal Schedule:\n{render_schedule(preferences)}",
        render_preferences(preferences),
        f"Fridge Inventory:\n{render_fridge(inputs.fridge_items)}",
    ]
    if inputs.saved_recipes:
        sections.append(
            "Saved Recipes To Include (use each of these as one of the meals):\n"
            + _render_saved_recipes(inputs.saved_recipes)
        )
    sections.append(
        "Instructions:\n"
        "1. Every recipe must satisfy every dietary restriction listed above.\n"
        "2. Use fridge ingredients when they make sense for the recipe, never more "
        'than what is available, and mark them with "source": "fridge". Prefer '
        "items that expire soonest.\n"
        '3. Mark every other ingredient with "source": "grocery".\n'
        f"4. Scale amounts for {preferences.portion_size} people.\n"
        f"5. {_budget_instruction(preferences, 'the ingredients for the whole plan')}\n"
        "6. Return exactly one recipe for every day and meal type in the schedule."
    )
    sections.append(f"Required JSON structure:\n{MEAL_PLAN_SCHEMA}")
    return "\n\n".join(sections)


def build_shopping_list_prompt(
    inputs: WorkflowInputs, meal_plan: Mapping[str, object]
) -> str:
    """Build the second stage prompt from the validated meal plan."""
    preferences = inputs.preferences
    recipes = MealPlanDraft.model_validate(meal_plan).recipes
    remaining = remaining_quantities(inputs.fridge_items, recipes)
    sections = [
        "Generate a grocery shopping list for the meal plan below.",
        render_preferences(preferences),
        "Fridge Inventory Remaining After The Meal Plan:\n"
        + render_fridge(inputs.fridge_items, remaining),
        f"Meal Plan:\n{serialize_stage_result(meal_plan)}",
        "Instructions:\n"
        '1. Include only ingredients whose "source" is "grocery"; combine '
        "duplicates across recipes.\n"
        "2. Convert ingredient amounts to standard store packaging sizes and round "
        'up: salt is "1 container", buns are "1 package", spices are standard '
        'jars, fresh herbs are "1 bunch".\n'
        f"3. Estimate prices at {render_store(preferences.preferred_store)}.\n"
        f"4. Use these categories: {', '.join(STORE_CATEGORIES)}.\n"
        '5. List every fridge item the recipes use under "fridgeItemsUsed".\n'
        f"6. {_budget_instruction(preferences, 'the list')}",
        f"Required JSON structure:\n{SHOPPING_LIST_SCHEMA}",
    ]
    return "\n\n".join(sections)


def build_optimization_prompt(
    inputs: WorkflowInputs, shopping_list: Mapping[str, object]
) -> str:
    """Build the final stage prompt that groups and prices the list."""
    preferences = inputs.preferences
    if preferences.budget is None:
        remaining_rule = 'Set "remainingBudget" to null.'
    else:
        remaining_rule = (
            f'"remainingBudget" must equal {format_money(preferences.budget)} '
            'minus "totalCost".'
        )
    sections = [
        "Review and optimize the shopping list below for the user's budget.",
        render_preferences(preferences),
        f"Shopping List:\n{serialize_stage_result(shopping_list)}",
        "Instructions:\n"
        f"1. Group items by category in this order: {', '.join(STORE_CATEGORIES)}.\n"
        "2. If the list is over budget, swap in cheaper substitutes that keep every "
        "dietary restriction, and explain the swaps in \"optimizationNotes\".\n"
        '3. "totalCost" must equal the sum of every item\'s "totalPrice".\n'
        f"4. {remaining_rule}\n"
        '5. Keep "fridgeItemsUsed" from the shopping list.\n'
        f"6. {_budget_instruction(preferences, 'the final list')}",
        f"Required JSON structure:\n{OPTIMIZATION_SCHEMA}",
    ]
    return "\n\n".join(sections)


def build_stage_prompt(
    stage: StageName,
    inputs: WorkflowInputs,
    results: Mapping[StageName, Mapping[str, object]],
) -> str:
    """Build the prompt for ``stage`` from the inputs and earlier results."""
    if stage is StageName.MEAL_PLAN:
        return build_meal_plan_prompt(inputs)
    if stage is StageName.SHOPPING_LIST:
        return build_shopping_list_prompt(inputs, results[StageName.MEAL_PLAN])
    return build_optimization_prompt(inputs, results[StageName.SHOPPING_LIST])


def build_recipe_prompt(
    inputs: WorkflowInputs,
    day: str,
    meal_type: str,
    exclude: Sequence[str] = (),
) -> str:
    """Build a prompt regenerating the recipe for one day and meal slot."""
    preferences = inputs.preferences
    sections = [
        f"Generate 1 recipe for {tag_label(meal_type)} on {day_label(day)}.",
        render_preferences(preferences),
        "Available Fridge Ingredients (use them only if they make sense for the "
        f"recipe):\n{render_fridge(inputs.fridge_items)}",
    ]
    if exclude and not preferences.allow_repetition:
        sections.append(
            "Do not repeat any of these recipes:\n"
            + "\n".join(f"- {name}" for name in exclude)
        )
    sections.append(
        "Instructions:\n"
        "1. The recipe must satisfy every dietary restriction listed above.\n"
        "2. When using a fridge ingredient, use a reasonable amount that doesn't "
        'exceed what is available and mark it with "source": "fridge".\n'
        f"3. Scale amounts for {preferences.portion_size} people.\n"
        f'4. Set "day" to "{day}" and "mealType" to "{meal_type}".'
    )
    sections.append(f"Required JSON structure:\n{RECIPE_SCHEMA}")
    return "\n\n".join(sections)
