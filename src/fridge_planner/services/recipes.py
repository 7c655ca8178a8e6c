"""Saved recipe collection services."""

from collections.abc import Collection
from dataclasses import dataclass
from typing import Protocol

from fridge_planner.domain.recipes import GeneratedRecipe, UserRecipe, saved_recipe_payload


class RecipeRepository(Protocol):
    """Persistence interface for a user's saved recipes."""

    def list_recipes(self, user_id: str) -> list[UserRecipe]:
        """Return every saved recipe for a user."""

    def add_recipe(self, user_id: str, payload: dict[str, object]) -> UserRecipe:
        """Create a saved recipe and return it."""

    def update_recipe(
        self, user_id: str, recipe_id: str, payload: dict[str, object]
    ) -> UserRecipe | None:
        """Update a saved recipe and return it, or None when it doesn't exist."""

    def delete_recipe(self, user_id: str, recipe_id: str) -> None:
        """Delete a saved recipe."""


@dataclass
class RecipeService:
    """Application service for saved recipes."""

    repository: RecipeRepository

    def list_recipes(self, user_id: str) -> list[UserRecipe]:
        """Return saved recipes with favorites first."""
        return sorted(
            self.repository.list_recipes(user_id),
            key=lambda recipe: (not recipe.is_favorite, recipe.name.lower()),
        )

    def get_recipes(self, user_id: str, recipe_ids: Collection[str]) -> list[UserRecipe]:
        """Return the saved recipes with the given ids, in the requested order."""
        if not recipe_ids:
            return []
        by_id = {recipe.id: recipe for recipe in self.repository.list_recipes(user_id)}
        return [by_id[recipe_id] for recipe_id in recipe_ids if recipe_id in by_id]

    def add_recipe(self, user_id: str, payload: dict[str, object]) -> UserRecipe:
        """Save a new recipe."""
        return self.repository.add_recipe(user_id, payload)

    def update_recipe(
        self, user_id: str, recipe_id: str, payload: dict[str, object]
    ) -> UserRecipe | None:
        """Update a saved recipe."""
        return self.repository.update_recipe(user_id, recipe_id, payload)

    def delete_recipe(self, user_id: str, recipe_id: str) -> None:
        """Delete a saved recipe."""
        self.repository.delete_recipe(user_id, recipe_id)

    def save_generated(self, user_id: str, recipe: GeneratedRecipe) -> UserRecipe:
        """Persist a generated recipe into the user's collection."""
        return self.repository.add_recipe(user_id, saved_recipe_payload(recipe))
