"""Supabase implementation for saved recipes."""

from dataclasses import dataclass

from supabase import Client

from fridge_planner.domain.recipes import UserRecipe
from fridge_planner.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for a user's saved recipes."""

    client: Client

    def list_recipes(self, user_id: str) -> list[UserRecipe]:
        """Return every saved recipe for a user."""
        response = (
            self.client.table("user_recipes")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def add_recipe(self, user_id: str, payload: dict[str, object]) -> UserRecipe:
        """Create a saved recipe and return it."""
        response = (
            self.client.table("user_recipes")
            .insert({"user_id": user_id, **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe")
        return _parse_recipe(response.data[0])

    def update_recipe(
        self, user_id: str, recipe_id: str, payload: dict[str, object]
    ) -> UserRecipe | None:
        """Update a saved recipe and return it."""
        response = (
            self.client.table("user_recipes")
            .update(payload)
            .eq("id", recipe_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def delete_recipe(self, user_id: str, recipe_id: str) -> None:
        """Delete a saved recipe."""
        self.client.table("user_recipes").delete().eq("id", recipe_id).eq(
            "user_id", user_id
        ).execute()


def _parse_recipe(row: dict[str, object]) -> UserRecipe:
    """Parse a recipe row, dropping storage-only columns."""
    fields = {
        key: value
        for key, value in row.items()
        if key in UserRecipe.model_fields and value is not None
    }
    fields["id"] = str(row["id"])
    return UserRecipe.model_validate(fields)
