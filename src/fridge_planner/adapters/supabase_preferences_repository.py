"""Supabase repository for user preferences."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from fridge_planner.services.preferences import PreferencesRepository


@dataclass
class SupabasePreferencesRepository(PreferencesRepository):
    """Stores one preferences document per user."""

    client: Client

    def get_preferences(self, user_id: str) -> dict[str, object] | None:
        """Return the stored preferences document for a user."""
        response = (
            self.client.table("user_preferences")
            .select("preferences")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("preferences") or {}

    def merge_preferences(self, user_id: str, changes: dict[str, object]) -> None:
        """Merge top-level keys into the stored document."""
        merged = {**(self.get_preferences(user_id) or {}), **changes}
        self.client.table("user_preferences").upsert(
            {
                "user_id": user_id,
                "preferences": merged,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
