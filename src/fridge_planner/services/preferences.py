"""User preference persistence."""

from dataclasses import dataclass
from typing import Protocol

from fridge_planner.domain.preferences import StorePreference, UserPreferences


class PreferencesRepository(Protocol):
    """Persistence interface for per-user preference documents."""

    def get_preferences(self, user_id: str) -> dict[str, object] | None:
        """Return the stored preferences document, if present."""

    def merge_preferences(self, user_id: str, changes: dict[str, object]) -> None:
        """Merge top-level keys into the stored preferences document."""


@dataclass
class PreferencesService:
    """Service for reading and saving preferences."""

    repository: PreferencesRepository

    def get(self, user_id: str) -> UserPreferences:
        """Return the user's preferences, or defaults when none are stored."""
        stored = self.repository.get_preferences(user_id)
        if not stored:
            return UserPreferences()
        return UserPreferences.model_validate(stored)

    def save(self, user_id: str, changes: dict[str, object]) -> UserPreferences:
        """Validate and merge a partial update, returning the result."""
        updated = self.get(user_id).merged(changes)
        payload = updated.model_dump(mode="json")
        self.repository.merge_preferences(
            user_id, {key: payload[key] for key in changes if key in payload}
        )
        return updated

    def set_preferred_store(self, user_id: str, store: StorePreference) -> None:
        """Persist the preferred shopping location."""
        self.repository.merge_preferences(
            user_id, {"preferred_store": store.model_dump(mode="json")}
        )
