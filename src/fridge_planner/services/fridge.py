"""Fridge inventory services."""

from collections.abc import Collection
from dataclasses import dataclass
from typing import Protocol

from fridge_planner.domain.fridge import FridgeItem


class FridgeRepository(Protocol):
    """Persistence interface for fridge items."""

    def list_items(self, user_id: str) -> list[FridgeItem]:
        """Return every fridge item for a user."""

    def add_item(self, user_id: str, payload: dict[str, object]) -> FridgeItem:
        """Create a fridge item and return it."""

    def update_item(
        self, user_id: str, item_id: str, payload: dict[str, object]
    ) -> FridgeItem | None:
        """Update a fridge item and return it, or None when it doesn't exist."""

    def delete_item(self, user_id: str, item_id: str) -> None:
        """Delete a fridge item."""


@dataclass
class FridgeService:
    """Application service for the fridge inventory."""

    repository: FridgeRepository

    def list_items(self, user_id: str) -> list[FridgeItem]:
        """Return items grouped by category, soonest expiring first."""
        return sorted(
            self.repository.list_items(user_id),
            key=lambda item: (
                item.category.lower(),
                item.expiration_date is None,
                item.expiration_date,
                item.name.lower(),
            ),
        )

    def add_item(self, user_id: str, payload: dict[str, object]) -> FridgeItem:
        """Add an item to the fridge."""
        return self.repository.add_item(user_id, payload)

    def update_item(
        self, user_id: str, item_id: str, payload: dict[str, object]
    ) -> FridgeItem | None:
        """Update an existing item."""
        return self.repository.update_item(user_id, item_id, payload)

    def delete_item(self, user_id: str, item_id: str) -> None:
        """Remove an item from the fridge."""
        self.repository.delete_item(user_id, item_id)

    def snapshot(
        self, user_id: str, item_ids: Collection[str] | None = None
    ) -> list[FridgeItem]:
        """Read the inventory once, optionally restricted to selected ids."""
        items = self.list_items(user_id)
        if item_ids is None:
            return items
        return [item for item in items if item.id in item_ids]
