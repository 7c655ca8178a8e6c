"""Supabase implementation for fridge items."""

from dataclasses import dataclass
from datetime import date

from supabase import Client

from fridge_planner.domain.fridge import FridgeItem
from fridge_planner.services.fridge import FridgeRepository

_COLUMNS = "id, name, quantity, unit, expiration_date, category"


@dataclass
class SupabaseFridgeRepository(FridgeRepository):
    """Supabase-backed repository for fridge items."""

    client: Client

    def list_items(self, user_id: str) -> list[FridgeItem]:
        """Return every fridge item for a user."""
        response = (
            self.client.table("fridge_items")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .execute()
        )
        return [_parse_item(row) for row in response.data or []]

    def add_item(self, user_id: str, payload: dict[str, object]) -> FridgeItem:
        """Create a fridge item and return it."""
        response = (
            self.client.table("fridge_items")
            .insert({"user_id": user_id, **_serialize(payload)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create fridge item")
        return _parse_item(response.data[0])

    def update_item(
        self, user_id: str, item_id: str, payload: dict[str, object]
    ) -> FridgeItem | None:
        """Update a fridge item and return it."""
        response = (
            self.client.table("fridge_items")
            .update(_serialize(payload))
            .eq("id", item_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def delete_item(self, user_id: str, item_id: str) -> None:
        """Delete a fridge item."""
        self.client.table("fridge_items").delete().eq("id", item_id).eq(
            "user_id", user_id
        ).execute()


def _serialize(payload: dict[str, object]) -> dict[str, object]:
    return {
        key: value.isoformat() if isinstance(value, date) else value
        for key, value in payload.items()
    }


def _parse_item(row: dict[str, object]) -> FridgeItem:
    """Parse a fridge item row into a domain model."""
    expiration_raw = row.get("expiration_date")
    return FridgeItem(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit") or ""),
        expiration_date=(
            date.fromisoformat(expiration_raw[:10])
            if isinstance(expiration_raw, str) and expiration_raw
            else None
        ),
        category=str(row.get("category") or "Other"),
    )
