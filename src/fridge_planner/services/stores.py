"""Store search and preferred store selection."""

import logging
from dataclasses import dataclass
from typing import Protocol

from fridge_planner.domain.preferences import StorePreference
from fridge_planner.domain.stores import (
    GroceryStore,
    PlacePrediction,
    format_distance,
    haversine_miles,
    is_grocery_store,
)
from fridge_planner.services.preferences import PreferencesService

_logger = logging.getLogger(__name__)

# Bias text search towards the continental US.
US_BOUNDS = {
    "low": {"latitude": 25.82, "longitude": -124.39},
    "high": {"latitude": 49.38, "longitude": -66.95},
}
_COORDINATES = {"latitude", "longitude"}


class PlacesClient(Protocol):
    """Interface for the places/geocoding provider."""

    async def search_text(
        self, query: str, location_bias: dict[str, object] | None = None
    ) -> dict[str, object]:
        """Run a free-text place search and return raw API data."""

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_m: float,
        included_types: list[str],
        max_results: int = 20,
    ) -> dict[str, object]:
        """Search places around a point and return raw API data."""

    async def get_place(self, place_id: str) -> dict[str, object]:
        """Fetch one place and return raw API data."""


@dataclass
class StoreService:
    """Finds grocery stores and records the user's choice."""

    places_client: PlacesClient
    preferences_service: PreferencesService

    async def search_places(self, query: str) -> list[PlacePrediction]:
        """Return ranked place predictions for a free-text city query."""
        payload = await self.places_client.search_text(
            f"{query} city", location_bias={"rectangle": US_BOUNDS}
        )
        places = payload.get("places")
        if not isinstance(places, list):
            _logger.warning("Places search returned no list for query=%s", query)
            return []
        predictions = []
        for place in places:
            address = str(place.get("formattedAddress", ""))
            display = (place.get("displayName") or {}).get("text") or address
            predictions.append(
                PlacePrediction(
                    place_id=str(place["id"]),
                    description=address,
                    main_text=display,
                    secondary_text=address,
                )
            )
        return predictions

    async def get_place_location(self, place_id: str) -> tuple[float, float] | None:
        """Resolve a place id to coordinates."""
        payload = await self.places_client.get_place(place_id)
        location = payload.get("location")
        if not isinstance(location, dict):
            return None
        return float(location["latitude"]), float(location["longitude"])

    async def nearby_grocery_stores(
        self, latitude: float, longitude: float, radius_m: float = 5000
    ) -> list[GroceryStore]:
        """Return grocery stores around a point, nearest first."""
        payload = await self.places_client.search_nearby(
            latitude,
            longitude,
            radius_m,
            included_types=["supermarket", "grocery_store"],
        )
        stores = []
        for place in payload.get("places") or []:
            address = str(place.get("formattedAddress", ""))
            name = (place.get("displayName") or {}).get("text") or address
            if not is_grocery_store(name):
                continue
            location = place.get("location")
            if not isinstance(location, dict) or not _COORDINATES <= location.keys():
                _logger.debug("Skipping place %s without coordinates", place.get("id"))
                continue
            lat = float(location["latitude"])
            lng = float(location["longitude"])
            miles = haversine_miles(latitude, longitude, lat, lng)
            stores.append(
                GroceryStore(
                    id=str(place["id"]),
                    name=name,
                    address=address,
                    lat=lat,
                    lng=lng,
                    distance_miles=miles,
                    distance=format_distance(miles),
                )
            )
        return sorted(stores, key=lambda store: store.distance_miles)

    async def select_store(self, user_id: str, store: StorePreference) -> StorePreference:
        """Save the preferred store, resolving coordinates when missing."""
        if not store.has_location:
            location = await self.get_place_location(store.id)
            if location is not None:
                store = store.model_copy(update={"lat": location[0], "lng": location[1]})
        self.preferences_service.set_preferred_store(user_id, store)
        return store
