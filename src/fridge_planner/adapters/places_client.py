"""Google Places API (v1) client."""

from dataclasses import dataclass

import httpx

from fridge_planner.services.stores import PlacesClient


@dataclass
class HttpxPlacesClient(PlacesClient):
    """HTTPX-backed places client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxPlacesClient":
        """Create a places client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": "*",
        }

    async def search_text(
        self, query: str, location_bias: dict[str, object] | None = None
    ) -> dict[str, object]:
        """Run a text search."""
        body: dict[str, object] = {"textQuery": query, "languageCode": "en"}
        if location_bias:
            body["locationBias"] = location_bias
        response = await self.http_client.post(
            f"{self.base_url}/places:searchText",
            headers=self._headers(),
            json=body,
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        radius_m: float,
        included_types: list[str],
        max_results: int = 20,
    ) -> dict[str, object]:
        """Search places within a radius of a point."""
        response = await self.http_client.post(
            f"{self.base_url}/places:searchNearby",
            headers=self._headers(),
            json={
                "locationRestriction": {
                    "circle": {
                        "center": {"latitude": latitude, "longitude": longitude},
                        "radius": radius_m,
                    }
                },
                "includedTypes": included_types,
                "maxResultCount": max_results,
                "languageCode": "en",
            },
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def get_place(self, place_id: str) -> dict[str, object]:
        """Fetch place details."""
        response = await self.http_client.get(
            f"{self.base_url}/places/{place_id}",
            headers=self._headers(),
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
