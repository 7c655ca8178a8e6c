"""Store search and preferred store endpoints."""

import logging
from dataclasses import asdict

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from fridge_planner.api.security import container_from, require_api_token
from fridge_planner.domain.preferences import StorePreference

_logger = logging.getLogger(__name__)

router = APIRouter(tags=["stores"], dependencies=[Depends(require_api_token)])


@router.get("/stores/search")
async def search_stores(
    request: Request, q: str = Query(min_length=1)
) -> dict[str, object]:
    """Return city predictions for a free-text query."""
    try:
        predictions = await container_from(request).store_service.search_places(q)
    except httpx.HTTPError as exc:
        _logger.exception("Places text search failed")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
    return {"predictions": [asdict(prediction) for prediction in predictions]}


@router.get("/stores/nearby")
async def nearby_stores(
    request: Request,
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius: float = Query(default=5000, gt=0, le=50000),
) -> dict[str, object]:
    """Return grocery stores around a point, nearest first."""
    try:
        stores = await container_from(request).store_service.nearby_grocery_stores(
            lat, lng, radius
        )
    except httpx.HTTPError as exc:
        _logger.exception("Places nearby search failed")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
    return {"stores": [asdict(store) for store in stores]}


@router.put("/users/{user_id}/store")
async def select_store(
    user_id: str, store: StorePreference, request: Request
) -> dict[str, object]:
    """Save the user's preferred store."""
    try:
        saved = await container_from(request).store_service.select_store(user_id, store)
    except httpx.HTTPError as exc:
        _logger.exception("Places lookup failed for %s", store.id)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
    return {"preferred_store": saved.model_dump(mode="json")}
