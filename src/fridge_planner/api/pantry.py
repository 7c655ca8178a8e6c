"""Preferences, fridge and saved recipe endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import ValidationError

from fridge_planner.api.schemas import (
    FridgeItemCreate,
    FridgeItemUpdate,
    RecipeCreate,
    RecipeUpdate,
)
from fridge_planner.api.security import container_from, require_api_token

router = APIRouter(
    prefix="/users/{user_id}",
    tags=["pantry"],
    dependencies=[Depends(require_api_token)],
)


@router.get("/preferences")
async def get_preferences(user_id: str, request: Request) -> dict[str, object]:
    """Return the user's preferences, defaults included."""
    preferences = container_from(request).preferences_service.get(user_id)
    return {"preferences": preferences.model_dump(mode="json")}


@router.put("/preferences")
async def save_preferences(
    user_id: str, request: Request, changes: dict[str, Any] = Body(...)
) -> dict[str, object]:
    """Merge a partial preferences update."""
    try:
        preferences = container_from(request).preferences_service.save(user_id, changes)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc
    return {"preferences": preferences.model_dump(mode="json")}


@router.get("/fridge")
async def list_fridge(user_id: str, request: Request) -> dict[str, object]:
    """Return the fridge inventory."""
    items = container_from(request).fridge_service.list_items(user_id)
    return {"items": [item.model_dump(mode="json") for item in items]}


@router.post("/fridge", status_code=status.HTTP_201_CREATED)
async def add_fridge_item(
    user_id: str, payload: FridgeItemCreate, request: Request
) -> dict[str, object]:
    """Add an item to the fridge."""
    item = container_from(request).fridge_service.add_item(user_id, payload.model_dump())
    return item.model_dump(mode="json")


@router.patch("/fridge/{item_id}")
async def update_fridge_item(
    user_id: str, item_id: str, payload: FridgeItemUpdate, request: Request
) -> dict[str, object]:
    """Update fields of a fridge item."""
    item = container_from(request).fridge_service.update_item(
        user_id, item_id, payload.model_dump(exclude_unset=True)
    )
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return item.model_dump(mode="json")


@router.delete("/fridge/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fridge_item(user_id: str, item_id: str, request: Request) -> None:
    """Remove an item from the fridge."""
    container_from(request).fridge_service.delete_item(user_id, item_id)


@router.get("/recipes")
async def list_recipes(user_id: str, request: Request) -> dict[str, object]:
    """Return saved recipes, favorites first."""
    recipes = container_from(request).recipe_service.list_recipes(user_id)
    return {"recipes": [recipe.model_dump(mode="json") for recipe in recipes]}


@router.post("/recipes", status_code=status.HTTP_201_CREATED)
async def add_recipe(
    user_id: str, payload: RecipeCreate, request: Request
) -> dict[str, object]:
    """Save a new recipe."""
    recipe = container_from(request).recipe_service.add_recipe(
        user_id, payload.model_dump(mode="json")
    )
    return recipe.model_dump(mode="json")


@router.patch("/recipes/{recipe_id}")
async def update_recipe(
    user_id: str, recipe_id: str, payload: RecipeUpdate, request: Request
) -> dict[str, object]:
    """Update a saved recipe, e.g. to toggle it as a favorite."""
    recipe = container_from(request).recipe_service.update_recipe(
        user_id, recipe_id, payload.model_dump(mode="json", exclude_unset=True)
    )
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return recipe.model_dump(mode="json")


@router.delete("/recipes/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(user_id: str, recipe_id: str, request: Request) -> None:
    """Delete a saved recipe."""
    container_from(request).recipe_service.delete_recipe(user_id, recipe_id)
