"""Meal plan generation endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from fridge_planner.api.schemas import (
    MealPlanRequest,
    RegenerateRecipeRequest,
    SaveRecipeRequest,
)
from fridge_planner.api.security import container_from, require_api_token
from fridge_planner.domain.errors import (
    GenerationError,
    GenerationInProgress,
    InvalidTransition,
    RecipeNotFound,
    RunNotFound,
)
from fridge_planner.domain.workflow import GenerationRun
from fridge_planner.services.meal_plans import FAILURE_MESSAGE, is_failed

router = APIRouter(
    prefix="/users/{user_id}/meal-plans",
    tags=["meal-plans"],
    dependencies=[Depends(require_api_token)],
)


@router.post("")
async def generate_meal_plan(
    user_id: str, request: Request, payload: MealPlanRequest | None = None
) -> JSONResponse:
    """Run the generation workflow and return the terminal run."""
    service = container_from(request).meal_plan_service
    fridge_item_ids = payload.fridge_item_ids if payload else None
    try:
        run = await service.generate(user_id, fridge_item_ids)
    except GenerationInProgress as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _run_response(run)


@router.get("/{run_id}")
async def get_meal_plan(user_id: str, run_id: UUID, request: Request) -> JSONResponse:
    """Return a persisted run."""
    try:
        run = container_from(request).meal_plan_service.get_run(user_id, run_id)
    except RunNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return _run_response(run)


@router.post("/{run_id}/retry")
async def retry_meal_plan(user_id: str, run_id: UUID, request: Request) -> JSONResponse:
    """Continue a failed run from the stage that failed."""
    try:
        run = await container_from(request).meal_plan_service.retry(user_id, run_id)
    except RunNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except (GenerationInProgress, InvalidTransition) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _run_response(run)


@router.post("/{run_id}/recipes/regenerate")
async def regenerate_recipe(
    user_id: str, run_id: UUID, payload: RegenerateRecipeRequest, request: Request
) -> dict[str, object]:
    """Generate a replacement recipe for one day and meal."""
    service = container_from(request).meal_plan_service
    try:
        recipe = await service.regenerate_recipe(
            user_id, run_id, payload.day, payload.meal_type
        )
    except RunNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except InvalidTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except GenerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message
        ) from exc
    return {"recipe": recipe.model_dump(mode="json", by_alias=True)}


@router.post("/{run_id}/recipes/save", status_code=status.HTTP_201_CREATED)
async def save_recipe(
    user_id: str, run_id: UUID, payload: SaveRecipeRequest, request: Request
) -> dict[str, object]:
    """Copy a generated recipe into the user's saved recipes."""
    service = container_from(request).meal_plan_service
    try:
        recipe = service.save_recipe(user_id, run_id, payload.name)
    except (RunNotFound, RecipeNotFound) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return recipe.model_dump(mode="json")


def run_body(run: GenerationRun) -> dict[str, object]:
    """Serialize a run for API responses."""
    state = run.state
    return {
        "id": str(run.id),
        "retry_of": str(run.retry_of) if run.retry_of else None,
        "state": state.label,
        "status": state.status.value,
        "stage_index": state.stage_index,
        "failure": state.failure.model_dump(mode="json") if state.failure else None,
        "result": (
            state.result.model_dump(mode="json", by_alias=True) if state.result else None
        ),
    }


def _run_response(run: GenerationRun) -> JSONResponse:
    body = run_body(run)
    if is_failed(run):
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": FAILURE_MESSAGE, "run": body},
        )
    return JSONResponse(content={"run": body})
