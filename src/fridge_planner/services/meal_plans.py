"""Meal plan generation workflow."""

import logging
from collections.abc import Collection
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from fridge_planner.domain.errors import (
    GenerationError,
    GenerationInProgress,
    InvalidTransition,
    RecipeNotFound,
    RunNotFound,
)
from fridge_planner.domain.grocery import GroceryListResult, MealPlanDraft
from fridge_planner.domain.recipes import GeneratedRecipe, UserRecipe
from fridge_planner.domain.workflow import (
    STAGES,
    GenerationRun,
    StageName,
    WorkflowInputs,
    WorkflowState,
    WorkflowStatus,
    complete_stage,
    fail_stage,
    finish,
    new_state,
    resume_from,
    start_next_stage,
)
from fridge_planner.services.completion import StageExecutor
from fridge_planner.services.fridge import FridgeService
from fridge_planner.services.preferences import PreferencesService
from fridge_planner.services.prompts import (
    RECIPE_SYSTEM_INSTRUCTION,
    SYSTEM_INSTRUCTIONS,
    build_recipe_prompt,
    build_stage_prompt,
)
from fridge_planner.services.recipes import RecipeService
from fridge_planner.services.validation import (
    RECIPE_STAGE,
    validate_response,
    verify_totals,
)

_logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to generate your meal plan. Please try again."


class GenerationRunRepository(Protocol):
    """Persistence interface for workflow runs."""

    def create_run(
        self, user_id: str, state: WorkflowState, retry_of: UUID | None = None
    ) -> GenerationRun:
        """Create a run and return it."""

    def get_run(self, run_id: UUID) -> GenerationRun | None:
        """Return a run by id, if present."""

    def update_run(self, run_id: UUID, state: WorkflowState) -> None:
        """Persist the latest state of a run."""


@dataclass
class MealPlanService:
    """Drives the multi-stage generation workflow for a user."""

    preferences_service: PreferencesService
    fridge_service: FridgeService
    recipe_service: RecipeService
    executor: StageExecutor
    run_repository: GenerationRunRepository
    check_totals: bool = True
    total_tolerance: Decimal = Decimal("0.05")
    _in_flight: set[str] = field(default_factory=set, init=False, repr=False)

    def snapshot(
        self, user_id: str, fridge_item_ids: Collection[str] | None = None
    ) -> WorkflowInputs:
        """Read preferences, fridge and saved recipes once for a run."""
        preferences = self.preferences_service.get(user_id)
        return WorkflowInputs(
            preferences=preferences,
            fridge_items=self.fridge_service.snapshot(user_id, fridge_item_ids),
            saved_recipes=self.recipe_service.get_recipes(
                user_id, preferences.selected_user_recipe_ids
            ),
        )

    async def generate(
        self, user_id: str, fridge_item_ids: Collection[str] | None = None
    ) -> GenerationRun:
        """Run every stage from the start and return the terminal run."""
        with self._guard(user_id):
            inputs = self.snapshot(user_id, fridge_item_ids)
            run = self.run_repository.create_run(user_id, new_state(inputs))
            _logger.info("Started generation run %s for user %s", run.id, user_id)
            return await self._drive(run)

    async def retry(self, user_id: str, run_id: UUID) -> GenerationRun:
        """Continue a failed run from its failed stage as a new run."""
        previous = self.get_run(user_id, run_id)
        with self._guard(user_id):
            state = resume_from(previous.state)
            run = self.run_repository.create_run(user_id, state, retry_of=previous.id)
            _logger.info(
                "Retrying run %s as %s from stage %s",
                previous.id,
                run.id,
                state.stage_index + 1,
            )
            return await self._drive(run)

    def get_run(self, user_id: str, run_id: UUID) -> GenerationRun:
        """Return a user's run or raise RunNotFound."""
        run = self.run_repository.get_run(run_id)
        if run is None or run.user_id != user_id:
            raise RunNotFound(f"Run {run_id} not found")
        return run

    async def regenerate_recipe(
        self, user_id: str, run_id: UUID, day: str, meal_type: str
    ) -> GeneratedRecipe:
        """Generate a replacement recipe for one slot of a run's meal plan."""
        run = self.get_run(user_id, run_id)
        meal_plan = run.state.results.get(StageName.MEAL_PLAN)
        if meal_plan is None:
            raise InvalidTransition("The meal plan stage has not completed for this run")
        existing = MealPlanDraft.model_validate(meal_plan).recipes
        prompt = build_recipe_prompt(
            run.state.inputs,
            day,
            meal_type,
            exclude=[recipe.name for recipe in existing],
        )
        text = await self.executor.run(RECIPE_STAGE, RECIPE_SYSTEM_INSTRUCTION, prompt)
        recipe = validate_response(RECIPE_STAGE, text).model
        return recipe.model_copy(update={"day": day, "meal_type": meal_type})

    def save_recipe(self, user_id: str, run_id: UUID, name: str) -> UserRecipe:
        """Copy a generated recipe of a run into the user's collection."""
        run = self.get_run(user_id, run_id)
        meal_plan = run.state.results.get(StageName.MEAL_PLAN)
        recipes = MealPlanDraft.model_validate(meal_plan).recipes if meal_plan else []
        wanted = name.strip().lower()
        for recipe in recipes:
            if recipe.name.strip().lower() == wanted:
                return self.recipe_service.save_generated(user_id, recipe)
        raise RecipeNotFound(f"Run {run_id} has no recipe named {name!r}")

    async def _drive(self, run: GenerationRun) -> GenerationRun:
        state = run.state
        while state.stage_index < len(STAGES):
            state = start_next_stage(state)
            self.run_repository.update_run(run.id, state)
            stage = STAGES[state.stage_index - 1]
            try:
                payload = await self._run_stage(stage, state)
            except GenerationError as exc:
                exc.stage = exc.stage or stage
                state = fail_stage(state, exc)
                self.run_repository.update_run(run.id, state)
                _logger.warning(
                    "Run %s failed at stage %s (%s): %s",
                    run.id,
                    stage,
                    exc.kind,
                    exc.message,
                )
                return _with_state(run, state)
            except Exception:
                failed = fail_stage(
                    state, GenerationError("Unexpected error", stage=stage)
                )
                self.run_repository.update_run(run.id, failed)
                _logger.exception("Run %s aborted at stage %s", run.id, stage)
                raise
            state = complete_stage(state, payload)
            self.run_repository.update_run(run.id, state)
            _logger.info("Run %s finished stage %s", run.id, stage)

        state = finish(state, _assemble(state))
        self.run_repository.update_run(run.id, state)
        _logger.info("Run %s complete", run.id)
        return _with_state(run, state)

    async def _run_stage(self, stage: StageName, state: WorkflowState) -> dict[str, object]:
        prompt = build_stage_prompt(stage, state.inputs, state.results)
        text = await self.executor.run(stage, SYSTEM_INSTRUCTIONS[stage], prompt)
        validated = validate_response(stage, text)
        if stage is StageName.OPTIMIZATION and self.check_totals:
            verify_totals(
                validated.model,
                state.inputs.preferences.budget,
                self.total_tolerance,
            )
        return validated.payload

    def _guard(self, user_id: str) -> "_InFlight":
        return _InFlight(self._in_flight, user_id)


@dataclass
class _InFlight:
    """Allows one in-flight generation per user."""

    active: set[str]
    user_id: str

    def __enter__(self) -> None:
        if self.user_id in self.active:
            raise GenerationInProgress(self.user_id)
        self.active.add(self.user_id)

    def __exit__(self, *exc_info: object) -> None:
        self.active.discard(self.user_id)


def _assemble(state: WorkflowState) -> GroceryListResult:
    """Combine the final stage payload with the meal plan recipes."""
    recipes = MealPlanDraft.model_validate(state.results[StageName.MEAL_PLAN]).recipes
    result = GroceryListResult.model_validate(state.results[StageName.OPTIMIZATION])
    return result.model_copy(update={"recipes": recipes})


def _with_state(run: GenerationRun, state: WorkflowState) -> GenerationRun:
    return replace(run, state=state)


def is_failed(run: GenerationRun) -> bool:
    """Return True when the run ended in the Failed state."""
    return run.state.status is WorkflowStatus.FAILED
