"""Generation workflow state and its transitions.

The state is an immutable value: every transition returns a new
``WorkflowState`` and raises ``InvalidTransition`` when the current state does
not allow it. ``Complete`` and ``Failed`` are terminal.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from fridge_planner.domain.errors import (
    GenerationError,
    InvalidTransition,
    MalformedResponse,
    SchemaMismatch,
)
from fridge_planner.domain.fridge import FridgeItem
from fridge_planner.domain.grocery import GroceryListResult
from fridge_planner.domain.preferences import UserPreferences
from fridge_planner.domain.recipes import UserRecipe


class StageName(StrEnum):
    """Stages of the generation workflow in execution order."""

    MEAL_PLAN = "meal_plan"
    SHOPPING_LIST = "shopping_list"
    OPTIMIZATION = "optimization"


STAGES: tuple[StageName, ...] = (
    StageName.MEAL_PLAN,
    StageName.SHOPPING_LIST,
    StageName.OPTIMIZATION,
)


class WorkflowStatus(StrEnum):
    """Coarse workflow status; the stage index completes the picture."""

    IDLE = "idle"
    RUNNING = "running"
    STAGE_DONE = "stage_done"
    COMPLETE = "complete"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({WorkflowStatus.COMPLETE, WorkflowStatus.FAILED})


class WorkflowInputs(BaseModel):
    """Snapshot of everything a run reads, taken once at start."""

    model_config = ConfigDict(frozen=True)

    preferences: UserPreferences
    fridge_items: list[FridgeItem] = Field(default_factory=list)
    saved_recipes: list[UserRecipe] = Field(default_factory=list)


class StageFailure(BaseModel):
    """Why and where a run failed."""

    model_config = ConfigDict(frozen=True)

    stage_index: int
    stage: StageName
    kind: str
    message: str
    field: str | None = None
    index: int | None = None
    raw_text: str | None = None


class WorkflowState(BaseModel):
    """Serializable state carried between stages."""

    model_config = ConfigDict(frozen=True)

    status: WorkflowStatus = WorkflowStatus.IDLE
    stage_index: int = 0
    inputs: WorkflowInputs
    results: dict[StageName, dict[str, object]] = Field(default_factory=dict)
    failure: StageFailure | None = None
    result: GroceryListResult | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def current_stage(self) -> StageName | None:
        """Stage running, or last finished, at this point."""
        if self.stage_index == 0:
            return None
        return STAGES[self.stage_index - 1]

    @property
    def label(self) -> str:
        """Human-readable state name, e.g. ``Stage2Running``."""
        if self.status is WorkflowStatus.IDLE:
            return "Idle"
        if self.status is WorkflowStatus.RUNNING:
            return f"Stage{self.stage_index}Running"
        if self.status is WorkflowStatus.STAGE_DONE:
            return f"Stage{self.stage_index}Done"
        if self.status is WorkflowStatus.COMPLETE:
            return "Complete"
        return f"Failed({self.stage_index})"


def new_state(inputs: WorkflowInputs) -> WorkflowState:
    """Create an idle state for a fresh run."""
    return WorkflowState(inputs=inputs)


def start_next_stage(state: WorkflowState) -> WorkflowState:
    """Move from Idle or StageKDone into Stage(K+1)Running."""
    if state.status not in {WorkflowStatus.IDLE, WorkflowStatus.STAGE_DONE}:
        raise InvalidTransition(f"Cannot start a stage from {state.label}")
    next_index = state.stage_index + 1
    if next_index > len(STAGES):
        raise InvalidTransition("All stages have already run")
    if state.stage_index and STAGES[state.stage_index - 1] not in state.results:
        raise InvalidTransition(
            f"Stage {state.stage_index} has no validated result to build on"
        )
    return state.model_copy(
        update={"status": WorkflowStatus.RUNNING, "stage_index": next_index}
    )


def complete_stage(state: WorkflowState, payload: dict[str, object]) -> WorkflowState:
    """Record a validated stage payload and mark the stage done."""
    if state.status is not WorkflowStatus.RUNNING:
        raise InvalidTransition(f"Cannot complete a stage from {state.label}")
    stage = STAGES[state.stage_index - 1]
    results = {**state.results, stage: payload}
    return state.model_copy(
        update={"status": WorkflowStatus.STAGE_DONE, "results": results}
    )


def fail_stage(state: WorkflowState, error: GenerationError) -> WorkflowState:
    """Move a running stage into the terminal Failed state."""
    if state.status is not WorkflowStatus.RUNNING:
        raise InvalidTransition(f"Cannot fail a stage from {state.label}")
    failure = StageFailure(
        stage_index=state.stage_index,
        stage=STAGES[state.stage_index - 1],
        kind=error.kind,
        message=error.message,
        field=error.field if isinstance(error, SchemaMismatch) else None,
        index=error.index if isinstance(error, SchemaMismatch) else None,
        raw_text=error.raw_text if isinstance(error, MalformedResponse) else None,
    )
    return state.model_copy(
        update={"status": WorkflowStatus.FAILED, "failure": failure}
    )


def finish(state: WorkflowState, result: GroceryListResult) -> WorkflowState:
    """Move from the last StageDone into Complete with the final aggregate."""
    if state.status is not WorkflowStatus.STAGE_DONE or state.stage_index != len(
        STAGES
    ):
        raise InvalidTransition(f"Cannot complete the run from {state.label}")
    return state.model_copy(
        update={"status": WorkflowStatus.COMPLETE, "result": result}
    )


def resume_from(state: WorkflowState) -> WorkflowState:
    """Seed a new run that continues where a failed run stopped.

    The failed state itself stays terminal; the returned state reuses its input
    snapshot and the validated results of the stages before the failure.
    """
    if state.status is not WorkflowStatus.FAILED or state.failure is None:
        raise InvalidTransition(f"Only failed runs can be resumed, not {state.label}")
    done = state.failure.stage_index - 1
    kept = {stage: state.results[stage] for stage in STAGES[:done]}
    return WorkflowState(
        status=WorkflowStatus.STAGE_DONE if done else WorkflowStatus.IDLE,
        stage_index=done,
        inputs=state.inputs,
        results=kept,
    )


@dataclass(frozen=True)
class GenerationRun:
    """A persisted workflow run."""

    id: UUID
    user_id: str
    state: WorkflowState
    retry_of: UUID | None = None
    created_at: datetime | None = None
