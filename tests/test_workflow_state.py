"""Tests for workflow state transitions."""

import pytest

from fridge_planner.domain.errors import InvalidTransition, SchemaMismatch
from fridge_planner.domain.grocery import GroceryListResult
from fridge_planner.domain.preferences import UserPreferences
from fridge_planner.domain.workflow import (
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
from tests.conftest import (
    MEAL_PLAN_RESPONSE,
    OPTIMIZATION_RESPONSE,
    SHOPPING_LIST_RESPONSE,
)


def _idle() -> WorkflowState:
    return new_state(WorkflowInputs(preferences=UserPreferences()))


def test_happy_path_labels() -> None:
    state = _idle()
    labels = [state.label]
    for payload in (MEAL_PLAN_RESPONSE, SHOPPING_LIST_RESPONSE, OPTIMIZATION_RESPONSE):
        state = start_next_stage(state)
        labels.append(state.label)
        state = complete_stage(state, payload)
        labels.append(state.label)
    state = finish(state, GroceryListResult.model_validate(OPTIMIZATION_RESPONSE))
    labels.append(state.label)

    assert labels == [
        "Idle",
        "Stage1Running",
        "Stage1Done",
        "Stage2Running",
        "Stage2Done",
        "Stage3Running",
        "Stage3Done",
        "Complete",
    ]
    assert state.is_terminal
    assert state.result is not None


def test_failure_records_error_details() -> None:
    state = start_next_stage(_idle())

    failed = fail_stage(
        state, SchemaMismatch("Missing required key 'recipes'", field="recipes")
    )

    assert failed.label == "Failed(1)"
    assert failed.is_terminal
    assert failed.failure is not None
    assert failed.failure.kind == "schema_mismatch"
    assert failed.failure.field == "recipes"
    assert failed.failure.stage is StageName.MEAL_PLAN


def test_terminal_states_reject_transitions() -> None:
    failed = fail_stage(start_next_stage(_idle()), SchemaMismatch("bad", field="x"))

    with pytest.raises(InvalidTransition):
        start_next_stage(failed)
    with pytest.raises(InvalidTransition):
        complete_stage(failed, MEAL_PLAN_RESPONSE)


def test_finish_requires_every_stage() -> None:
    state = complete_stage(start_next_stage(_idle()), MEAL_PLAN_RESPONSE)

    with pytest.raises(InvalidTransition):
        finish(state, GroceryListResult.model_validate(OPTIMIZATION_RESPONSE))


def test_complete_requires_running_stage() -> None:
    with pytest.raises(InvalidTransition):
        complete_stage(_idle(), MEAL_PLAN_RESPONSE)


def test_resume_from_keeps_earlier_results() -> None:
    state = complete_stage(start_next_stage(_idle()), MEAL_PLAN_RESPONSE)
    state = start_next_stage(state)
    failed = fail_stage(state, SchemaMismatch("Missing 'items'", field="items"))

    resumed = resume_from(failed)

    assert resumed.label == "Stage1Done"
    assert resumed.results == {StageName.MEAL_PLAN: MEAL_PLAN_RESPONSE}
    assert failed.status is WorkflowStatus.FAILED
    assert start_next_stage(resumed).label == "Stage2Running"


def test_resume_from_first_stage_starts_idle() -> None:
    failed = fail_stage(start_next_stage(_idle()), SchemaMismatch("bad", field="x"))

    assert resume_from(failed).label == "Idle"


def test_only_failed_runs_resume() -> None:
    with pytest.raises(InvalidTransition):
        resume_from(_idle())


def test_state_survives_json_round_trip() -> None:
    state = complete_stage(start_next_stage(_idle()), MEAL_PLAN_RESPONSE)

    restored = WorkflowState.model_validate(state.model_dump(mode="json"))

    assert restored == state
