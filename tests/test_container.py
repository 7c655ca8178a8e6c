"""Tests for container wiring."""

import asyncio

from fridge_planner.containers import build_container, stage_token_limits
from fridge_planner.domain.workflow import StageName
from fridge_planner.services.validation import RECIPE_STAGE


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.meal_plan_service.check_totals is True
    assert container.store_service.preferences_service is container.preferences_service
    asyncio.run(container.close_resources())


def test_stage_token_limits_follow_settings(settings) -> None:
    limits = stage_token_limits(settings.model_copy(update={"meal_plan_max_tokens": 6000}))

    assert limits[StageName.MEAL_PLAN] == 6000
    assert limits[StageName.SHOPPING_LIST] == 2000
    assert limits[RECIPE_STAGE] == 1000
