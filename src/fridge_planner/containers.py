"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fridge_planner.adapters.openai_completion_client import OpenAICompletionClient
from fridge_planner.adapters.places_client import HttpxPlacesClient
from fridge_planner.adapters.supabase_fridge_repository import SupabaseFridgeRepository
from fridge_planner.adapters.supabase_preferences_repository import (
    SupabasePreferencesRepository,
)
from fridge_planner.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from fridge_planner.adapters.supabase_run_repository import SupabaseRunRepository
from fridge_planner.config import Settings
from fridge_planner.domain.workflow import StageName
from fridge_planner.services.completion import StageExecutor
from fridge_planner.services.fridge import FridgeService
from fridge_planner.services.meal_plans import MealPlanService
from fridge_planner.services.preferences import PreferencesService
from fridge_planner.services.recipes import RecipeService
from fridge_planner.services.stores import StoreService
from fridge_planner.services.validation import RECIPE_STAGE


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    preferences_service: PreferencesService
    fridge_service: FridgeService
    recipe_service: RecipeService
    store_service: StoreService
    meal_plan_service: MealPlanService
    close_resources: Callable[[], Awaitable[None]]


def stage_token_limits(settings: Settings) -> dict[str, int]:
    """Return the completion token ceiling for each stage."""
    return {
        StageName.MEAL_PLAN: settings.meal_plan_max_tokens,
        StageName.SHOPPING_LIST: settings.shopping_list_max_tokens,
        StageName.OPTIMIZATION: settings.optimization_max_tokens,
        RECIPE_STAGE: settings.recipe_max_tokens,
    }


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    preferences_service = PreferencesService(
        SupabasePreferencesRepository(supabase_client)
    )
    fridge_service = FridgeService(SupabaseFridgeRepository(supabase_client))
    recipe_service = RecipeService(SupabaseRecipeRepository(supabase_client))
    completion_client = OpenAICompletionClient.create(
        resolved_settings.openai_api_key, resolved_settings.openai_model
    )
    executor = StageExecutor(
        client=completion_client,
        temperature=resolved_settings.openai_temperature,
        max_tokens=stage_token_limits(resolved_settings),
        default_max_tokens=resolved_settings.recipe_max_tokens,
    )
    meal_plan_service = MealPlanService(
        preferences_service=preferences_service,
        fridge_service=fridge_service,
        recipe_service=recipe_service,
        executor=executor,
        run_repository=SupabaseRunRepository(supabase_client),
        check_totals=resolved_settings.verify_totals,
        total_tolerance=resolved_settings.total_tolerance,
    )
    places_client = HttpxPlacesClient.create(
        api_key=resolved_settings.google_places_api_key,
        base_url=resolved_settings.places_base_url,
    )
    store_service = StoreService(places_client, preferences_service)

    async def close_resources() -> None:
        await places_client.close()
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        preferences_service=preferences_service,
        fridge_service=fridge_service,
        recipe_service=recipe_service,
        store_service=store_service,
        meal_plan_service=meal_plan_service,
        close_resources=close_resources,
    )
