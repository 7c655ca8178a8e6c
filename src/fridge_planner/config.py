"""Application configuration."""

import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    openai_api_key: str
    openai_model: str = "gpt-4o"
    openai_temperature: float = 0.7
    meal_plan_max_tokens: int = 4000
    shopping_list_max_tokens: int = 2000
    optimization_max_tokens: int = 2000
    recipe_max_tokens: int = 1000
    google_places_api_key: str
    places_base_url: str = "https://places.googleapis.com/v1"
    verify_totals: bool = True
    total_tolerance: Decimal = Decimal("0.05")
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
