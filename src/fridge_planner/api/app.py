"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fridge_planner.api.pantry import router as pantry_router
from fridge_planner.api.planner import router as planner_router
from fridge_planner.api.stores import router as stores_router
from fridge_planner.app_logging import configure_logging
from fridge_planner.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Fridge Planner", lifespan=lifespan)
    app.state.container = container

    app.include_router(pantry_router)
    app.include_router(planner_router)
    app.include_router(stores_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
