"""FastAPI application factory for the rampa REST API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rampa.core.errors import (
    PersistenceError,
    PostNotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from rampa.config.schema import RampaConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan handler: open the store on startup, close it on shutdown."""
    from rampa.storage import open_store

    config: RampaConfig = app.state.config
    store = await open_store(config)
    app.state.store = store

    yield

    await store.close()


def register_error_handlers(app: FastAPI) -> None:
    """Map rampa errors to HTTP status codes."""

    @app.exception_handler(PostNotFoundError)
    async def _not_found(request: Request, exc: PostNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def _unavailable(request: Request, exc: PersistenceError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app(config: RampaConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    from rampa import __version__
    from rampa.config.loader import load_config

    if config is None:
        config = load_config()

    app = FastAPI(
        title="rampa",
        description="Accessibility reports with community usefulness votes",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    from fastapi.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    from rampa.api.health import router as health_router
    from rampa.api.routes.comments import router as comments_router
    from rampa.api.routes.posts import router as posts_router

    app.include_router(health_router)
    app.include_router(posts_router)
    app.include_router(comments_router)

    return app
