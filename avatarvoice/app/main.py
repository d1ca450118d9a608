"""FastAPI application for the avatar voice server."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from avatarvoice import __version__
from avatarvoice.database import Database, MetadataStore, PendingDeletionStore
from avatarvoice.domain_service import AvatarRepository
from avatarvoice.storages import create_blob_store

from .dependencies import RepositoryDep
from .exception_handlers import register_exception_handlers
from .routers import avatars_router, changes_router, queries_router, voices_router
from .schemas import HealthResponse
from .settings import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:     %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


def build_repository(database: Database) -> AvatarRepository:
    """Wire the stores and the repository from environment settings."""
    database.create_all()
    return AvatarRepository(
        metadata_store=MetadataStore(database),
        blob_store=create_blob_store(database),
        ledger=PendingDeletionStore(database),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Builds the repository on startup unless one was injected, loads the
    collection, and drains background cleanup on shutdown.
    """
    database: Database | None = None
    repository: AvatarRepository | None = getattr(app.state, "repository", None)
    if repository is None:
        database = Database.from_settings()
        repository = build_repository(database)
        app.state.repository = repository

    avatars = await repository.load_all()
    logger.info("Repository %s with %d avatars", repository.state.value, len(avatars))
    try:
        yield
    finally:
        await repository.aclose()
        if database is not None:
            database.dispose()


def create_app(repository: AvatarRepository | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        repository: Repository to serve instead of one built from settings
    """
    app = FastAPI(
        title="Avatar Voice Server",
        description="Avatar and voice collection storage",
        version=__version__,
        lifespan=lifespan,
    )
    if repository is not None:
        app.state.repository = repository

    register_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(repository: RepositoryDep) -> HealthResponse:
        """Report repository state."""
        return HealthResponse(
            status="ok" if repository.load_error is None else "degraded",
            state=repository.state.value,
            avatar_count=len(repository.avatars),
            is_deleting=repository.is_deleting,
            pending_cleanups=repository.cleaner.pending_tasks,
            last_sync=await repository.last_sync_time(),
            load_error=str(repository.load_error) if repository.load_error else None,
        )

    app.include_router(avatars_router)
    app.include_router(voices_router)
    app.include_router(queries_router)
    app.include_router(changes_router)

    return app


def run_server() -> None:
    """Run the server using uvicorn."""
    app = create_app()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
