"""Guild Roster FastAPI Application.

Main entry point for the backend API server. ``create_app`` is the
composition root: it builds the store, the listing cache and the services,
and hangs them on ``app.state`` for the request handlers.
"""

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from guildroster import __version__
from guildroster.api import router
from guildroster.config import Settings
from guildroster.models import AppError, ErrorCode, QueryFailedError, RosterError
from guildroster.services import (
    ApiKeyValidator,
    AvatarService,
    MemberListingService,
    MemberQueryService,
    MemberStore,
    PostgresMemberStore,
    S3AvatarService,
)
from guildroster.utils.cache import Clock, SnapshotCache

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _error_response(status_code: int, error: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error.model_dump(mode="json")},
    )


def create_app(
    settings: Settings | None = None,
    store: MemberStore | None = None,
    avatar_service: AvatarService | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Runtime settings. Read from the environment if omitted.
        store: Backing store. A ``PostgresMemberStore`` on
            ``settings.database_url`` if omitted.
        avatar_service: Profile picture lookup. S3 if omitted.
        clock: Time source for the listing cache. Monotonic time if omitted.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    if store is None:
        store = PostgresMemberStore(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
    if avatar_service is None:
        avatar_service = S3AvatarService(
            bucket=settings.avatar_bucket,
            prefix=settings.avatar_prefix,
            region=settings.aws_region,
        )
    cache: SnapshotCache = SnapshotCache(
        ttl_seconds=settings.cache_ttl_seconds, clock=clock or time.monotonic
    )

    query_service = MemberQueryService(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup: a dead database is logged, not fatal; queries retry the pool.
        try:
            await store.start()
            await store.ping()
        except QueryFailedError as e:
            logger.error(f"[DB] Startup connection check failed: {e}")
        yield
        # Shutdown
        cache.clear()
        await store.close()

    app = FastAPI(
        title="Guild Roster API",
        description="Discord community membership, roles and linked social handles",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.listing_cache = cache
    app.state.query_service = query_service
    app.state.listing_service = MemberListingService(query_service, cache)
    app.state.key_validator = ApiKeyValidator(store)
    app.state.avatar_service = avatar_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(RosterError)
    async def roster_exception_handler(request: Request, exc: RosterError):
        """Render service errors (401/404/500) in the error envelope."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error_response(exc.status_code, exc.to_error())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle invalid request parameters."""
        return _error_response(
            422,
            AppError(
                code=ErrorCode.VALIDATION_ERROR,
                message=str(exc),
                user_message="Invalid request format. Please check your input.",
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        logger.exception(f"{request.method} {request.url.path} raised")
        return _error_response(
            500,
            AppError(
                code=ErrorCode.API_ERROR,
                message=str(exc),
                user_message="Something went wrong. Please try again.",
            ),
        )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


def run() -> None:
    """Run the API server with uvicorn."""
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
