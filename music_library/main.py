"""FastAPI application entry point.

Music Library API - song catalog with cached lookups and lyrics pagination.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from music_library.routes import api_router
from music_library.schemas import ErrorResponse
from music_library.services.enrichment import EnrichmentClient
from music_library.services.errors import SongError
from music_library.services.songs import SongService
from music_library.settings import get_settings
from music_library.stores.postgres import create_engine, create_session_factory, ping_db
from music_library.stores.redis import SongCache, close_redis, init_redis, ping_redis
from music_library.stores.songs import SongStore

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the database pool, Redis client and enrichment client once and
    injects them into the song service stored on ``app.state``.
    """
    # Startup
    settings = get_settings()

    engine = create_engine(settings)
    try:
        await ping_db(engine)
        logger.info("Postgres connected")
    except Exception:
        logger.exception("Postgres init failed")

    redis_client = await init_redis(settings)
    enrichment = EnrichmentClient(
        settings.enrichment_api_url,
        timeout=settings.enrichment_timeout_seconds,
    )

    app.state.engine = engine
    app.state.redis = redis_client
    app.state.song_service = SongService(
        store=SongStore(create_session_factory(engine), timeout=settings.store_timeout_seconds),
        cache=SongCache(
            redis_client,
            ttl=settings.song_cache_ttl_seconds,
            timeout=settings.cache_timeout_seconds,
        ),
        enrichment=enrichment,
    )

    yield

    # Shutdown
    await enrichment.close()
    await close_redis(redis_client)
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Song catalog API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SongError)
    async def song_error_handler(request: Request, exc: SongError) -> JSONResponse:
        """Render catalog errors in the structured error format."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse.build(exc.code, exc.message, exc.detail).model_dump(),
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse.build(
                "INTERNAL_ERROR",
                str(exc) if settings.debug else "Internal server error",
            ).model_dump(),
        )

    # Health check endpoints
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    @app.get("/health/ready", tags=["health"])
    async def readiness_check(request: Request) -> dict[str, bool]:
        """Readiness: database must answer; the cache is reported but optional."""
        engine = getattr(request.app.state, "engine", None)
        database = False
        if engine is not None:
            try:
                await ping_db(engine)
                database = True
            except Exception:
                logger.exception("Readiness check: Postgres ping failed")
        cache = await ping_redis(getattr(request.app.state, "redis", None))
        return {"ok": database, "database": database, "cache": cache}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "music_library.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
