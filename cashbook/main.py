import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .db.migrate import apply_migrations
from .routers import (
    analytics,
    auth,
    budgets,
    expenses,
    health,
    preferences,
    profile,
    reports,
    wallets,
)
from .services.query_cache import QueryCache

logger = logging.getLogger("cashbook")


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    Routes resolve settings through ``get_settings`` so the override is wired in
    as a dependency override as well.
    """
    settings = settings_override or get_settings()
    init_logging(debug=settings.debug)

    try:
        version = apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logger.exception("failed to apply migrations on startup")
        raise
    logger.info("database ready at %s (schema v%s)", settings.db_path, version)

    app = FastAPI(title=settings.app_name, debug=settings.debug, version=settings.version)
    app.state.settings = settings
    app.state.query_cache = QueryCache(
        ttl_seconds=settings.query_cache_ttl_seconds,
        max_entries=settings.query_cache_max_entries,
    )
    if settings_override is not None:
        app.dependency_overrides[get_settings] = lambda: settings

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.BackendError, errors.backend_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(expenses.router)
    app.include_router(budgets.router)
    app.include_router(wallets.router)
    app.include_router(preferences.router)
    app.include_router(analytics.router)
    app.include_router(reports.router)

    @app.get("/")
    async def root():
        return {"message": f"{settings.app_name} API", "version": settings.version}

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cashbook.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
