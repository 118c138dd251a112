from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.migrate import apply_migrations
from .core import errors
from .routers import currencies, trips, exchanges, purchases, summary


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    The active settings are kept on ``app.state`` for request dependencies.
    """
    settings = settings_override or get_settings()
    if settings.db_path is None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    # Schema upgrades and the legacy exchange repair pass (both idempotent)
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        import logging

        logging.getLogger("triprate").exception("failed to apply migrations on startup")
        raise

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(currencies.router)
    app.include_router(trips.router)
    app.include_router(exchanges.router)
    app.include_router(purchases.router)
    app.include_router(summary.router)

    @app.get("/")
    async def root():
        return {
            "message": "Trip Exchange Tracker API",
            "version": settings.version,
            "home_currency": settings.home_currency,
        }

    return app


app = create_app()
