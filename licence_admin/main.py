from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .db.store import ApplicationStore, seed_records
from .routers import applications, health


def create_app(
    settings_override: Settings | None = None, store: ApplicationStore | None = None
) -> FastAPI:
    """Reference backend factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    store: preloaded store; by default one is seeded with
    settings.seed_applications records.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    app = FastAPI(
        title=f"{settings.app_name} (reference backend)",
        debug=settings.debug,
        version=settings.version,
    )
    app.state.store = (
        store if store is not None else ApplicationStore(seed_records(settings.seed_applications))
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_exception_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(applications.router)

    @app.get("/")
    async def root():
        return {"message": "Licence Applications API", "version": settings.version}

    return app
