"""Application factory: builds a configured FastAPI app. No business logic; only wiring and middleware."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobtracker.api.v1 import router as api_router
from jobtracker.core.config import Settings, get_settings
from jobtracker.core.database import build_engine, build_session_factory
from jobtracker.core.errors import register_exception_handlers
from jobtracker.services.storage import ObjectStorage, build_object_storage

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def create_app(
    settings: Settings | None = None,
    storage: ObjectStorage | None = None,
) -> FastAPI:
    """
    Build the application with its own engine, session factory and storage client.

    Tests pass their own Settings (e.g. an in-memory SQLite URL) and a storage
    double; otherwise both come from the environment.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Job Tracker API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.storage = storage if storage is not None else build_object_storage(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Job Tracker API"}

    logger.info(
        "App created: env=%s, api_prefix=%s, storage=%s",
        settings.APP_ENV,
        settings.API_PREFIX or "/",
        "configured" if app.state.storage is not None else "not configured",
    )
    return app
