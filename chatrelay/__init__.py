# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import os
import sys
from contextlib import asynccontextmanager
from logging import getLogger

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chatrelay.logging import logger
from chatrelay.managers.broadcast_coordinator import BroadcastCoordinator
from chatrelay.managers.session_registry import ConnectionRegistry
from chatrelay.managers.websocket_connection_manager import ConnectionManager
from chatrelay.middlewares.correlation_id import CorrelationIDMiddleware
from chatrelay.routing import collect_subrouters
from chatrelay.settings import Settings, app_settings
from chatrelay.utils.metrics import app_info
from chatrelay.uvicorn_filters import ExcludePathsFilter

__version__ = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]
    """
    FastAPI lifespan context manager for startup and shutdown.

    Startup operations:
    - Filters monitoring endpoints out of uvicorn access logs
    - Initializes Prometheus app info metric

    Shutdown operations (uvicorn has already stopped accepting connections):
    - Closes every live WebSocket with code 1001
    """
    logger.info("Application startup: initializing resources")

    getLogger("uvicorn.access").addFilter(
        ExcludePathsFilter(app.state.settings.LOG_EXCLUDED_PATHS)
    )

    app_info.labels(
        version=__version__,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        environment=app.state.settings.ENV.value,
    ).set(1)
    logger.info("Initialized Prometheus metrics")

    yield  # Application runs here

    logger.info("Application shutdown: closing WebSocket connections")
    closed = await app.state.connection_manager.close_all()
    logger.info(f"Closed {closed} WebSocket connections")
    logger.info("Application shutdown complete")


def application(settings: Settings | None = None) -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    The function builds the chat core and stores it on `app.state`:
    - `registry`: ConnectionRegistry of joined sessions
    - `coordinator`: BroadcastCoordinator owning the registry
    - `connection_manager`: ConnectionManager of live sockets (for shutdown)

    It then includes the routers collected by `collect_subrouters()`,
    mounts the static client when `SERVE_CLIENT` is enabled, and adds the
    following middleware:
    - `CorrelationIDMiddleware`: correlation IDs for HTTP requests
    - `CORSMiddleware`: `CORS_ORIGIN` allow-list for a separately hosted client

    Args:
        settings: Settings to use, `app_settings` by default.
    """
    settings = settings or app_settings

    app = FastAPI(
        title="Chat relay",
        description="Real-time WebSocket chat relay",
        version=__version__,
        lifespan=lifespan,
    )

    registry = ConnectionRegistry()
    app.state.settings = settings
    app.state.registry = registry
    app.state.coordinator = BroadcastCoordinator(registry)
    app.state.connection_manager = ConnectionManager()

    # Collect routers
    app.include_router(collect_subrouters())

    # Static files go last so the WebSocket route at "/" wins
    if settings.SERVE_CLIENT:
        if os.path.isdir(settings.CLIENT_DIR):
            app.mount(
                "/",
                StaticFiles(directory=settings.CLIENT_DIR, html=True),
                name="client",
            )
            logger.info(f"Serving client files from {settings.CLIENT_DIR}")
        else:
            logger.warning(
                f"Client directory {settings.CLIENT_DIR} not found, "
                f"static files are not served"
            )

    # Middlewares (execute in REVERSE order of registration)
    # Execution flow: CORSMiddleware → CorrelationIDMiddleware
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    return app


app = application()  # Need for fastapi cli
