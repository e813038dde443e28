"""
Main entrypoint for the Pet Registry API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time as
``app``, so the service can be run with uvicorn::

    uvicorn pet_registry_api.app.main:app --reload

On start-up the SQLite database is opened, migrations are applied and a
single ``PetRegistryService`` is stored on ``app.state.registry``.  The
database is closed on shutdown.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from .api.error_handlers import setup_exception_handlers
from .api.v1.router import router as v1_router
from .core.clock import Clock
from .core.config import Settings, settings
from .core.db import open_database
from .core.logging_config import setup_logging
from .services.registry_service import PetRegistryService

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to use instead of the module level ``settings``.
    clock : Optional[Clock]
        Time source for record timestamps; the system clock by default.

    Returns
    -------
    FastAPI
        A configured application.  The registry itself is only created
        when the application starts.
    """
    app_settings = app_settings or settings
    # Initialise logging before anything else so start-up is logged.
    setup_logging(app_settings.log_level, app_settings.log_file)

    app = FastAPI(title=app_settings.project_name, version=app_settings.api_version, debug=app_settings.debug)
    app.state.settings = app_settings
    app.state.registry = None

    setup_exception_handlers(app)
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        database = open_database(app_settings.database_url)
        app.state.database = database
        app.state.registry = PetRegistryService.from_database(database, app_settings, clock=clock)
        logger.info("Pet registry ready (database %s)", database.path)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        database = getattr(app.state, "database", None)
        app.state.registry = None
        if database is not None:
            database.close()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
