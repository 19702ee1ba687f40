"""
Main entrypoint for the Traffic Rewards API.

This module assembles the FastAPI application, sets up logging,
attaches the storage context and includes versioned routers.  The app
is instantiated at import time as ``app`` so it can be served with::

    uvicorn traffic_rewards_api.app.main:app --reload
"""

from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.context import AppContext
from .core.db import get_database_path
from .core.logging_config import setup_logging


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    context : Optional[AppContext]
        Storage context to serve.  When omitted, the context is opened
        from ``settings.database_url`` on startup.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.state.context = context
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        if app.state.context is None:
            app.state.context = AppContext.open(get_database_path())

    return app


app = create_app()
