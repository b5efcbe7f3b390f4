from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostel_portal.api.v1.router import router as api_v1_router
from hostel_portal.config.logging import setup_logging
from hostel_portal.config.settings import settings
from hostel_portal.core.middleware import register_middlewares


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    setup_logging()
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middlewares(app)
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
