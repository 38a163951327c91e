"""
FastAPI application entry point for the site backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import Settings, get_settings
from backend.context import AppContext
from backend.routes import router
from shared.errors import AppError, ServiceError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    settings: Settings = context.settings if context else get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "context", None) is None
        if owned:
            app.state.context = AppContext.from_settings(settings)
        try:
            yield
        finally:
            if owned:
                app.state.context.close()
                app.state.context = None

    app = FastAPI(title="Site Backend (FastAPI)", version="0.1.0", lifespan=lifespan)
    app.state.context = context

    origins = settings.get_origins_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(AppError)
    async def handle_app_error(_request: Request, exc: AppError):
        if isinstance(exc, ServiceError):
            logger.error("Service error: %s", exc.__cause__ or exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=ServiceError.status_code,
            content={"detail": ServiceError.default_message},
        )

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
