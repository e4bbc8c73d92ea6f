"""FastAPI application for the lead distribution backend."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from leadflow import __version__
from leadflow.api.deps import build_services
from leadflow.api.routes import agents, lists, uploads
from leadflow.errors import LeadflowError
from leadflow.utils.config import Config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle for the API."""
    config: Config = app.state.config

    services = await build_services(config)
    app.state.services = services
    if not config.api_tokens:
        logger.warning("LEADFLOW_API_TOKENS is empty - API authentication is disabled")
    logger.info("Leadflow API ready (db=%s, uploads=%s)", config.db_path, config.upload_dir)

    try:
        yield
    finally:
        await services.db.close()
        logger.info("Leadflow API stopped")


def create_app(config: Config) -> FastAPI:
    """Build the API around an explicit configuration."""
    app = FastAPI(
        title="Leadflow API",
        description="Upload contact lists and distribute them round-robin across agents.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LeadflowError)
    async def leadflow_error_handler(request: Request, exc: LeadflowError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Invalid request to %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=400,
            content={
                "message": "Invalid request",
                "error": "validation_error",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": str(exc)})

    @app.get("/", tags=["Health"])
    async def root() -> dict:
        return {"status": "ok", "service": "leadflow", "version": __version__}

    app.include_router(agents.router)
    app.include_router(lists.router)
    app.include_router(uploads.router)
    return app
