"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from babyshoot.api.albums import router as albums_router
from babyshoot.api.astria import router as astria_router
from babyshoot.api.catalog import router as catalog_router
from babyshoot.api.children import router as children_router
from babyshoot.api.photoshoots import router as photoshoots_router
from babyshoot.app_logging import configure_logging
from babyshoot.containers import AppContainer
from babyshoot.errors import ServiceError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        prepare = app.state.container.prepare_resources
        if prepare is not None:
            try:
                prepare()
            except Exception:
                logger.exception("Failed to prepare storage bucket")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(photoshoots_router)
    app.include_router(children_router)
    app.include_router(catalog_router)
    app.include_router(albums_router)
    app.include_router(astria_router)

    @app.exception_handler(ServiceError)
    async def service_error_handler(
        request: Request, exc: ServiceError
    ) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Request failed: %s", exc.message)
        return JSONResponse(
            status_code=exc.status_code, content=jsonable_encoder(exc.to_payload())
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(
                {"error": "Invalid request", "details": exc.errors()}
            ),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
