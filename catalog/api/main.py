"""
Main FastAPI application.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from catalog.config import settings
from catalog.api.routes import facets, health, metrics, products
from catalog.db.postgres import check_connection, close_db, init_db
from catalog.errors import CatalogError
from catalog.middleware.logging import LoggingMiddleware
from catalog.utils.logger import setup_logging
from catalog.utils.metrics import record_request_error, set_api_health


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the connection pool on startup and drain it on shutdown.

    Startup fails if PostgreSQL cannot be reached.
    """
    logger.info("=" * 60)
    logger.info("Starting Product Catalog API...")
    logger.info("=" * 60)

    try:
        await check_connection()
        if settings.db_create_tables:
            await init_db()
        set_api_health(healthy=True)
        logger.success("✅ Startup complete! API is ready.")
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        set_api_health(healthy=False)
        await close_db()
        raise

    yield

    logger.info("Shutting down Product Catalog API...")
    set_api_health(healthy=False)
    await close_db()
    logger.info("✅ Shutdown complete")


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Map catalog errors to their HTTP status."""
    record_request_error(type(exc).__name__)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies, paths and query strings are client errors (400)."""
    record_request_error("RequestValidationError")
    logger.info(f"{request.method} {request.url.path} invalid request: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Product catalog API with filtering and full-text search",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
    app.include_router(products.router, prefix=settings.api_prefix, tags=["products"])
    app.include_router(facets.router, prefix=settings.api_prefix, tags=["products"])
    app.include_router(metrics.router, prefix=settings.api_prefix, tags=["monitoring"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        log_level="debug" if settings.debug else "info",
    )
