"""Application factory."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from shop_service.config import API_VERSION, DEFAULT_JWT_SECRET, Settings
from shop_service.database import Database
from shop_service.monitoring import init_telemetry
from shop_service.routers import auth, orders, products
from shop_service.uploads import ImageStore, PUBLIC_PREFIX

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None
) -> FastAPI:
    """
    Build the shop application.

    Args:
        settings: Runtime settings, read from the environment when omitted
        database: Database handle, opened from ``settings.database_url`` when omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = Settings.from_env()
    if database is None:
        database = Database(settings.database_url)
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set - tokens are signed with the built-in default secret")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Creates the schema at startup and releases the database at shutdown.
        """
        logger.info("Starting application...")
        database.init_db(settings.admin_username, settings.admin_password)
        logger.info("Application startup complete", extra={
            "stock_policy": settings.stock_policy
        })

        yield

        logger.info("Shutting down application...")
        database.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Shop Service",
        version=API_VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Every error body is {"error": message, ...}
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Request validation failed", extra={
            "endpoint": request.url.path,
            "error_count": len(exc.errors())
        })
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())}
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"endpoint": request.url.path})
        return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(orders.router)

    ImageStore(settings.upload_dir).ensure_directory()
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")

    init_telemetry(app, database.engine, settings.otlp_endpoint, settings.pyroscope_server)

    return app
