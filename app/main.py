"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

from app.api.v1 import api_router
from app.core.config import get_settings
from app.core.errors import AppError
from app.db.session import engine

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Schema is managed by Alembic; shutdown disposes the engine pool."""
    logger.info("Starting %s (env: %s)", settings.app_name, settings.environment)
    yield
    logger.info("Shutting down %s", settings.app_name)
    await engine.dispose()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Domain errors carry their own status, body and headers (e.g. Retry-After)."""
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.payload(), headers=exc.headers())


async def storage_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    logger.error("Storage unavailable on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # CORS: allow localhost in dev; in production use CORS_ORIGINS env (comma-separated)
    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Idempotency-Key", "X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
    )
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(DBAPIError, storage_error_handler)

    @app.get("/")
    def root():
        return {"status": "ok", "message": settings.app_name}

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
