"""
FastAPI Application

HTTP surface of the back-office service.
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from backoffice.api.errors import ApiException, AuthenticationRequired
from backoffice.config import get_settings
from backoffice.config.logging import configure_logging
from backoffice.container import BackOffice
from backoffice.serving.middleware import RequestLoggingMiddleware
from backoffice.serving.routes import (
    dashboard_router,
    health_router,
    management_router,
    reference_router,
    session_router,
    summary_router,
)
from backoffice.storage.state_store import PersistedStateStore, close_redis, init_redis

logger = structlog.get_logger(__name__)


def create_app(backoffice: Optional[BackOffice] = None) -> FastAPI:
    """
    Build the application. A prebuilt container skips Redis and is used as is.
    """
    settings = backoffice.settings if backoffice is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        configure_logging()
        logger.info("Starting back-office service", environment=settings.app_env)

        owned = backoffice is None
        container = backoffice
        if owned:
            store = None
            try:
                redis = await init_redis(settings)
                store = PersistedStateStore(redis, settings.redis.namespace)
            except Exception as e:
                logger.warning("Redis init failed, persisted state disabled", error=str(e))
            container = BackOffice(settings, store=store)

        app.state.backoffice = container
        warm_task = None
        if await container.startup():
            warm_task = asyncio.create_task(container.warm_cache())

        yield

        logger.info("Shutting down...")
        if warm_task is not None and not warm_task.done():
            warm_task.cancel()
            with suppress(asyncio.CancelledError):
                await warm_task
        await container.shutdown()
        if owned:
            await close_redis()

    app = FastAPI(
        title="Gaming Back-Office API",
        description="Reference-data cache and dashboard aggregation for the operator back office",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(ApiException)
    async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
        # upstream 5xx and transport failures are a bad gateway for our callers
        status_code = exc.status if 400 <= exc.status < 500 else 502
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.message, "upstream_status": exc.status, "code": exc.code},
        )

    @app.exception_handler(AuthenticationRequired)
    async def auth_required_handler(request: Request, exc: AuthenticationRequired) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": str(exc)})

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(session_router, prefix="/api/v1/session", tags=["Session"])
    app.include_router(reference_router, prefix="/api/v1/reference", tags=["Reference"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["Dashboard"])
    app.include_router(summary_router, prefix="/api/v1/summary", tags=["Summary"])
    app.include_router(management_router, prefix="/api/v1/api-management", tags=["API Management"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
