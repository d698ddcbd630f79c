import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from src.config import settings
from src.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from src.resolution.job import ResolverScheduler, resolver_job

    setup_logging(settings.LOG_LEVEL)
    scheduler = ResolverScheduler(resolver_job)
    app.state.resolver_scheduler = scheduler
    if settings.RESOLVER_ENABLED:
        await scheduler.start()
    else:
        logger.info("Resolver scheduler disabled by configuration")
    try:
        yield
    finally:
        await scheduler.stop()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        lifespan=lifespan,
    )

    # Routers
    from src.routes.v1.api import api_router

    app.include_router(api_router, prefix=settings.API_V1_STR)

    # Set all CORS enabled origins
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health Check
    @app.get("/health")
    def health_check(request: Request):
        scheduler = getattr(request.app.state, "resolver_scheduler", None)
        return {
            "status": "ok",
            "version": settings.VERSION,
            "resolver": scheduler.get_health() if scheduler else None,
        }

    return app

app = create_app()
