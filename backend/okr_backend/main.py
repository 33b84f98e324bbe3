"""
FastAPI application entry point.
Assembles the app with routers, middleware, lifespan handlers, and exception handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from okr_backend.api.v1.middleware import log_request_timing
from okr_backend.api.v1.router import api_router
from okr_backend.core.config import settings
from okr_backend.core.exceptions import setup_exception_handlers
from okr_backend.core.logging import setup_logging
from okr_backend.core.integrations.observability import setup_observability
from okr_backend.db.init_db import create_tables
from okr_backend.db.session import init_db, close_db
from okr_backend.deps.di_container import Container, get_container, set_container
from okr_backend.schemas.health import LivenessResponse


# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Initializes logging, DB and the DI container.
    """
    # Startup
    setup_logging()
    setup_observability()

    await init_db()
    await create_tables()

    container = Container()
    container.config.from_dict({
        "database_url": settings.DATABASE_URL,
        "service_name": settings.SERVICE_NAME,
    })
    app.state.container = container
    set_container(container)

    yield

    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Goal and OKR tracking API",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting middleware
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    if settings.LOG_TIMINGS:
        app.middleware("http")(log_request_timing)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/healthz", response_model=LivenessResponse, include_in_schema=False)
    async def healthz() -> LivenessResponse:
        """Liveness probe; does not touch the database."""
        return get_container().health_controller().get_liveness()

    # Global exception handler
    setup_exception_handlers(app)

    return app


app = create_app()
