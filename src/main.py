"""User groups service: FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import dispose_engine

setup_logging()

logger = structlog.get_logger()

DESCRIPTION = (
    "## Tenant User Groups\n\n"
    "Named groups scoped to a tenant, group membership and the "
    "per-tenant default group.\n\n"
    "### Authentication\n"
    "All endpoints (except `/health`) require a host-issued JWT "
    "in the Authorization header:\n"
    "```\nAuthorization: Bearer <your_token>\n```\n\n"
    "### Roles\n"
    "- Managing groups and memberships: tenant admin or higher\n"
    "- Reading a group or your own memberships: normal user\n"
    "- Host event hooks: super admin"
)

OPENAPI_TAGS = [
    {"name": "health", "description": "Liveness and readiness checks"},
    {"name": "groups", "description": "Tenant groups and the default group"},
    {"name": "group-users", "description": "Memberships seen from the user"},
    {"name": "hooks", "description": "Host platform directory events"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log startup and release pooled connections on shutdown."""
    logger.info(
        "service_started",
        environment=settings.app_env,
        assign_default_group_on_user_create=settings.assign_default_group_on_user_create,
    )
    yield
    await dispose_engine()
    logger.info("service_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=DESCRIPTION,
        version=VERSION,
        debug=settings.debug,
        openapi_tags=OPENAPI_TAGS,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Last added runs first: request ID, then security headers, then logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
