from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gradebook.api.certificates import router as certificates_router
from gradebook.api.health import router as health_router
from gradebook.api.metrics_endpoint import router as metrics_router
from gradebook.api.progress import router as progress_router
from gradebook.api.publishing import router as publishing_router
from gradebook.core.config import SETTINGS
from gradebook.core.logging import setup_logging
from gradebook.db.engine import lifespan_db
from gradebook.db.redis import lifespan_redis
from gradebook.middleware.metrics import MetricsMiddleware
from gradebook.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order even if one fails.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="gradebook-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext (outermost) -> Metrics -> route.
# Every request has its id before metrics are recorded.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(certificates_router)
app.include_router(progress_router)
app.include_router(publishing_router)

logger.info(
    "gradebook-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
