"""
FocusFlow API Server - REST API over the time block core.
"""
# ruff: noqa: S104
# S104: Development server binding (guarded by __name__ check)

import logging
import os
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.response_models import HealthResponse
from api.timeblocks_router import timeblocks_router
from focusflow import __version__, config
from focusflow import db as db_module
from focusflow.errors import StoreFailure
from focusflow.observability import CorrelationIdMiddleware, configure_logging
from focusflow.store import get_store

logger = logging.getLogger(__name__)

app = FastAPI(
    title="FocusFlow API",
    description="Personal time blocks: CRUD, overlap checks, statistics, export",
    version=__version__,
)

# CORS middleware - configurable via CORS_ORIGINS env var
# Dev default: allow all origins; Production: set CORS_ORIGINS to comma-separated list
cors_origins_env = os.getenv("CORS_ORIGINS", "*")
cors_origins = (
    ["*"] if cors_origins_env == "*" else [o.strip() for o in cors_origins_env.split(",")]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(timeblocks_router)


@app.get("/api/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Store reachability and schema version."""
    now = datetime.now(UTC).isoformat()
    try:
        store = get_store()
        info = db_module.get_db_info(store.db_path)
    except (StoreFailure, OSError) as e:
        logger.error("Health check failed: %s", e)
        return HealthResponse(status="error", timestamp=now)
    return HealthResponse(
        status="healthy",
        schema_version=info["user_version"],
        timestamp=now,
        pool=store.pool_stats(),
    )


# ==== Main ====


def main():
    """Run the server."""
    configure_logging(config.LOG_LEVEL, config.LOG_JSON)
    port = int(os.environ.get("PORT", 8420))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
