"""
Meter Telemetry Simulator - FastAPI Application

Mounts the reading, building, scenario and simulator routers under
/api/v1 and adds the probes used by the container runtime.

Errors leave the service in one JSON shape:
    {"error": true, "message": ..., "status_code": ..., "timestamp": ...}
Reading-Guard rejections put their issue list in "message".

Run locally:
    uvicorn api.main:app --reload
"""

import os
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from api.database import check_database_health, init_database
from api.routes import readings_router, buildings_router, scenarios_router, simulate_router
from api.models import SystemHealth

API_PREFIX = "/api/v1"

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def error_body(message: Any, status_code: int, detail: Optional[str] = None) -> Dict[str, Any]:
    body = {
        "error": True,
        "message": message,
        "status_code": status_code,
        "timestamp": utc_now().isoformat()
    }
    if detail is not None:
        body["detail"] = detail
    return body


def prepare_database() -> None:
    """Create the tables if PostgreSQL is reachable; otherwise start anyway."""
    db_health = check_database_health()
    if db_health["status"] != "healthy":
        logger.warning(f"PostgreSQL unavailable at startup, readings cannot be stored yet: {db_health.get('error')}")
        return

    try:
        init_database()
    except Exception as e:
        logger.error(f"Could not create meter tables: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    prepare_database()
    logger.info(f"Meter telemetry simulator {__version__} ready, routes under {API_PREFIX}")
    yield
    logger.info("Meter telemetry simulator stopped")


app = FastAPI(
    title="Meter Telemetry Simulator API",
    description="""
## Synthetic Cold Water Meter Telemetry

Generates and ingests hourly cold water readings for apartment (ITP) and
building (ODPU) meters, so meter analytics and anomaly detection can be
exercised without live hardware.

### Key Features

- **Idempotent Ingestion**: readings are upserted by (hour, building, channel)
- **Reading-Guard Validation**: off-hour timestamps and impossible volumes are rejected
- **Diurnal Demand Model**: night, morning peak, evening peak, seasonal scaling
- **Drift Scenarios**: simulated ITP calibration faults (intermittent or persistent)

### Quick Start

1. **Register a building**: `PUT /api/v1/buildings/B-0001`
2. **Run the simulator**: `POST /api/v1/simulate/run`
3. **Preview a scenario**: `GET /api/v1/scenarios/MINOR_DRIFT/preview`
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================
# Error Bodies
# =========================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.detail, exc.status_code))


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Storage failures and bugs end up here as a 500."""
    logger.exception(f"{request.method} {request.url.path} failed: {exc}")
    debug = os.getenv("DEBUG", "false").lower() == "true"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "An unexpected error occurred",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc) if debug else None
        )
    )


for router in (readings_router, buildings_router, scenarios_router, simulate_router):
    app.include_router(router, prefix=API_PREFIX)


# =========================================
# Service Endpoints
# =========================================

@app.get("/", tags=["System"], summary="Service information")
async def root():
    return {
        "name": "Meter Telemetry Simulator API",
        "version": __version__,
        "channels": ["ITP_CW", "ODPU_SUPPLY", "ODPU_RETURN", "ODPU_CONSUMPTION"],
        "documentation": "/docs",
        "health_check": "/health",
        "api_base": API_PREFIX
    }


@app.get("/health", response_model=SystemHealth, tags=["System"], summary="Store and table status")
async def health_check():
    """Reports `degraded` while PostgreSQL or the readings table is missing."""
    db_health = check_database_health()
    table_ready = bool(db_health.get("readings_table_exists"))

    return SystemHealth(
        status="ok" if db_health["status"] == "healthy" and table_ready else "degraded",
        version=__version__,
        timestamp=utc_now(),
        database=db_health["status"],
        components={
            "database": db_health["status"],
            "readings_table": "ok" if table_ready else "missing",
        }
    )


@app.get("/ready", tags=["System"], summary="Readiness probe")
async def readiness_check():
    if check_database_health()["status"] != "healthy":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Readings store not reachable"
        )
    return {"ready": True}


@app.get("/live", tags=["System"], summary="Liveness probe")
async def liveness_check():
    return {"alive": True, "ts": utc_now().isoformat()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", 8000)),
        reload=os.getenv("API_RELOAD", "true").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )
