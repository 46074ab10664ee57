"""Health check API endpoints."""

import asyncio

from fastapi import APIRouter
from pydantic import BaseModel, Field

from gazette_ingest.core.config import settings
from gazette_ingest.core.database import db_client
from gazette_ingest.core.temporal_client import get_temporal_client
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()

TEMPORAL_HEALTH_TIMEOUT_SECONDS = 5


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="healthy when every dependency is, degraded otherwise")
    version: str = Field(..., description="Running application version")
    service: str = Field(..., description="Service name")
    database: str = Field(..., description="Database health status")
    temporal: str = Field(..., description="Temporal server health status")


async def temporal_health() -> str:
    try:
        client = await asyncio.wait_for(get_temporal_client(), timeout=TEMPORAL_HEALTH_TIMEOUT_SECONDS)
        healthy = await asyncio.wait_for(
            client.service_client.check_health(), timeout=TEMPORAL_HEALTH_TIMEOUT_SECONDS
        )
    except Exception as e:
        LOGGER.warning(f"Temporal health check failed: {e}")
        return "unhealthy"
    return "healthy" if healthy else "unhealthy"


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Health check endpoint",
    description="Check that the service, its database and the Temporal server are reachable",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    db_health = await db_client.health_check()
    temporal = await temporal_health()

    return HealthCheckResponse(
        status="healthy" if db_health["status"] == "healthy" and temporal == "healthy" else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        database=db_health["status"],
        temporal=temporal,
    )
