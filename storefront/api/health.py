from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from storefront.api.deps import get_statistics_service
from storefront.config import settings
from storefront.statistics.service import StatisticsService

router = APIRouter(tags=["Health"])

SERVICE_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str = Field(..., description="Always healthy when the process answers", examples=["healthy"])
    service: str = Field(..., description="Configured application name", examples=["storefront-api"])
    version: str = Field(..., description="API version", examples=[SERVICE_VERSION])
    statistics_cache: str = Field(
        ...,
        description="Statistics cache backend: redis, or memory when REDIS_URL is unset",
        examples=["redis"]
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Public liveness probe. Reports the version and which statistics cache backend is in use."
)
async def health(stats: StatisticsService = Depends(get_statistics_service)):
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=SERVICE_VERSION,
        statistics_cache=stats.cache.backend.kind
    )
