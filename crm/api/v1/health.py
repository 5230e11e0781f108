"""Health endpoints: status, readiness (config + database) and liveness. No auth."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from crm.api.deps import get_health_reporter
from crm.schemas.health import HealthResponse, LivenessResponse, ReadinessResponse
from crm.services.health import HealthReporter

router = APIRouter()

HealthReporterDep = Annotated[HealthReporter, Depends(get_health_reporter)]


@router.get("", response_model=HealthResponse)
def get_health(reporter: HealthReporterDep) -> HealthResponse:
    """
    Return service status, uptime and version.
    Used by load balancers and monitoring.
    """
    return reporter.status()


@router.get("/ready", response_model=ReadinessResponse)
def get_readiness(reporter: HealthReporterDep, response: Response) -> ReadinessResponse:
    """Ready only when required settings are present and the database answers; 503 otherwise."""
    result = reporter.readiness()
    if result.status != "ready":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result


@router.get("/live", response_model=LivenessResponse)
def get_liveness(reporter: HealthReporterDep) -> LivenessResponse:
    return reporter.liveness()
