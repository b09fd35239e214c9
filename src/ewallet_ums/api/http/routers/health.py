"""Health check endpoint for monitoring service availability."""

from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse

from ewallet_ums.api.http.deps import get_health_service
from ewallet_ums.api.http.responses import send_error_response, send_response
from ewallet_ums.core.services import HealthCheckService

router = APIRouter(tags=["health"])


@router.get("/healthcheck", response_model=None)
async def healthcheck(
    request: Request,
    health_service: HealthCheckService = Depends(get_health_service),
) -> JSONResponse:
    """Liveness probe backed by a database round trip.

    Returns 200 with ``data.status`` when the database answers within the probe
    timeout, 500 with the failure reason otherwise.
    """
    report = await health_service.check()
    if not report.healthy:
        return send_error_response(
            request, "Health check failed", report.error, status_code=500
        )
    return send_response(
        request, {"status": report.status}, "Health check successful", status_code=200
    )
