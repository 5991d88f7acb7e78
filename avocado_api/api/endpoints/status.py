# avocado_api/api/endpoints/status.py
import time as process_time
from typing import Dict, Literal

from fastapi import APIRouter, Response, status as http_status
from loguru import logger

from avocado_api.core.database import mongo_manager
from avocado_api.models.api_common import ComponentStatus, HealthCheckResponse

PROCESS_START_TIME = process_time.monotonic()

router = APIRouter()


@router.get(
    "/healthcheck",
    response_model=HealthCheckResponse,
    tags=["Status & Health"],
    summary="Application health and MongoDB status check",
)
async def get_application_health():
    log = logger.bind(api_endpoint="/healthcheck GET")
    log.info("Performing application health check...")

    component_statuses: Dict[str, ComponentStatus] = {}
    critical_ok = True

    if mongo_manager.db is not None:
        try:
            await mongo_manager.db.command('ping')
            component_statuses["database_mongodb"] = ComponentStatus(status="ok")
            log.debug("MongoDB ping successful.")
        except Exception as e:
            err_msg = f"MongoDB connection check failed: {e}"
            log.error(err_msg)
            component_statuses["database_mongodb"] = ComponentStatus(status="error", message=err_msg)
            critical_ok = False
    else:
        log.error("MongoDB connection not available.")
        component_statuses["database_mongodb"] = ComponentStatus(status="unavailable", message="DB client not available")
        critical_ok = False

    overall_status: Literal["ok", "error"] = "ok" if critical_ok else "error"
    response_payload = HealthCheckResponse(
        overall_status=overall_status,
        uptime_seconds=process_time.monotonic() - PROCESS_START_TIME,
        components=component_statuses,
    )

    status_code = http_status.HTTP_200_OK if critical_ok else http_status.HTTP_503_SERVICE_UNAVAILABLE
    return Response(
        content=response_payload.model_dump_json(exclude_none=True),
        status_code=status_code,
        media_type="application/json",
    )
