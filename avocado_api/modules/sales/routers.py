# avocado_api/modules/sales/routers.py
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status
from loguru import logger

from avocado_api.core.exceptions import (
    DatabaseOperationError,
    DuplicateRecordError,
    InvalidRecordError,
    RecordValidationError,
)
from avocado_api.models.api_common import ErrorResponse, error_response
from .models import SalesRecordInDB
from .services import SalesRecordService, get_sales_record_service

sales_router = APIRouter(prefix="/avocadoSalesData", tags=["Avocado Sales"])


@sales_router.get(
    "",
    response_model=List[SalesRecordInDB],
    summary="List avocado sales records, optionally filtered by date and region",
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def list_sales_records(
    date: Optional[str] = Query(None, description="Exact date to match, e.g. 2015-12-27"),
    region: Optional[str] = Query(None, description="Exact region to match, e.g. Albany"),
    sales_service: SalesRecordService = Depends(get_sales_record_service),
):
    """Records matching every filter given. An empty match is reported as 404."""
    try:
        records = await sales_service.list_records(date=date, region=region)
    except DatabaseOperationError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve data", e.details)

    if not records:
        return error_response(status.HTTP_404_NOT_FOUND, "No avocado sales data found for the given filters")
    return records


@sales_router.get(
    "/{record_id}",
    response_model=SalesRecordInDB,
    summary="Get one avocado sales record by its id",
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def get_sales_record(
    record_id: str = Path(..., description="Logical record id (integer)"),
    sales_service: SalesRecordService = Depends(get_sales_record_service),
):
    try:
        record = await sales_service.get_record(record_id)
    except DatabaseOperationError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve data", e.details)

    if record is None:
        return error_response(status.HTTP_404_NOT_FOUND, f"No avocado sales data found for ID: {record_id}")
    return record


@sales_router.post(
    "",
    response_model=SalesRecordInDB,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new avocado sales record",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
    },
)
async def create_sales_record(
    payload: Any = Body(None, description="JSON object carrying every sales record field"),
    sales_service: SalesRecordService = Depends(get_sales_record_service),
):
    """Creates a record. Every field is required and ``id`` must be unused."""
    if not isinstance(payload, dict):
        payload = {}
    log = logger.bind(record_id=payload.get("id"))
    try:
        return await sales_service.create_record(payload)
    except RecordValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message)
    except DuplicateRecordError as e:
        log.warning("Rejected duplicate sales record id.")
        return error_response(status.HTTP_409_CONFLICT, e.message)
    except (InvalidRecordError, DatabaseOperationError) as e:
        log.error(f"Failed to create sales record: {e.details}")
        return error_response(status.HTTP_400_BAD_REQUEST, "Failed to create avocado sale entry", e.details)
