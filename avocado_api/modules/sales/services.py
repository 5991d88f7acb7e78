# avocado_api/modules/sales/services.py

import math
import re
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Depends
from loguru import logger
from pydantic import ValidationError

from avocado_api.core.config import settings
from avocado_api.core.exceptions import InvalidRecordError, RecordValidationError
from .models import SALES_RECORD_FIELDS, SalesRecordCreateInternal, SalesRecordInDB
from .repository import SalesRecordRepository, get_sales_record_repository


def build_filters(date: Optional[str] = None, region: Optional[str] = None) -> Dict[str, str]:
    """Equality filter holding only the criteria that were actually given."""
    filters: Dict[str, str] = {}
    if date:
        filters["date"] = date
    if region:
        filters["region"] = region
    return filters


# Plain ASCII decimal or scientific notation; no underscores, no other digits
DECIMAL_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)

# Range of the 64-bit integers MongoDB stores
MIN_RECORD_ID = -(2**63)
MAX_RECORD_ID = 2**63 - 1


def parse_record_id(raw_id: str) -> Optional[int]:
    """Reads a path segment as a decimal number.

    Returns None for anything that is not an integral number (``abc``,
    ``1.5``, ``inf``, ``1_000``) or does not fit a 64-bit integer; such ids
    can never match a stored record.
    """
    text = raw_id.strip()
    if not DECIMAL_NUMBER.fullmatch(text):
        return None
    try:
        record_id = int(text, 10)
    except ValueError:
        value = float(text)
        if not (math.isfinite(value) and value.is_integer()):
            return None
        record_id = int(value)
    if not MIN_RECORD_ID <= record_id <= MAX_RECORD_ID:
        return None
    return record_id


def find_missing_fields(payload: Mapping[str, Any], allow_zero: bool = False) -> List[str]:
    """Names of required fields the payload does not provide.

    By default any falsy value counts as missing, so ``0`` and ``false`` are
    rejected along with null and empty strings. With ``allow_zero`` only
    absent, null and empty-string values are rejected.
    """
    missing = []
    for field in SALES_RECORD_FIELDS:
        value = payload.get(field)
        if allow_zero:
            if value is None or value == "":
                missing.append(field)
        elif not value:
            missing.append(field)
    return missing


def _format_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


class SalesRecordService:
    """Business rules for avocado sales records."""

    def __init__(self, repository: SalesRecordRepository, allow_zero_values: bool = False):
        self.repository = repository
        self.allow_zero_values = allow_zero_values

    async def list_records(self, date: Optional[str] = None, region: Optional[str] = None) -> List[SalesRecordInDB]:
        filters = build_filters(date=date, region=region)
        logger.bind(filters=filters).debug("Service: listing sales records...")
        return await self.repository.find_matching(filters)

    async def get_record(self, raw_id: str) -> Optional[SalesRecordInDB]:
        record_id = parse_record_id(raw_id)
        if record_id is None:
            logger.debug(f"Service: id '{raw_id}' is not an integer, nothing can match.")
            return None
        return await self.repository.get_by_record_id(record_id)

    async def create_record(self, payload: Mapping[str, Any]) -> SalesRecordInDB:
        """Validates a payload and inserts it.

        Raises RecordValidationError for missing fields, InvalidRecordError when
        a value cannot be coerced, DuplicateRecordError on an existing id and
        DatabaseOperationError for any other store failure.
        """
        log = logger.bind(record_id=payload.get("id"))
        missing = find_missing_fields(payload, allow_zero=self.allow_zero_values)
        if missing:
            log.info(f"Service: rejecting sales record, missing fields: {missing}")
            raise RecordValidationError(missing)

        try:
            record_in = SalesRecordCreateInternal.model_validate(
                {field: payload[field] for field in SALES_RECORD_FIELDS}
            )
        except ValidationError as e:
            details = _format_validation_error(e)
            log.info(f"Service: sales record does not fit the schema: {details}")
            raise InvalidRecordError(details) from e

        created = await self.repository.create(record_in)
        log.success("Sales record created.")
        return created


# Dependency factory for the service
async def get_sales_record_service(
    repository: SalesRecordRepository = Depends(get_sales_record_repository),
) -> SalesRecordService:
    return SalesRecordService(repository, allow_zero_values=settings.ALLOW_ZERO_VALUES)
