# avocado_api/models/api_common.py

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str = Field(..., description="Human readable error message.")
    details: Optional[str] = Field(None, description="Underlying error text, when available.")


class EndpointDescription(BaseModel):
    path: str
    methods: List[str]


class ApiIndexResponse(BaseModel):
    """Service metadata plus the list of registered routes."""
    message: str
    documentation: List[EndpointDescription]


class ComponentStatus(BaseModel):
    status: Literal["ok", "error", "unavailable"] = "ok"
    message: Optional[str] = None


class HealthCheckResponse(BaseModel):
    overall_status: Literal["ok", "error"] = "ok"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    uptime_seconds: float = Field(..., description="Process uptime in seconds")
    components: Dict[str, ComponentStatus]


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    """JSONResponse carrying an ErrorResponse body; ``details`` is omitted when None."""
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
