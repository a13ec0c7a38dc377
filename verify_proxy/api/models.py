"""Request/Response models for API endpoints."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BatchVerifyRequest(BaseModel):
    """Request model for the batch endpoint."""

    emails: list[Annotated[str, Field(min_length=1)]] = Field(
        ..., description="Email addresses to verify, in order"
    )
    key: str = Field(..., min_length=1, description="API key forwarded to the upstream service")


class VerificationResultModel(CamelModel):
    """One email's outcome inside a batch report."""

    email: str
    success: bool
    data: str | None = Field(None, description="Raw upstream response body")
    status: int | None = Field(None, description="Upstream HTTP status code")
    error: str | None = None
    is_timeout: bool = False


class BatchReportResponse(CamelModel):
    """Response model for the batch endpoint."""

    total: int
    successful: int
    failed: int
    processing_time: str = Field(..., description="Wall-clock time of the batch, e.g. '1234ms'")
    results: list[VerificationResultModel]


class HealthResponse(CamelModel):
    """Response model for health endpoint."""

    status: str = Field(..., description="'healthy' or 'shutting_down'")
    queue_length: int = Field(..., description="Jobs waiting in the verification queue")
    is_processing: bool = Field(..., description="Whether the drain loop is active")
    timestamp: str


class ServiceInfoResponse(BaseModel):
    """Response model for the root liveness endpoint."""

    service: str
    version: str
    status: str
    timestamp: str


class ErrorResponse(BaseModel):
    """Body returned for every error."""

    error: str
