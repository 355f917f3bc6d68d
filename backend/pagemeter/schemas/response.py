"""Response envelopes shared by all endpoints."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class SuccessResponse(BaseModel, Generic[DataT]):
    """``{success: true, data: ...}`` envelope."""

    success: bool = True
    data: DataT


class ErrorResponse(BaseModel):
    """``{success: false, error, details?}`` envelope returned by exception handlers."""

    success: bool = False
    error: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(
        None, description="Structured context, e.g. a credit breakdown or the failing rule"
    )
