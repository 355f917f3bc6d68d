"""Batch job schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import Field

from pagemeter.domains.batch.types import BatchJobCreated
from pagemeter.schemas._base import CamelModel
from pagemeter.schemas.response import SuccessResponse


class BatchFileIn(CamelModel):
    """A file in a batch job request.

    Types are deliberately loose; the batch validator owns the rules and
    reports violations as 400 with a specific error kind.
    """

    name: Any = None
    size: Any = None


class BatchJobCreate(CamelModel):
    """Request body for POST /batch/jobs."""

    name: Any = Field(None, description="Job name (required, non-empty)")
    description: Optional[str] = None
    files: Optional[list[BatchFileIn]] = Field(None, description="1 to 100 PDF files")
    priority: Any = Field(5, description="Integer between 1 and 10")
    merge_output: bool = False
    merge_format: Optional[str] = Field(None, description="txt, md or docx")
    output_options: dict[str, Any] = Field(default_factory=dict)


class BatchJobOut(CamelModel):
    """A created batch job."""

    id: UUID
    name: str
    description: Optional[str] = None
    status: str
    priority: int
    total_files: int
    estimated_pages: int
    merge_output: bool
    merge_format: Optional[str] = None
    created_at: Optional[datetime] = None


class CostEstimateOut(CamelModel):
    """Up-front cost of a batch job."""

    estimated_pages: int
    estimated_cost_usd: str = Field(..., alias="estimatedCostUSD")
    current_usage: int
    pages_remaining: int
    subscription_type: str


class BatchJobCreatedOut(CamelModel):
    """Payload of a successful job creation."""

    batch_job: BatchJobOut
    cost_estimate: CostEstimateOut

    @classmethod
    def from_domain(cls, created: BatchJobCreated) -> "BatchJobCreatedOut":
        """Build the response payload from the service result."""
        job = created.batch_job
        estimate = created.cost_estimate
        return cls(
            batch_job=BatchJobOut(
                id=job.id,
                name=job.name,
                description=job.description,
                status=job.status.value,
                priority=job.priority,
                total_files=job.total_files,
                estimated_pages=job.estimated_pages,
                merge_output=job.merge_output,
                merge_format=job.merge_format.value if job.merge_format else None,
                created_at=job.created_at,
            ),
            cost_estimate=CostEstimateOut(
                estimated_pages=estimate.estimated_pages,
                estimated_cost_usd=f"{estimate.estimated_cost_usd:.4f}",
                current_usage=estimate.current_usage,
                pages_remaining=estimate.pages_remaining,
                subscription_type=estimate.subscription_type,
            ),
        )


class BatchJobCreateResponse(SuccessResponse[BatchJobCreatedOut]):
    """Response for POST /batch/jobs."""
