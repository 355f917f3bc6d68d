"""Batch job endpoints."""

from fastapi import APIRouter, Depends

from pagemeter.api.context import ApiContext
from pagemeter.api.deps import Inject, get_context
from pagemeter.domains.batch.protocols import BatchJobServiceProtocol
from pagemeter.domains.batch.types import BatchFileInput, BatchJobRequest
from pagemeter.schemas import ErrorResponse
from pagemeter.schemas.batch_job import BatchJobCreate, BatchJobCreatedOut, BatchJobCreateResponse

router = APIRouter()


def _to_request(body: BatchJobCreate) -> BatchJobRequest:
    files = None
    if body.files is not None:
        files = [BatchFileInput(name=f.name, size=f.size) for f in body.files]
    return BatchJobRequest(
        name=body.name,
        files=files,
        description=body.description,
        priority=body.priority,
        merge_output=body.merge_output,
        merge_format=body.merge_format,
        output_options=body.output_options,
    )


@router.post(
    "/jobs",
    response_model=BatchJobCreateResponse,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def create_batch_job(
    body: BatchJobCreate,
    ctx: ApiContext = Depends(get_context),
    service: BatchJobServiceProtocol = Inject(BatchJobServiceProtocol),
) -> BatchJobCreateResponse:
    """Create a batch job after validating its files and checking credits.

    The credit check is advisory; nothing is charged until pages are
    actually processed.
    """
    created = await service.create_job(ctx.user_id, _to_request(body))
    ctx.logger.info(
        f"Created batch job {created.batch_job.id} with {created.batch_job.total_files} files"
    )
    return BatchJobCreateResponse(data=BatchJobCreatedOut.from_domain(created))
