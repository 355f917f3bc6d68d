"""Usage endpoints: charge pages, read the usage log and current balances."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from pagemeter.api.context import ApiContext
from pagemeter.api.deps import Inject, get_context
from pagemeter.domains.usage.protocols import ChargeExecutorProtocol, UsageHistoryReaderProtocol
from pagemeter.domains.usage.types import HISTORY_DEFAULT_LIMIT, HISTORY_DEFAULT_PAGE
from pagemeter.schemas import ErrorResponse, SuccessResponse
from pagemeter.schemas.usage import (
    ChargeRequest,
    ChargeResultOut,
    UsageHistoryResponse,
    UsageStatsOut,
)

router = APIRouter()


@router.post(
    "/charge",
    response_model=SuccessResponse[ChargeResultOut],
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def charge_pages(
    body: ChargeRequest,
    ctx: ApiContext = Depends(get_context),
    executor: ChargeExecutorProtocol = Inject(ChargeExecutorProtocol),
) -> SuccessResponse[ChargeResultOut]:
    """Charge processed pages against the caller's free allowance, then credits."""
    result = await executor.charge(
        ctx.user_id,
        body.pages,
        processing_record_id=body.processing_record_id,
        request_metadata=ctx.request_metadata,
    )
    return SuccessResponse[ChargeResultOut](data=ChargeResultOut.from_domain(result))


@router.get(
    "/history",
    response_model=UsageHistoryResponse,
    response_model_by_alias=True,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def usage_history(
    page: Optional[str] = Query(str(HISTORY_DEFAULT_PAGE), description="Zero-based page"),
    limit: Optional[str] = Query(str(HISTORY_DEFAULT_LIMIT), description="Rows per page, max 100"),
    action: Optional[str] = Query(None, description="Filter by event action"),
    ctx: ApiContext = Depends(get_context),
    history: UsageHistoryReaderProtocol = Inject(UsageHistoryReaderProtocol),
) -> UsageHistoryResponse:
    """Return the caller's usage log, newest first.

    Out-of-range paging values are clamped and unknown actions are ignored.
    """
    result = await history.get_history(ctx.user_id, page=page, limit=limit, action=action or None)
    return UsageHistoryResponse.from_domain(result)


@router.get(
    "/stats",
    response_model=SuccessResponse[UsageStatsOut],
    response_model_by_alias=True,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def usage_stats(
    ctx: ApiContext = Depends(get_context),
    history: UsageHistoryReaderProtocol = Inject(UsageHistoryReaderProtocol),
) -> SuccessResponse[UsageStatsOut]:
    """Return the caller's balances and count of charges in the last 30 days."""
    summary = await history.get_summary(ctx.user_id)
    return SuccessResponse[UsageStatsOut](data=UsageStatsOut.from_domain(summary))
