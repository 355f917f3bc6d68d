"""API schemas."""

from pagemeter.schemas.batch_job import (
    BatchFileIn,
    BatchJobCreate,
    BatchJobCreatedOut,
    BatchJobCreateResponse,
)
from pagemeter.schemas.response import ErrorResponse, SuccessResponse
from pagemeter.schemas.usage import (
    ChargeEventOut,
    ChargeRequest,
    ChargeResultOut,
    CreditBreakdownOut,
    UsageHistoryResponse,
    UsageStatsOut,
)

__all__ = [
    "BatchFileIn",
    "BatchJobCreate",
    "BatchJobCreateResponse",
    "BatchJobCreatedOut",
    "ChargeEventOut",
    "ChargeRequest",
    "ChargeResultOut",
    "CreditBreakdownOut",
    "ErrorResponse",
    "SuccessResponse",
    "UsageHistoryResponse",
    "UsageStatsOut",
]
