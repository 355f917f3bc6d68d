"""Batch domain protocols."""

from typing import Protocol, runtime_checkable
from uuid import UUID

from pagemeter.domains.batch.types import (
    BatchJobCreated,
    BatchJobRecord,
    BatchJobRequest,
    ValidatedBatch,
)


@runtime_checkable
class BatchJobRepositoryProtocol(Protocol):
    """Persistence for batch jobs and their files."""

    async def create_job(self, user_id: UUID, batch: ValidatedBatch) -> BatchJobRecord:
        """Insert the job row and one row per file in a single transaction."""
        ...


@runtime_checkable
class BatchJobServiceProtocol(Protocol):
    """Creates batch jobs after validation and an advisory credit check."""

    async def create_job(self, user_id: UUID, request: BatchJobRequest) -> BatchJobCreated:
        """Validate, estimate and persist a batch job.

        Raises BatchValidationError, InsufficientCreditsError,
        LedgerNotFoundError or StoreUnavailableError.
        """
        ...
