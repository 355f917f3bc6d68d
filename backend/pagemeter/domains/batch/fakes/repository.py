"""Fake batch job repository for testing."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pagemeter.domains.batch.types import BatchJobRecord, BatchStatus, ValidatedBatch


class FakeBatchJobRepository:
    """In-memory fake for BatchJobRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize empty in-memory stores."""
        self.jobs: dict[UUID, BatchJobRecord] = {}
        self.files: dict[UUID, list] = {}
        self.fail_with: Optional[Exception] = None

    async def create_job(self, user_id: UUID, batch: ValidatedBatch) -> BatchJobRecord:
        """Store a job and its files (fake)."""
        if self.fail_with is not None:
            raise self.fail_with
        record = BatchJobRecord(
            id=uuid4(),
            user_id=user_id,
            name=batch.name,
            description=batch.description,
            status=BatchStatus.PENDING,
            priority=batch.priority,
            total_files=len(batch.files),
            estimated_pages=batch.total_estimated_pages,
            merge_output=batch.merge_output,
            merge_format=batch.merge_format,
            output_options=dict(batch.output_options),
            created_at=datetime.now(timezone.utc),
        )
        self.jobs[record.id] = record
        self.files[record.id] = list(batch.files)
        return record
