"""SQL batch job repository wrapping crud.batch_job."""

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pagemeter import crud
from pagemeter.core.logging import logger
from pagemeter.domains.batch.protocols import BatchJobRepositoryProtocol
from pagemeter.domains.batch.types import (
    BatchJobRecord,
    BatchStatus,
    MergeFormat,
    ValidatedBatch,
)
from pagemeter.domains.usage.exceptions import StoreUnavailableError
from pagemeter.models.batch_job import BatchJob


def _to_record(job: BatchJob) -> BatchJobRecord:
    return BatchJobRecord(
        id=job.id,
        user_id=job.user_id,
        name=job.name,
        description=job.description,
        status=BatchStatus(job.status),
        priority=job.priority,
        total_files=job.total_files,
        estimated_pages=job.estimated_pages,
        merge_output=job.merge_output,
        merge_format=MergeFormat(job.merge_format) if job.merge_format else None,
        output_options=dict(job.output_options or {}),
        created_at=job.created_at,
    )


class SqlBatchJobRepository(BatchJobRepositoryProtocol):
    """Batch job persistence on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize with a session factory."""
        self._session_factory = session_factory

    async def create_job(self, user_id: UUID, batch: ValidatedBatch) -> BatchJobRecord:
        """Insert job and files together; either both land or neither does."""
        job_values = {
            "user_id": user_id,
            "name": batch.name,
            "description": batch.description,
            "status": BatchStatus.PENDING.value,
            "priority": batch.priority,
            "total_files": len(batch.files),
            "estimated_pages": batch.total_estimated_pages,
            "merge_output": batch.merge_output,
            "merge_format": batch.merge_format.value if batch.merge_format else None,
            "output_options": batch.output_options,
        }
        file_values = [
            {
                "original_filename": f.name,
                "file_size": f.size_bytes,
                "estimated_pages": f.estimated_pages,
                "status": BatchStatus.PENDING.value,
            }
            for f in batch.files
        ]
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    job, _ = await crud.batch_job.create_with_files(
                        db, obj_in=job_values, files_in=file_values
                    )
                    await db.refresh(job)
                return _to_record(job)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to create batch job for user {user_id}: {e}")
            raise StoreUnavailableError("Failed to create batch job") from e
