"""CRUD operations for the BatchJob model."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from pagemeter.crud._base import CRUDBase
from pagemeter.models.batch_job import BatchFile, BatchJob


class CRUDBatchJob(CRUDBase[BatchJob]):
    """CRUD operations for the BatchJob model."""

    async def create_with_files(
        self,
        db: AsyncSession,
        *,
        obj_in: dict[str, Any],
        files_in: list[dict[str, Any]],
    ) -> tuple[BatchJob, list[BatchFile]]:
        """Insert a job and its file rows in the caller's transaction.

        Args:
            db: Database session
            obj_in: Column values for the job
            files_in: Column values for each file, in submission order

        Returns:
            The job and its files, with server defaults populated
        """
        job = BatchJob(**obj_in)
        db.add(job)
        await db.flush()

        files = [
            BatchFile(batch_job_id=job.id, position=position, **file_in)
            for position, file_in in enumerate(files_in)
        ]
        db.add_all(files)
        await db.flush()
        return job, files


batch_job = CRUDBatchJob(BatchJob)
