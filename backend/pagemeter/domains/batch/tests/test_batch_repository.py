"""Unit tests for SqlBatchJobRepository with the session and crud layer mocked."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from pagemeter.domains.batch.repository import SqlBatchJobRepository
from pagemeter.domains.batch.tests.conftest import DEFAULT_USER_ID, KIB
from pagemeter.domains.batch.types import BatchStatus, MergeFormat, ValidatedBatch, ValidatedFile
from pagemeter.domains.usage.exceptions import StoreUnavailableError


class _FakeTransaction:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeSession:
    def __init__(self) -> None:
        self.refresh = AsyncMock()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def begin(self):
        return _FakeTransaction()


def _batch() -> ValidatedBatch:
    return ValidatedBatch(
        name="Contracts",
        description=None,
        files=[
            ValidatedFile(name="a.pdf", size_bytes=100 * KIB, estimated_pages=2),
            ValidatedFile(name="b.pdf", size_bytes=10 * KIB, estimated_pages=1),
        ],
        priority=3,
        merge_output=True,
        merge_format=MergeFormat.DOCX,
        output_options={"ocr": True},
    )


def _job_row(**values):
    return SimpleNamespace(id=uuid4(), created_at=datetime.now(timezone.utc), **values)


class TestCreateJob:
    @pytest.mark.asyncio
    async def test_passes_job_and_files_to_crud(self):
        session = _FakeSession()
        repo = SqlBatchJobRepository(lambda: session)

        with patch("pagemeter.domains.batch.repository.crud") as crud:
            crud.batch_job.create_with_files = AsyncMock(
                side_effect=lambda db, obj_in, files_in: (_job_row(**obj_in), [])
            )
            record = await repo.create_job(DEFAULT_USER_ID, _batch())

        kwargs = crud.batch_job.create_with_files.await_args.kwargs
        assert kwargs["obj_in"]["total_files"] == 2
        assert kwargs["obj_in"]["estimated_pages"] == 3
        assert kwargs["obj_in"]["merge_format"] == "docx"
        assert [f["original_filename"] for f in kwargs["files_in"]] == ["a.pdf", "b.pdf"]

        assert record.user_id == DEFAULT_USER_ID
        assert record.status == BatchStatus.PENDING
        assert record.merge_format == MergeFormat.DOCX
        assert record.output_options == {"ocr": True}
        session.refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_error_becomes_store_unavailable(self):
        session = _FakeSession()
        repo = SqlBatchJobRepository(lambda: session)

        with patch("pagemeter.domains.batch.repository.crud") as crud:
            crud.batch_job.create_with_files = AsyncMock(
                side_effect=OperationalError("INSERT", {}, Exception("connection refused"))
            )
            with pytest.raises(StoreUnavailableError):
                await repo.create_job(DEFAULT_USER_ID, _batch())
