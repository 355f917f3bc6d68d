"""Batch job and batch file models."""

from typing import Optional
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pagemeter.models._base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class BatchJob(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A multi-file processing job."""

    __tablename__ = "batch_job"

    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    total_files: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_pages: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    merge_output: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    merge_format: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    output_options: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    files: Mapped[list["BatchFile"]] = relationship(
        "BatchFile",
        back_populates="batch_job",
        lazy="noload",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("idx_batch_job_user_id", "user_id"),)


class BatchFile(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One file belonging to a batch job."""

    __tablename__ = "batch_file"

    batch_job_id: Mapped[UUID] = mapped_column(
        ForeignKey("batch_job.id", ondelete="CASCADE", name="fk_batch_file_batch_job_id"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    original_filename: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    estimated_pages: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    batch_job: Mapped[BatchJob] = relationship("BatchJob", back_populates="files", lazy="noload")

    __table_args__ = (Index("idx_batch_file_batch_job_id", "batch_job_id"),)
