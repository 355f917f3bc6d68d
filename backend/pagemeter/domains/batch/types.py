"""Batch domain types and constants."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

MAX_FILES_PER_JOB = 100
MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024
BYTES_PER_ESTIMATED_PAGE = 50 * 1024
MIN_PRIORITY = 1
MAX_PRIORITY = 10
DEFAULT_PRIORITY = 5
ALLOWED_EXTENSION = ".pdf"


class MergeFormat(str, Enum):
    """Output formats a merged batch can be rendered to."""

    TXT = "txt"
    MD = "md"
    DOCX = "docx"


class BatchStatus(str, Enum):
    """Lifecycle states of a batch job and its files."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BatchErrorKind(str, Enum):
    """Reasons a batch request can be rejected, checked in this order."""

    MISSING_FIELDS = "missing_fields"
    TOO_MANY_FILES = "too_many_files"
    INVALID_PRIORITY = "invalid_priority"
    INVALID_MERGE_FORMAT = "invalid_merge_format"
    INVALID_FILE = "invalid_file"
    INVALID_FILE_TYPE = "invalid_file_type"
    FILE_TOO_LARGE = "file_too_large"


@dataclass(frozen=True)
class BatchFileInput:
    """A file as submitted by the client (unvalidated)."""

    name: Any = None
    size: Any = None


@dataclass(frozen=True)
class BatchJobRequest:
    """A batch job as submitted by the client (unvalidated)."""

    name: Any = None
    files: Any = None
    description: Optional[str] = None
    priority: Any = DEFAULT_PRIORITY
    merge_output: bool = False
    merge_format: Any = None
    output_options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidatedFile:
    """A file that passed validation, with its page estimate."""

    name: str
    size_bytes: int
    estimated_pages: int


@dataclass(frozen=True)
class ValidatedBatch:
    """A batch request that passed every rule."""

    name: str
    description: Optional[str]
    files: list[ValidatedFile]
    priority: int
    merge_output: bool
    merge_format: Optional[MergeFormat]
    output_options: dict[str, Any]

    @property
    def total_estimated_pages(self) -> int:
        """Sum of per-file page estimates."""
        return sum(f.estimated_pages for f in self.files)


@dataclass(frozen=True)
class BatchJobRecord:
    """A persisted batch job."""

    id: UUID
    user_id: UUID
    name: str
    description: Optional[str]
    status: BatchStatus
    priority: int
    total_files: int
    estimated_pages: int
    merge_output: bool
    merge_format: Optional[MergeFormat]
    output_options: dict[str, Any]
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CostEstimate:
    """Up-front cost shown when a job is created. Nothing is charged yet."""

    estimated_pages: int
    estimated_cost_usd: Decimal
    current_usage: int
    pages_remaining: int
    subscription_type: str


@dataclass(frozen=True)
class BatchJobCreated:
    """Result of creating a batch job."""

    batch_job: BatchJobRecord
    cost_estimate: CostEstimate
