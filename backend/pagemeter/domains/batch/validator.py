"""Batch validator: structural and per-file rules plus page estimation.

Rules run in a fixed order and the first failure wins. Validation has no
side effects.
"""

import math
from typing import Any, Optional

from pagemeter.domains.batch.exceptions import BatchValidationError
from pagemeter.domains.batch.types import (
    ALLOWED_EXTENSION,
    BYTES_PER_ESTIMATED_PAGE,
    MAX_FILE_SIZE_BYTES,
    MAX_FILES_PER_JOB,
    MAX_PRIORITY,
    MIN_PRIORITY,
    BatchErrorKind,
    BatchFileInput,
    BatchJobRequest,
    MergeFormat,
    ValidatedBatch,
    ValidatedFile,
)


def estimate_pages(size_bytes: int) -> int:
    """Rough page estimate: one page per 50 KiB, at least one."""
    return max(1, math.ceil(size_bytes / BYTES_PER_ESTIMATED_PAGE))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_structure(request: BatchJobRequest) -> str:
    name = request.name.strip() if isinstance(request.name, str) else ""
    if not name or not isinstance(request.files, list) or not request.files:
        raise BatchValidationError(
            BatchErrorKind.MISSING_FIELDS, "Missing required fields: name and files array"
        )
    if len(request.files) > MAX_FILES_PER_JOB:
        raise BatchValidationError(
            BatchErrorKind.TOO_MANY_FILES,
            f"Maximum {MAX_FILES_PER_JOB} files allowed per batch job",
        )
    return name


def _check_priority(priority: Any) -> int:
    if not _is_int(priority) or not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        raise BatchValidationError(
            BatchErrorKind.INVALID_PRIORITY,
            f"Priority must be an integer between {MIN_PRIORITY} and {MAX_PRIORITY}",
        )
    return priority


def _check_merge_format(merge_output: bool, merge_format: Any) -> Optional[MergeFormat]:
    if not merge_output or merge_format in (None, "", "none"):
        return None
    try:
        return MergeFormat(merge_format)
    except ValueError:
        raise BatchValidationError(
            BatchErrorKind.INVALID_MERGE_FORMAT,
            "Invalid merge format. Must be txt, md, or docx",
        ) from None


def validate_file(file: BatchFileInput) -> ValidatedFile:
    """Validate one file and estimate its page count."""
    name = file.name if isinstance(file.name, str) else ""
    if not name or not _is_int(file.size) or file.size <= 0:
        raise BatchValidationError(
            BatchErrorKind.INVALID_FILE,
            "Each file must have name and size properties",
            file_name=name or None,
        )
    if not name.lower().endswith(ALLOWED_EXTENSION):
        raise BatchValidationError(
            BatchErrorKind.INVALID_FILE_TYPE,
            f"Invalid file type: {name}. Only PDF files are allowed.",
            file_name=name,
        )
    if file.size > MAX_FILE_SIZE_BYTES:
        raise BatchValidationError(
            BatchErrorKind.FILE_TOO_LARGE,
            f"File too large: {name}. Maximum size is 50MB.",
            file_name=name,
        )
    return ValidatedFile(name=name, size_bytes=file.size, estimated_pages=estimate_pages(file.size))


def validate_batch(request: BatchJobRequest) -> ValidatedBatch:
    """Validate a batch request.

    Raises:
        BatchValidationError: on the first rule that fails, with ``kind`` set.
    """
    name = _check_structure(request)
    priority = _check_priority(request.priority)
    merge_format = _check_merge_format(bool(request.merge_output), request.merge_format)
    files = [validate_file(f) for f in request.files]

    description = request.description.strip() if request.description else None
    return ValidatedBatch(
        name=name,
        description=description or None,
        files=files,
        priority=priority,
        merge_output=bool(request.merge_output),
        merge_format=merge_format,
        output_options=dict(request.output_options or {}),
    )
