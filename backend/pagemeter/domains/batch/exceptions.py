"""Batch domain exceptions."""

from typing import Optional

from pagemeter.core.exceptions import BadRequestError
from pagemeter.domains.batch.types import BatchErrorKind


class BatchValidationError(BadRequestError):
    """Raised when a batch request breaks a validation rule.

    ``kind`` identifies the rule; ``file_name`` is set for per-file rules.
    """

    def __init__(
        self,
        kind: BatchErrorKind,
        message: str,
        *,
        file_name: Optional[str] = None,
    ):
        """Initialize with the failed rule and a client-facing message."""
        self.kind = kind
        self.file_name = file_name
        super().__init__(message)
