"""Models for the application."""

from ._base import Base
from .batch_job import BatchFile, BatchJob
from .charge_event import ChargeEvent
from .user_ledger import UserLedger

__all__ = [
    "Base",
    "BatchFile",
    "BatchJob",
    "ChargeEvent",
    "UserLedger",
]
