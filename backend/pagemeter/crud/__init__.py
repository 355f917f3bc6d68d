"""CRUD layer operations."""

from .crud_batch_job import batch_job
from .crud_charge_event import charge_event
from .crud_user_ledger import user_ledger

__all__ = ["batch_job", "charge_event", "user_ledger"]
