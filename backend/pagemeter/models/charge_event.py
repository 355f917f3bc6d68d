"""Charge event model (append-only usage audit log)."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, Identity, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import INET, JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from pagemeter.models._base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ChargeEvent(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One immutable usage event: a completed charge or a lifecycle event.

    ``sequence`` is assigned by the database at insert time and is the
    ordering key for history reads.
    """

    __tablename__ = "charge_event"

    sequence: Mapped[int] = mapped_column(BigInteger, Identity(always=True), unique=True)
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("user_ledger.user_id", ondelete="CASCADE", name="fk_charge_event_user_id"),
        nullable=False,
    )
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    pages_charged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    free_pages_consumed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credits_charged: Mapped[Decimal] = mapped_column(
        Numeric(14, 4), nullable=False, default=Decimal("0")
    )
    pages_before: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pages_after: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processing_record_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    client_ip: Mapped[Optional[str]] = mapped_column(INET, nullable=True)
    client_user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_metadata: Mapped[dict] = mapped_column("metadata", JSONB, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_charge_event_user_sequence", "user_id", "sequence"),
        Index("idx_charge_event_user_action", "user_id", "action"),
    )
