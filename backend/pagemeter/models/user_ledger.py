"""User ledger model."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from pagemeter.models._base import Base, TimestampMixin


class UserLedger(Base, TimestampMixin):
    """Per-user free page allowance and credit balance.

    One row per user. The row is locked FOR UPDATE by every charge.
    """

    __tablename__ = "user_ledger"

    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    free_pages_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credit_balance: Mapped[Decimal] = mapped_column(
        Numeric(14, 4), nullable=False, default=Decimal("0")
    )
    pages_used_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subscription_type: Mapped[str] = mapped_column(String(20), nullable=False, default="free")

    __table_args__ = (
        CheckConstraint("free_pages_remaining >= 0", name="ck_user_ledger_free_pages_non_negative"),
        CheckConstraint("credit_balance >= 0", name="ck_user_ledger_credit_balance_non_negative"),
        CheckConstraint("pages_used_total >= 0", name="ck_user_ledger_pages_used_non_negative"),
    )
