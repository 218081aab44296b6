from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Integer, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.account import enum_values
from app.models.enums import RecipientKind, TransactionKind


class Target(Base):
    __tablename__ = "targets"
    __table_args__ = (
        CheckConstraint("month >= 1 AND month <= 12", name="ck_targets_month_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # assigned_to_id points at an account or a team depending on assigned_to_kind,
    # so it carries no foreign key.
    assigned_to_kind: Mapped[RecipientKind] = mapped_column(
        Enum(RecipientKind, name="recipient_kind", values_callable=enum_values),
        default=RecipientKind.account,
        nullable=False,
    )
    assigned_to_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    target_type: Mapped[TransactionKind] = mapped_column(
        Enum(TransactionKind, name="transaction_kind", values_callable=enum_values),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(24, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    original_total: Mapped[Decimal | None] = mapped_column(Numeric(24, 2), nullable=True)
    member_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_for_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by: Mapped["Account | None"] = relationship("Account", foreign_keys=[created_by_id])
    created_for: Mapped["Account | None"] = relationship("Account", foreign_keys=[created_for_id])

    @property
    def account_id(self) -> int | None:
        """Account this record counts towards."""
        if self.created_for_id is not None:
            return self.created_for_id
        if self.assigned_to_kind == RecipientKind.account:
            return self.assigned_to_id
        return None
