from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.enums import PermissionLevel, RoleName


def enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[RoleName] = mapped_column(
        Enum(RoleName, name="role_name", values_callable=enum_values),
        default=RoleName.employee,
        nullable=False,
    )
    permission_level: Mapped[PermissionLevel] = mapped_column(
        Enum(PermissionLevel, name="permission_level", values_callable=enum_values),
        default=PermissionLevel.sales_and_orders,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    memberships: Mapped[list["TeamMember"]] = relationship(
        "TeamMember", back_populates="account", cascade="all, delete-orphan"
    )
    managed_teams: Mapped[list["Team"]] = relationship(
        "Team", back_populates="manager", foreign_keys="Team.manager_id"
    )
    transactions: Mapped[list["Transaction"]] = relationship("Transaction", back_populates="owner")
    audit_logs: Mapped[list["AuditLog"]] = relationship("AuditLog", back_populates="actor")
