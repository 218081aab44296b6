"""Initial schema for target tracking.

Revision ID: 20261016_0001
Revises:
Create Date: 2026-10-16 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261016_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    role_name = sa.Enum("Admin", "Employee", "Team Manager", name="role_name")
    permission_level = sa.Enum(
        "Sales", "Orders", "Sales & Orders", "All Permissions", name="permission_level"
    )
    transaction_kind = sa.Enum("sales", "order", name="transaction_kind")
    recipient_kind = sa.Enum("account", "team", name="recipient_kind")

    role_name.create(op.get_bind(), checkfirst=True)
    permission_level.create(op.get_bind(), checkfirst=True)
    transaction_kind.create(op.get_bind(), checkfirst=True)
    recipient_kind.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("role", role_name, nullable=False, server_default="Employee"),
        sa.Column("permission_level", permission_level, nullable=False, server_default="Sales & Orders"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_accounts_id", "accounts", ["id"])
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("manager_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_teams_id", "teams", ["id"])
    op.create_index("ix_teams_manager_id", "teams", ["manager_id"])

    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("team_id", "account_id", name="uq_team_members_team_account"),
    )
    op.create_index("ix_team_members_account_id", "team_members", ["account_id"])

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("address", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("email", name="uq_clients_email"),
    )
    op.create_index("ix_clients_id", "clients", ["id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("kind", transaction_kind, nullable=False),
        sa.Column(
            "owner_account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id", ondelete="SET NULL"), nullable=True),
        sa.Column("client_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("amount", sa.Numeric(24, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sourcing_cost", sa.Numeric(24, 2), nullable=False, server_default="0"),
        sa.Column("occurred_on", sa.Date(), nullable=False, server_default=sa.func.current_date()),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="completed"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        sa.CheckConstraint("quantity >= 0", name="ck_transactions_quantity_non_negative"),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"])
    op.create_index("ix_transactions_kind", "transactions", ["kind"])
    op.create_index("ix_transactions_owner_account_id", "transactions", ["owner_account_id"])
    op.create_index("ix_transactions_occurred_on", "transactions", ["occurred_on"])

    op.create_table(
        "targets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("assigned_to_kind", recipient_kind, nullable=False, server_default="account"),
        sa.Column("assigned_to_id", sa.Integer(), nullable=False),
        sa.Column("target_type", transaction_kind, nullable=False),
        sa.Column("amount", sa.Numeric(24, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("original_total", sa.Numeric(24, 2), nullable=True),
        sa.Column("member_count", sa.Integer(), nullable=True),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_for_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_targets_month_range"),
    )
    op.create_index("ix_targets_id", "targets", ["id"])
    op.create_index("ix_targets_assigned_to_id", "targets", ["assigned_to_id"])
    op.create_index("ix_targets_created_for_id", "targets", ["created_for_id"])
    op.create_index("ix_targets_period", "targets", ["year", "month"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "actor_account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=100), nullable=False),
        sa.Column("before_state", sa.JSON(), nullable=True),
        sa.Column("after_state", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_id", "audit_logs", ["id"])


def downgrade() -> None:
    op.drop_index("ix_audit_logs_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_targets_period", table_name="targets")
    op.drop_index("ix_targets_created_for_id", table_name="targets")
    op.drop_index("ix_targets_assigned_to_id", table_name="targets")
    op.drop_index("ix_targets_id", table_name="targets")
    op.drop_table("targets")

    op.drop_index("ix_transactions_occurred_on", table_name="transactions")
    op.drop_index("ix_transactions_owner_account_id", table_name="transactions")
    op.drop_index("ix_transactions_kind", table_name="transactions")
    op.drop_index("ix_transactions_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_clients_id", table_name="clients")
    op.drop_table("clients")

    op.drop_index("ix_team_members_account_id", table_name="team_members")
    op.drop_table("team_members")

    op.drop_index("ix_teams_manager_id", table_name="teams")
    op.drop_index("ix_teams_id", table_name="teams")
    op.drop_table("teams")

    op.drop_index("ix_accounts_email", table_name="accounts")
    op.drop_index("ix_accounts_id", table_name="accounts")
    op.drop_table("accounts")

    sa.Enum(name="recipient_kind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="transaction_kind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="permission_level").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="role_name").drop(op.get_bind(), checkfirst=True)
