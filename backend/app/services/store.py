"""Data-store operations the engine depends on.

Every account-id filter passes through ``normalize_account_ids`` here, so the
rest of the engine only ever compares plain integer ids.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, false, or_, select
from sqlalchemy.orm import Session, selectinload

from app.core.errors import NotFound
from app.models.account import Account
from app.models.enums import PermissionLevel, RecipientKind, TransactionKind
from app.models.target import Target
from app.models.team import Team, TeamMember
from app.models.transaction import Transaction
from app.services.periods import Period, ResolvedPeriod, period_index
from app.utils.identifiers import normalize_account_ids


@dataclass(frozen=True)
class TargetQuery:
    month: int | None = None
    year: int | None = None
    periods: Sequence[Period] | None = None
    target_type: TransactionKind | None = None
    assigned_to_ids: Sequence[Any] | None = None
    assigned_to_kind: RecipientKind | None = None
    created_for_ids: Sequence[Any] | None = None


def get_account(db: Session, account_id: Any) -> Account | None:
    (normalized,) = normalize_account_ids([account_id])
    return db.get(Account, normalized)


def get_account_or_404(db: Session, account_id: Any) -> Account:
    account = get_account(db, account_id)
    if account is None:
        raise NotFound(f"Account {account_id} not found.")
    return account


def find_accounts_by_eligibility(db: Session, levels: Iterable[PermissionLevel]) -> list[Account]:
    level_list = [PermissionLevel(level) for level in levels]
    if not level_list:
        return []
    return list(
        db.scalars(
            select(Account)
            .where(Account.permission_level.in_(level_list), Account.is_active.is_(True))
            .order_by(Account.id)
        ).all()
    )


def get_team_or_404(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise NotFound(f"Team {team_id} not found.")
    return team


def find_team_members(db: Session, team_id: int) -> list[Account]:
    return list(
        db.scalars(
            select(Account)
            .join(TeamMember, TeamMember.account_id == Account.id)
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.position, TeamMember.id)
        ).all()
    )


def find_managed_teams(db: Session, manager_id: Any) -> list[Team]:
    (normalized,) = normalize_account_ids([manager_id])
    return list(
        db.scalars(
            select(Team)
            .where(Team.manager_id == normalized)
            .options(selectinload(Team.memberships).selectinload(TeamMember.account))
            .order_by(Team.id)
        ).all()
    )


def find_transactions(
    db: Session,
    kind: TransactionKind,
    window: ResolvedPeriod,
    account_ids: Iterable[Any] | None = None,
) -> list[Transaction]:
    if window.is_empty:
        return []
    stmt = select(Transaction).where(
        Transaction.kind == TransactionKind(kind),
        Transaction.occurred_on >= window.transaction_start,
        Transaction.occurred_on <= window.transaction_end,
    )
    if account_ids is not None:
        ids = normalize_account_ids(account_ids)
        if not ids:
            return []
        stmt = stmt.where(Transaction.owner_account_id.in_(ids))
    return list(db.scalars(stmt.order_by(Transaction.occurred_on, Transaction.id)).all())


def insert_targets(db: Session, records: Sequence[Target]) -> list[Target]:
    db.add_all(records)
    db.flush()
    return list(records)


def _period_condition(periods: Sequence[Period]):
    """Match targets whose (month, year) is in ``periods``.

    Contiguous runs, which is every resolved window, become one range check
    on the month index so the statement size does not grow with the window.
    """
    if not periods:
        return false()
    indexes = sorted({period_index(period) for period in periods})
    if indexes[-1] - indexes[0] + 1 == len(indexes):
        return (Target.year * 12 + Target.month).between(indexes[0], indexes[-1])
    return or_(*(and_(Target.month == month, Target.year == year) for month, year in periods))


def find_targets(db: Session, query: TargetQuery) -> list[Target]:
    conditions = []
    if query.month is not None:
        conditions.append(Target.month == query.month)
    if query.year is not None:
        conditions.append(Target.year == query.year)
    if query.periods is not None:
        conditions.append(_period_condition(query.periods))
    if query.target_type is not None:
        conditions.append(Target.target_type == TransactionKind(query.target_type))
    if query.assigned_to_kind is not None:
        conditions.append(Target.assigned_to_kind == RecipientKind(query.assigned_to_kind))
    if query.assigned_to_ids is not None:
        conditions.append(Target.assigned_to_id.in_(normalize_account_ids(query.assigned_to_ids)))
    if query.created_for_ids is not None:
        conditions.append(Target.created_for_id.in_(normalize_account_ids(query.created_for_ids)))

    stmt = select(Target).where(*conditions).order_by(Target.year, Target.month, Target.id)
    return list(db.scalars(stmt).all())


def get_target_or_404(db: Session, target_id: int) -> Target:
    target = db.get(Target, target_id)
    if target is None:
        raise NotFound(f"Target {target_id} not found.")
    return target


def update_target(db: Session, target: Target, patch: dict[str, Any]) -> Target:
    for field_name, value in patch.items():
        setattr(target, field_name, value)
    db.flush()
    return target


def delete_target(db: Session, target: Target) -> None:
    db.delete(target)
    db.flush()
