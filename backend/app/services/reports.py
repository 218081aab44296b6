from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models.account import Account
from app.models.enums import RecipientKind, TransactionKind
from app.models.target import Target
from app.services.aggregation import aggregate_grand_total, aggregate_monthly, aggregate_totals
from app.services.dedup import dedupe_targets
from app.services.eligibility import eligible_permission_levels, is_eligible
from app.services.performance import (
    AccountPerformanceRow,
    MonthlyPerformanceRow,
    by_account_period,
    by_period,
    format_pct,
    merge_account_monthly_rows,
    merge_account_rows,
    merge_monthly_rows,
    performance_pct,
    sum_targets,
)
from app.services.periods import DefaultWindow, PeriodFilter, ResolvedPeriod, resolve_period
from app.services.store import (
    TargetQuery,
    find_accounts_by_eligibility,
    find_managed_teams,
    find_targets,
    get_account_or_404,
)
from app.utils.decimal_math import money


logger = logging.getLogger("targettrack.reports")


@dataclass(frozen=True)
class TeamPerformanceReport:
    members: list[AccountPerformanceRow]
    monthly: list[MonthlyPerformanceRow]


@dataclass(frozen=True)
class KindSummary:
    period: str
    transaction_count: int
    actual_amount: Decimal
    actual_qty: int
    target_amount: Decimal
    target_qty: int
    performance_amount: str
    performance_qty: str


def _targets_for_accounts(
    db: Session,
    account_ids: list[int],
    *,
    target_type: TransactionKind | None,
    period: ResolvedPeriod | None,
) -> list[Target]:
    """Targets reaching the accounts directly or through a team allocation."""
    periods = period.periods if period is not None else None
    direct = find_targets(
        db,
        TargetQuery(
            periods=periods,
            target_type=target_type,
            assigned_to_kind=RecipientKind.account,
            assigned_to_ids=account_ids,
        ),
    )
    created_for = find_targets(
        db,
        TargetQuery(periods=periods, target_type=target_type, created_for_ids=account_ids),
    )
    return dedupe_targets(direct, created_for)


def _managed_member_ids(db: Session, manager_id: int) -> tuple[list[int], list[Account]]:
    members: list[Account] = []
    seen: set[int] = set()
    teams = find_managed_teams(db, manager_id)
    for team in teams:
        for member in team.members:
            if member.id in seen:
                continue
            seen.add(member.id)
            members.append(member)
    logger.info(
        "Manager %s manages %s teams with %s unique members", manager_id, len(teams), len(members)
    )
    return [member.id for member in members], members


def all_accounts_performance(
    db: Session,
    kind: TransactionKind,
    filters: PeriodFilter,
) -> list[AccountPerformanceRow]:
    period = resolve_period(filters, DefaultWindow.year)
    accounts = find_accounts_by_eligibility(db, eligible_permission_levels(kind))
    actuals = aggregate_totals(db, kind, period)
    targets = dedupe_targets(
        find_targets(
            db,
            TargetQuery(periods=period.periods, target_type=kind, assigned_to_kind=RecipientKind.account),
        )
    )
    rows = merge_account_rows(accounts, sum_targets(targets), actuals)
    logger.info(
        "%s report for %s accounts: %s targets, %s rows",
        TransactionKind(kind).value,
        len(accounts),
        len(targets),
        len(rows),
    )
    return rows


def all_accounts_monthly_performance(
    db: Session,
    kind: TransactionKind,
    filters: PeriodFilter,
) -> list[MonthlyPerformanceRow]:
    """Company-wide trend: one row per month across every account."""
    period = resolve_period(filters, DefaultWindow.year)
    actuals = aggregate_monthly(db, kind, period)
    targets = dedupe_targets(find_targets(db, TargetQuery(periods=period.periods, target_type=kind)))
    return merge_monthly_rows(sum_targets(targets, key=by_period), actuals)


def team_performance(
    db: Session,
    manager_id: int,
    kind: TransactionKind,
    filters: PeriodFilter,
) -> TeamPerformanceReport:
    member_ids, members = _managed_member_ids(db, manager_id)
    if not member_ids:
        return TeamPerformanceReport(members=[], monthly=[])

    period = resolve_period(filters, DefaultWindow.year)
    eligible = [member for member in members if is_eligible(member, kind)]
    actuals = aggregate_totals(db, kind, period, member_ids)
    monthly_actuals = aggregate_monthly(db, kind, period, member_ids)
    targets = _targets_for_accounts(db, member_ids, target_type=kind, period=period)

    return TeamPerformanceReport(
        members=merge_account_rows(eligible, sum_targets(targets), actuals),
        monthly=merge_monthly_rows(sum_targets(targets, key=by_period), monthly_actuals),
    )


def account_monthly_performance(
    db: Session,
    account_id: int,
    kind: TransactionKind,
    filters: PeriodFilter,
) -> list[MonthlyPerformanceRow]:
    account = get_account_or_404(db, account_id)
    period = resolve_period(filters, DefaultWindow.month)
    actuals = aggregate_monthly(db, kind, period, [account.id], per_account=True)
    targets = _targets_for_accounts(db, [account.id], target_type=kind, period=period)
    return merge_account_monthly_rows([account], sum_targets(targets, key=by_account_period), actuals)


def kind_summary(db: Session, kind: TransactionKind, filters: PeriodFilter) -> KindSummary:
    period = resolve_period(filters, DefaultWindow.month)
    actual = aggregate_grand_total(db, kind, period)
    targets = dedupe_targets(find_targets(db, TargetQuery(periods=period.periods, target_type=kind)))
    target_amount = money(sum((money(target.amount) for target in targets), money(0)))
    target_qty = sum(int(target.quantity or 0) for target in targets)
    return KindSummary(
        period=filters.label or "Current Month",
        transaction_count=actual.count,
        actual_amount=actual.amount,
        actual_qty=actual.quantity,
        target_amount=target_amount,
        target_qty=target_qty,
        performance_amount=format_pct(performance_pct(actual.amount, target_amount)),
        performance_qty=format_pct(performance_pct(actual.quantity, target_qty)),
    )


def account_targets(db: Session, account_id: int) -> list[Target]:
    account = get_account_or_404(db, account_id)
    targets = _targets_for_accounts(db, [account.id], target_type=None, period=None)
    logger.info("Returning %s targets for account %s", len(targets), account.id)
    return targets


def team_member_targets(db: Session, manager_id: int, filters: PeriodFilter) -> list[Target]:
    member_ids, _ = _managed_member_ids(db, manager_id)
    if not member_ids:
        return []
    period = None if filters.is_empty() else resolve_period(filters)
    return _targets_for_accounts(db, member_ids, target_type=None, period=period)


def list_targets(db: Session, filters: PeriodFilter, target_type: TransactionKind | None = None) -> list[Target]:
    if filters.is_empty():
        return find_targets(db, TargetQuery(target_type=target_type))
    period = resolve_period(filters)
    return find_targets(db, TargetQuery(periods=period.periods, target_type=target_type))
