"""Joins target totals with actual totals and computes achievement.

Percentages use a fixed zero-target policy: a missing or zero target gives 0%,
never a division error.
"""
from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from app.services.aggregation import ActualTotals, MonthlyActual, zero_totals
from app.services.periods import Period, month_name
from app.utils.decimal_math import money, pct, whole


class TargetRow(Protocol):
    id: int
    amount: Decimal
    quantity: int
    month: int
    year: int

    @property
    def account_id(self) -> int | None: ...


class NamedAccount(Protocol):
    id: int
    name: str


@dataclass
class TargetTotals:
    amount: Decimal
    quantity: int


@dataclass(frozen=True)
class AccountPerformanceRow:
    account_id: int
    account_name: str
    actual_amount: Decimal
    actual_qty: int
    target_amount: Decimal
    target_qty: int
    performance_amount: str
    performance_qty: str


@dataclass(frozen=True)
class MonthlyPerformanceRow:
    month: int
    year: int
    name: str
    actual: Decimal
    actual_qty: int
    target: Decimal
    target_qty: int
    performance: int
    account_id: int | None = None


def by_account(target: TargetRow) -> int | None:
    return target.account_id


def by_account_period(target: TargetRow) -> tuple[int | None, int, int] | None:
    if target.account_id is None:
        return None
    return (target.account_id, target.month, target.year)


def by_period(target: TargetRow) -> Period:
    return Period(target.month, target.year)


def sum_targets(
    targets: Iterable[TargetRow],
    key: Callable[[TargetRow], Hashable | None] = by_account,
) -> dict[Hashable, TargetTotals]:
    """Sum every target record that maps to the same grouping key.

    Records without a key (e.g. legacy team-level rows when grouping by
    account) are skipped.
    """
    totals: dict[Hashable, TargetTotals] = {}
    for target in targets:
        group = key(target)
        if group is None:
            continue
        bucket = totals.setdefault(group, TargetTotals(amount=money(0), quantity=0))
        bucket.amount = money(bucket.amount + money(target.amount))
        bucket.quantity += int(target.quantity or 0)
    return totals


def performance_pct(actual: Decimal | int, target: Decimal | int) -> Decimal:
    if Decimal(str(target)) <= 0:
        return pct(0)
    return pct(Decimal(str(actual)) / Decimal(str(target)) * Decimal("100"))


def performance_whole(actual: Decimal | int, target: Decimal | int) -> int:
    if Decimal(str(target)) <= 0:
        return 0
    return whole(Decimal(str(actual)) / Decimal(str(target)) * Decimal("100"))


def format_pct(value: Decimal) -> str:
    text = f"{pct(value):.2f}".rstrip("0").rstrip(".")
    return f"{text}%"


def has_activity(row: AccountPerformanceRow) -> bool:
    return row.target_amount > 0 or row.actual_amount > 0


def build_account_row(
    account: NamedAccount,
    target: TargetTotals | None,
    actual: ActualTotals | None,
) -> AccountPerformanceRow:
    target = target or TargetTotals(amount=money(0), quantity=0)
    actual = actual or zero_totals()
    return AccountPerformanceRow(
        account_id=account.id,
        account_name=account.name,
        actual_amount=money(actual.amount),
        actual_qty=actual.quantity,
        target_amount=money(target.amount),
        target_qty=target.quantity,
        performance_amount=format_pct(performance_pct(actual.amount, target.amount)),
        performance_qty=format_pct(performance_pct(actual.quantity, target.quantity)),
    )


def merge_account_rows(
    accounts: Sequence[NamedAccount],
    target_totals: Mapping[Hashable, TargetTotals],
    actual_totals: Mapping[int, ActualTotals],
    *,
    drop_empty: bool = True,
) -> list[AccountPerformanceRow]:
    rows = [
        build_account_row(account, target_totals.get(account.id), actual_totals.get(account.id))
        for account in accounts
    ]
    if drop_empty:
        rows = [row for row in rows if has_activity(row)]
    return rows


def merge_monthly_rows(
    target_totals: Mapping[Period, TargetTotals],
    actuals: Iterable[MonthlyActual],
    *,
    account_id: int | None = None,
) -> list[MonthlyPerformanceRow]:
    """One row per ``(month, year)`` present in either targets or actuals."""
    actual_by_period = {row.period: row for row in actuals}
    keys = sorted(
        {Period(*key) for key in target_totals} | set(actual_by_period),
        key=lambda item: (item.year, item.month),
    )

    rows: list[MonthlyPerformanceRow] = []
    for period in keys:
        target = target_totals.get(period) or TargetTotals(amount=money(0), quantity=0)
        actual = actual_by_period.get(period)
        actual_amount = money(actual.amount) if actual is not None else money(0)
        actual_qty = actual.quantity if actual is not None else 0
        rows.append(
            MonthlyPerformanceRow(
                month=period.month,
                year=period.year,
                name=month_name(period.month),
                actual=actual_amount,
                actual_qty=actual_qty,
                target=money(target.amount),
                target_qty=target.quantity,
                performance=performance_whole(actual_amount, target.amount),
                account_id=account_id,
            )
        )
    return rows


def merge_account_monthly_rows(
    accounts: Sequence[NamedAccount],
    target_totals: Mapping[Hashable, TargetTotals],
    actuals: Iterable[MonthlyActual],
) -> list[MonthlyPerformanceRow]:
    """Per-account, per-month rows from ``by_account_period`` target totals."""
    actual_rows = list(actuals)
    rows: list[MonthlyPerformanceRow] = []
    for account in accounts:
        account_targets = {
            Period(month, year): totals
            for (account_id, month, year), totals in target_totals.items()
            if account_id == account.id
        }
        account_actuals = [row for row in actual_rows if row.account_id == account.id]
        rows.extend(merge_monthly_rows(account_targets, account_actuals, account_id=account.id))
    return rows
