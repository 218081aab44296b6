from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy.orm import Session

from app.models.enums import TransactionKind
from app.services.periods import Period, ResolvedPeriod
from app.services.store import find_transactions
from app.utils.decimal_math import money


class TransactionRow(Protocol):
    owner_account_id: int
    amount: Decimal
    quantity: int
    occurred_on: date


@dataclass
class ActualTotals:
    amount: Decimal
    quantity: int
    count: int = 0


@dataclass(frozen=True)
class MonthlyActual:
    month: int
    year: int
    amount: Decimal
    quantity: int
    count: int
    account_id: int | None = None

    @property
    def period(self) -> Period:
        return Period(self.month, self.year)


def zero_totals() -> ActualTotals:
    return ActualTotals(amount=money(0), quantity=0, count=0)


def _add(totals: ActualTotals, row: TransactionRow) -> None:
    totals.amount = money(totals.amount + money(row.amount))
    totals.quantity += int(row.quantity or 0)
    totals.count += 1


def summarize_totals(rows: Iterable[TransactionRow]) -> dict[int, ActualTotals]:
    """Sum amount and quantity per owning account.

    Accounts without rows are absent from the result.
    """
    totals: dict[int, ActualTotals] = {}
    for row in rows:
        bucket = totals.setdefault(row.owner_account_id, zero_totals())
        _add(bucket, row)
    return totals


def summarize_grand_total(rows: Iterable[TransactionRow]) -> ActualTotals:
    totals = zero_totals()
    for row in rows:
        _add(totals, row)
    return totals


def summarize_monthly(rows: Iterable[TransactionRow], *, per_account: bool = False) -> list[MonthlyActual]:
    buckets: dict[tuple[int | None, int, int], ActualTotals] = {}
    for row in rows:
        key = (row.owner_account_id if per_account else None, row.occurred_on.month, row.occurred_on.year)
        _add(buckets.setdefault(key, zero_totals()), row)

    ordered = sorted(buckets.items(), key=lambda item: (item[0][2], item[0][1], item[0][0] or 0))
    return [
        MonthlyActual(
            month=month,
            year=year,
            amount=totals.amount,
            quantity=totals.quantity,
            count=totals.count,
            account_id=account_id,
        )
        for (account_id, month, year), totals in ordered
    ]


def aggregate_totals(
    db: Session,
    kind: TransactionKind,
    period: ResolvedPeriod,
    account_ids: Iterable[Any] | None = None,
) -> dict[int, ActualTotals]:
    return summarize_totals(find_transactions(db, kind, period, account_ids))


def aggregate_grand_total(db: Session, kind: TransactionKind, period: ResolvedPeriod) -> ActualTotals:
    return summarize_grand_total(find_transactions(db, kind, period))


def aggregate_monthly(
    db: Session,
    kind: TransactionKind,
    period: ResolvedPeriod,
    account_ids: Iterable[Any] | None = None,
    *,
    per_account: bool = False,
) -> list[MonthlyActual]:
    return summarize_monthly(find_transactions(db, kind, period, account_ids), per_account=per_account)
