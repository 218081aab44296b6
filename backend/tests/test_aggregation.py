from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.db.base import Base
from app.models.account import Account
from app.models.enums import PermissionLevel, TransactionKind
from app.models.transaction import Transaction
from app.services.aggregation import (
    aggregate_grand_total,
    aggregate_monthly,
    aggregate_totals,
    summarize_grand_total,
    summarize_monthly,
    summarize_totals,
)
from app.services.periods import PeriodFilter, resolve_period
from app.utils.decimal_math import money
from app.utils.identifiers import normalize_account_id, normalize_account_ids


def _session() -> Session:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)()


def _row(owner: int, amount: str, quantity: int, day: date) -> SimpleNamespace:
    return SimpleNamespace(owner_account_id=owner, amount=money(amount), quantity=quantity, occurred_on=day)


def test_summaries_group_by_owner_and_month() -> None:
    rows = [
        _row(1, "100.10", 2, date(2024, 2, 3)),
        _row(2, "50.00", 1, date(2024, 1, 9)),
        _row(1, "0.40", 3, date(2024, 1, 30)),
    ]
    totals = summarize_totals(rows)
    assert totals[1].amount == money("100.50")
    assert totals[1].quantity == 5
    assert totals[1].count == 2
    assert 3 not in totals

    grand = summarize_grand_total(rows)
    assert grand.amount == money("150.50")
    assert grand.count == 3

    monthly = summarize_monthly(rows)
    assert [(row.month, row.year) for row in monthly] == [(1, 2024), (2, 2024)]
    assert monthly[0].amount == money("50.40")
    assert monthly[0].account_id is None

    per_account = summarize_monthly(rows, per_account=True)
    assert [(row.account_id, row.month) for row in per_account] == [(1, 1), (2, 1), (1, 2)]


def test_summaries_of_nothing_are_zero() -> None:
    assert summarize_totals([]) == {}
    assert summarize_grand_total([]).amount == money(0)
    assert summarize_monthly([]) == []


@pytest.mark.parametrize(
    ("value", "expected"),
    [(5, 5), ("12", 12), (" 7 ", 7), ({"id": 3}, 3), ({"value": "9"}, 9), (SimpleNamespace(id=4), 4)],
)
def test_account_id_shapes_normalize_to_int(value, expected: int) -> None:
    assert normalize_account_id(value) == expected


@pytest.mark.parametrize("value", [True, "abc", {"name": "x"}, 1.5, None])
def test_unsupported_account_ids_are_rejected(value) -> None:
    with pytest.raises(ValueError):
        normalize_account_id(value)


def test_normalize_account_ids_dedupes_mixed_shapes() -> None:
    assert normalize_account_ids([1, "1", {"id": 2}, SimpleNamespace(id=2), "3"]) == [1, 2, 3]


def test_aggregate_reads_window_and_mixed_id_shapes() -> None:
    db = _session()
    first = Account(email="a@test.com", name="Ann", permission_level=PermissionLevel.sales)
    second = Account(email="b@test.com", name="Ben", permission_level=PermissionLevel.sales)
    db.add_all([first, second])
    db.flush()
    db.add_all(
        [
            Transaction(kind=TransactionKind.sales, owner_account_id=first.id, amount=money("10.00"), quantity=1,
                        occurred_on=date(2024, 3, 1)),
            Transaction(kind=TransactionKind.sales, owner_account_id=second.id, amount=money("20.00"), quantity=2,
                        occurred_on=date(2024, 3, 31)),
            Transaction(kind=TransactionKind.order, owner_account_id=first.id, amount=money("99.00"), quantity=9,
                        occurred_on=date(2024, 3, 15)),
            Transaction(kind=TransactionKind.sales, owner_account_id=first.id, amount=money("5.00"), quantity=1,
                        occurred_on=date(2024, 4, 1)),
        ]
    )
    db.flush()

    march = resolve_period(PeriodFilter(month=3, year=2024))
    totals = aggregate_totals(db, TransactionKind.sales, march, [str(first.id), {"id": second.id}])
    assert totals[first.id].amount == money("10.00")
    assert totals[second.id].quantity == 2

    only_first = aggregate_totals(db, TransactionKind.sales, march, [{"value": first.id}])
    assert set(only_first) == {first.id}

    grand = aggregate_grand_total(db, TransactionKind.sales, march)
    assert grand.amount == money("30.00")
    assert grand.count == 2

    spring = resolve_period(PeriodFilter(start_month=3, start_year=2024, end_month=4, end_year=2024))
    monthly = aggregate_monthly(db, TransactionKind.sales, spring)
    assert [(row.month, row.amount) for row in monthly] == [(3, money("30.00")), (4, money("5.00"))]


def test_inverted_window_and_empty_ids_read_nothing() -> None:
    db = _session()
    account = Account(email="a@test.com", name="Ann", permission_level=PermissionLevel.sales)
    db.add(account)
    db.flush()
    db.add(Transaction(kind=TransactionKind.sales, owner_account_id=account.id, amount=money("10.00"),
                       quantity=1, occurred_on=date(2024, 3, 5)))
    db.flush()

    inverted = resolve_period(PeriodFilter(start_month=6, start_year=2024, end_month=1, end_year=2024))
    assert aggregate_totals(db, TransactionKind.sales, inverted) == {}
    march = resolve_period(PeriodFilter(month=3, year=2024))
    assert aggregate_totals(db, TransactionKind.sales, march, []) == {}
