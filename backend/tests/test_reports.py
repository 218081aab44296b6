from datetime import date

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from app.db.base import Base
from app.models.account import Account
from app.models.audit import AuditLog
from app.models.enums import PermissionLevel, RecipientKind, RoleName, TransactionKind
from app.models.target import Target
from app.models.team import Team, TeamMember
from app.models.transaction import Transaction
from app.services.allocation import AllocationRequest
from app.services.periods import Period, PeriodFilter
from app.services.reports import (
    account_monthly_performance,
    account_targets,
    all_accounts_monthly_performance,
    all_accounts_performance,
    kind_summary,
    list_targets,
    team_member_targets,
    team_performance,
)
from app.services.store import TargetQuery, find_targets
from app.services.targets import create_targets
from app.utils.decimal_math import money


MARCH = PeriodFilter(month=3, year=2024)


def _session() -> Session:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)()


def _seed(db: Session) -> dict[str, object]:
    admin = Account(email="admin@test.com", name="Admin", role=RoleName.admin,
                    permission_level=PermissionLevel.all_permissions)
    manager = Account(email="lead@test.com", name="Lead", role=RoleName.team_manager,
                      permission_level=PermissionLevel.all_permissions)
    ann = Account(email="ann@test.com", name="Ann", permission_level=PermissionLevel.sales)
    ben = Account(email="ben@test.com", name="Ben", permission_level=PermissionLevel.orders)
    cat = Account(email="cat@test.com", name="Cat", permission_level=PermissionLevel.sales_and_orders)
    db.add_all([admin, manager, ann, ben, cat])
    db.flush()

    team = Team(name="North", manager_id=manager.id, created_by_id=admin.id)
    db.add(team)
    db.flush()
    db.add_all(
        [
            TeamMember(team_id=team.id, account_id=ann.id, position=0),
            TeamMember(team_id=team.id, account_id=ben.id, position=1),
            TeamMember(team_id=team.id, account_id=cat.id, position=2),
        ]
    )
    db.flush()

    create_targets(
        db,
        AllocationRequest(
            recipient_kind=RecipientKind.team,
            recipient_id=team.id,
            target_type=TransactionKind.sales,
            amount=money("900.00"),
            quantity=10,
            month=3,
            year=2024,
            created_by_id=admin.id,
            divide_among_members=True,
        ),
        actor=admin,
    )
    db.add_all(
        [
            Transaction(kind=TransactionKind.sales, owner_account_id=ann.id, amount=money("300.00"), quantity=2,
                        occurred_on=date(2024, 3, 10)),
            Transaction(kind=TransactionKind.sales, owner_account_id=cat.id, amount=money("450.00"), quantity=5,
                        occurred_on=date(2024, 3, 20)),
            Transaction(kind=TransactionKind.sales, owner_account_id=ann.id, amount=money("100.00"), quantity=1,
                        occurred_on=date(2024, 4, 2)),
        ]
    )
    db.commit()
    return {"admin": admin, "manager": manager, "ann": ann, "ben": ben, "cat": cat, "team": team}


def test_create_targets_writes_audit_rows() -> None:
    db = _session()
    _seed(db)
    actions = db.scalars(select(AuditLog.action)).all()
    assert actions == ["target.create", "target.create"]


def test_all_accounts_performance_lists_only_active_rows() -> None:
    db = _session()
    seeded = _seed(db)

    rows = all_accounts_performance(db, TransactionKind.sales, MARCH)
    by_name = {row.account_name: row for row in rows}
    assert set(by_name) == {"Ann", "Cat"}
    assert by_name["Ann"].actual_amount == money("300.00")
    assert by_name["Ann"].target_amount == money("450.00")
    assert by_name["Ann"].performance_amount == "66.67%"
    assert by_name["Ann"].performance_qty == "20%"
    assert by_name["Cat"].performance_amount == "100%"
    assert by_name["Cat"].account_id == seeded["cat"].id


def test_team_performance_for_manager() -> None:
    db = _session()
    seeded = _seed(db)

    report = team_performance(db, seeded["manager"].id, TransactionKind.sales, MARCH)
    assert {row.account_name for row in report.members} == {"Ann", "Cat"}
    assert len(report.monthly) == 1
    march = report.monthly[0]
    assert march.name == "March"
    assert march.target == money("900.00")
    assert march.target_qty == 20
    assert march.actual == money("750.00")
    assert march.performance == 83


def test_team_performance_without_managed_team_is_empty() -> None:
    db = _session()
    seeded = _seed(db)
    report = team_performance(db, seeded["ann"].id, TransactionKind.sales, MARCH)
    assert report.members == []
    assert report.monthly == []


def test_account_monthly_performance_across_range() -> None:
    db = _session()
    seeded = _seed(db)

    rows = account_monthly_performance(
        db,
        seeded["ann"].id,
        TransactionKind.sales,
        PeriodFilter(start_month=3, start_year=2024, end_month=4, end_year=2024),
    )
    assert [(row.month, row.actual, row.target, row.performance) for row in rows] == [
        (3, money("300.00"), money("450.00"), 67),
        (4, money("100.00"), money(0), 0),
    ]
    assert all(row.account_id == seeded["ann"].id for row in rows)


def test_kind_summary() -> None:
    db = _session()
    _seed(db)

    summary = kind_summary(db, TransactionKind.sales, MARCH)
    assert summary.period == "3/2024"
    assert summary.transaction_count == 2
    assert summary.actual_amount == money("750.00")
    assert summary.actual_qty == 7
    assert summary.target_amount == money("900.00")
    assert summary.target_qty == 20
    assert summary.performance_amount == "83.33%"
    assert summary.performance_qty == "35%"

    orders = kind_summary(db, TransactionKind.order, MARCH)
    assert orders.transaction_count == 0
    assert orders.performance_amount == "0%"


def test_account_targets_reach_direct_and_team_records_once() -> None:
    db = _session()
    seeded = _seed(db)
    ann, ben, team = seeded["ann"], seeded["ben"], seeded["team"]
    db.add_all(
        [
            Target(assigned_to_kind=RecipientKind.account, assigned_to_id=ann.id, target_type=TransactionKind.sales,
                   amount=money("50.00"), quantity=1, month=5, year=2024),
            Target(assigned_to_kind=RecipientKind.team, assigned_to_id=team.id, target_type=TransactionKind.order,
                   amount=money("70.00"), quantity=1, month=5, year=2024, created_for_id=ben.id),
        ]
    )
    db.commit()

    ann_targets = account_targets(db, ann.id)
    assert len(ann_targets) == 2
    assert len({target.id for target in ann_targets}) == 2

    ben_targets = account_targets(db, str(ben.id))
    assert [target.assigned_to_kind for target in ben_targets] == [RecipientKind.team]


def test_team_member_targets_and_listing() -> None:
    db = _session()
    seeded = _seed(db)

    assert len(team_member_targets(db, seeded["manager"].id, PeriodFilter())) == 2
    assert team_member_targets(db, seeded["manager"].id, PeriodFilter(month=4, year=2024)) == []
    assert team_member_targets(db, seeded["ann"].id, PeriodFilter()) == []

    assert len(list_targets(db, PeriodFilter())) == 2
    assert len(list_targets(db, MARCH, TransactionKind.sales)) == 2
    assert list_targets(db, MARCH, TransactionKind.order) == []


def test_all_accounts_monthly_trend() -> None:
    db = _session()
    _seed(db)

    rows = all_accounts_monthly_performance(
        db,
        TransactionKind.sales,
        PeriodFilter(start_month=3, start_year=2024, end_month=4, end_year=2024),
    )
    assert [(row.name, row.target, row.actual, row.performance) for row in rows] == [
        ("March", money("900.00"), money("750.00"), 83),
        ("April", money(0), money("100.00"), 0),
    ]
    assert all(row.account_id is None for row in rows)


def test_century_long_range_reads_every_target() -> None:
    db = _session()
    _seed(db)

    rows = all_accounts_performance(
        db,
        TransactionKind.sales,
        PeriodFilter(start_month=1, start_year=2000, end_month=12, end_year=2100),
    )
    by_name = {row.account_name: row for row in rows}
    assert by_name["Ann"].actual_amount == money("400.00")
    assert by_name["Ann"].target_amount == money("450.00")
    assert by_name["Ann"].performance_amount == "88.89%"

    monthly = all_accounts_monthly_performance(
        db,
        TransactionKind.sales,
        PeriodFilter(start_month=1, start_year=1900, end_month=12, end_year=2200),
    )
    assert [row.month for row in monthly] == [3, 4]


def test_find_targets_with_scattered_periods() -> None:
    db = _session()
    _seed(db)

    hit = find_targets(db, TargetQuery(periods=[Period(1, 2024), Period(3, 2024)]))
    assert len(hit) == 2
    assert find_targets(db, TargetQuery(periods=[Period(2, 2024), Period(4, 2024)])) == []
    assert find_targets(db, TargetQuery(periods=[])) == []
