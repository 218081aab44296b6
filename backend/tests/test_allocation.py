from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import AllocationFailed, EmptyTeam, IneligibleRecipient, NoEligibleMembers, NotFound
from app.db.base import Base
from app.models.account import Account
from app.models.enums import PermissionLevel, RecipientKind, RoleName, TransactionKind
from app.models.target import Target
from app.models.team import Team, TeamMember
from app.services import allocation as allocation_service
from app.services.allocation import AllocationRequest, allocate_targets, plan_allocation
from app.utils.decimal_math import money


def _session() -> Session:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)()


def _request(**overrides) -> AllocationRequest:
    values = dict(
        recipient_kind=RecipientKind.team,
        recipient_id=1,
        target_type=TransactionKind.sales,
        amount=money("1000.00"),
        quantity=12,
        month=3,
        year=2024,
        created_by_id=99,
    )
    values.update(overrides)
    return AllocationRequest(**values)


def _members(*ids: int) -> list[SimpleNamespace]:
    return [
        SimpleNamespace(id=account_id, name=f"Member {account_id}", permission_level=PermissionLevel.sales)
        for account_id in ids
    ]


def test_divided_amount_is_split_evenly_and_quantity_is_not() -> None:
    drafts = plan_allocation(_members(1, 2, 3), _request(divide_among_members=True))
    assert [draft.account_id for draft in drafts] == [1, 2, 3]
    assert all(draft.amount == money("333.33") for draft in drafts)
    assert all(draft.quantity == 12 for draft in drafts)
    assert all(draft.original_total == money("1000.00") for draft in drafts)
    assert all(draft.member_count == 3 for draft in drafts)


@pytest.mark.parametrize("member_count", [2, 3, 6, 7, 9, 11])
@pytest.mark.parametrize("amount", ["1000.00", "0.10", "99.99", "12345.67"])
def test_divided_shares_sum_to_total_within_half_cent_per_member(member_count: int, amount: str) -> None:
    total = money(amount)
    drafts = plan_allocation(
        _members(*range(1, member_count + 1)),
        _request(amount=total, divide_among_members=True),
    )
    shares = [draft.amount for draft in drafts]
    assert len(set(shares)) == 1
    assert abs(sum(shares) - total) <= Decimal("0.005") * member_count


def test_seven_way_split_of_a_thousand_drifts_by_two_cents() -> None:
    drafts = plan_allocation(_members(*range(1, 8)), _request(divide_among_members=True))
    assert all(draft.amount == money("142.86") for draft in drafts)
    assert sum(draft.amount for draft in drafts) == money("1000.02")
    assert all(draft.original_total == money("1000.00") for draft in drafts)


def test_undivided_amount_goes_to_every_member() -> None:
    drafts = plan_allocation(_members(4, 5), _request())
    assert [draft.amount for draft in drafts] == [money("1000.00"), money("1000.00")]
    assert all(draft.original_total is None and draft.member_count is None for draft in drafts)


def test_created_for_narrows_to_one_member_before_dividing() -> None:
    drafts = plan_allocation(_members(1, 2, 3), _request(divide_among_members=True, created_for_id=2))
    assert len(drafts) == 1
    assert drafts[0].account_id == 2
    assert drafts[0].amount == money("1000.00")
    assert drafts[0].member_count == 1


def test_created_for_outside_eligible_list_keeps_everyone() -> None:
    drafts = plan_allocation(_members(1, 2), _request(created_for_id=42))
    assert [draft.account_id for draft in drafts] == [1, 2]


def test_half_cent_share_rounds_half_up() -> None:
    drafts = plan_allocation(_members(1, 2), _request(amount=money("0.01"), divide_among_members=True))
    assert [draft.amount for draft in drafts] == [money("0.01"), money("0.01")]


def test_plan_rejects_negative_values_and_handles_empty_list() -> None:
    assert plan_allocation([], _request()) == []
    with pytest.raises(ValueError):
        plan_allocation(_members(1), _request(amount=Decimal("-1")))
    with pytest.raises(ValueError):
        plan_allocation(_members(1), _request(quantity=-1))


def test_draft_model_targets_the_account() -> None:
    (draft,) = plan_allocation(_members(8), _request())
    target = draft.to_model()
    assert target.assigned_to_kind == RecipientKind.account
    assert target.assigned_to_id == 8
    assert target.created_for_id == 8
    assert target.account_id == 8


def _team_with_mixed_members(db: Session) -> Team:
    accounts = [
        Account(email="a@test.com", name="Ann", role=RoleName.employee, permission_level=PermissionLevel.sales),
        Account(email="b@test.com", name="Ben", role=RoleName.employee, permission_level=PermissionLevel.orders),
        Account(
            email="c@test.com",
            name="Cat",
            role=RoleName.employee,
            permission_level=PermissionLevel.sales_and_orders,
        ),
        Account(email="d@test.com", name="Dan", role=RoleName.employee, permission_level=PermissionLevel.orders),
    ]
    db.add_all(accounts)
    db.flush()
    team = Team(name="North")
    db.add(team)
    db.flush()
    db.add_all(
        [TeamMember(team_id=team.id, account_id=account.id, position=index) for index, account in enumerate(accounts)]
    )
    db.flush()
    db.expire(team)
    return team


def test_team_allocation_creates_one_record_per_eligible_member() -> None:
    db = _session()
    team = _team_with_mixed_members(db)

    created = allocate_targets(
        db,
        _request(recipient_id=team.id, amount=money("1000.00"), divide_among_members=True),
    )
    db.commit()

    names = {db.get(Account, target.created_for_id).name for target in created}
    assert names == {"Ann", "Cat"}
    assert all(target.amount == money("500.00") for target in created)
    assert all(target.assigned_to_kind == RecipientKind.account for target in created)
    assert all(target.assigned_to_id == target.created_for_id for target in created)
    assert all(target.member_count == 2 for target in created)
    assert db.scalar(select(func.count(Target.id))) == 2


def test_undivided_team_allocation_gives_each_eligible_member_the_full_amount() -> None:
    db = _session()
    team = _team_with_mixed_members(db)

    created = allocate_targets(db, _request(recipient_id=team.id, amount=money("1000.00")))
    assert len(created) == 2
    assert all(target.amount == money("1000.00") for target in created)
    assert all(target.original_total is None for target in created)
    assert all(target.quantity == 12 for target in created)


def test_team_without_eligible_members_writes_nothing() -> None:
    db = _session()
    account = Account(email="o@test.com", name="Olive", permission_level=PermissionLevel.orders)
    team = Team(name="Orders Desk")
    db.add_all([account, team])
    db.flush()
    db.add(TeamMember(team_id=team.id, account_id=account.id, position=0))
    db.flush()

    with pytest.raises(NoEligibleMembers):
        allocate_targets(db, _request(recipient_id=team.id, target_type=TransactionKind.sales))
    assert db.scalar(select(func.count(Target.id))) == 0


def test_single_account_allocation() -> None:
    db = _session()
    account = Account(email="o@test.com", name="Olive", permission_level=PermissionLevel.orders)
    db.add(account)
    db.flush()

    created = allocate_targets(
        db,
        _request(
            recipient_kind=RecipientKind.account,
            recipient_id=account.id,
            target_type=TransactionKind.order,
            divide_among_members=True,
        ),
    )
    assert len(created) == 1
    assert created[0].amount == money("1000.00")
    assert created[0].member_count == 1


def test_ineligible_account_writes_nothing() -> None:
    db = _session()
    account = Account(email="o@test.com", name="Olive", permission_level=PermissionLevel.orders)
    db.add(account)
    db.flush()

    with pytest.raises(IneligibleRecipient):
        allocate_targets(db, _request(recipient_kind=RecipientKind.account, recipient_id=account.id))
    assert db.scalar(select(func.count(Target.id))) == 0


def test_unknown_recipients_raise_not_found() -> None:
    db = _session()
    with pytest.raises(NotFound):
        allocate_targets(db, _request(recipient_kind=RecipientKind.team, recipient_id=404))
    with pytest.raises(NotFound):
        allocate_targets(db, _request(recipient_kind=RecipientKind.account, recipient_id=404))


def test_empty_team_raises() -> None:
    db = _session()
    team = Team(name="Ghost")
    db.add(team)
    db.flush()
    with pytest.raises(EmptyTeam):
        allocate_targets(db, _request(recipient_id=team.id))


def test_failed_insert_rolls_back_and_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    db = _session()
    team = _team_with_mixed_members(db)
    db.commit()

    def _broken_insert(session: Session, records: list[Target]) -> list[Target]:
        session.add_all(records)
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(allocation_service, "insert_targets", _broken_insert)
    with pytest.raises(AllocationFailed):
        allocate_targets(db, _request(recipient_id=team.id, divide_among_members=True))
    assert db.scalar(select(func.count(Target.id))) == 0
