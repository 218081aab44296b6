from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.account import Account
from app.models.client import Client
from app.models.enums import PermissionLevel, RecipientKind, RoleName, TransactionKind
from app.models.target import Target
from app.models.team import Team, TeamMember
from app.models.transaction import Transaction
from app.services.allocation import AllocationRequest, allocate_targets
from app.utils.decimal_math import money


logger = logging.getLogger("targettrack.seed")

HISTORY_MONTHS = 6


def _get_or_create_account(
    db: Session,
    *,
    email: str,
    name: str,
    role: RoleName,
    permission_level: PermissionLevel,
) -> Account:
    account = db.scalar(select(Account).where(Account.email == email))
    if account is not None:
        return account

    account = Account(
        email=email,
        name=name,
        role=role,
        permission_level=permission_level,
        is_active=True,
    )
    db.add(account)
    db.flush()
    return account


def _get_or_create_team(db: Session, *, name: str, manager: Account, created_by: Account) -> Team:
    team = db.scalar(select(Team).where(Team.name == name))
    if team is not None:
        return team

    team = Team(name=name, manager_id=manager.id, created_by_id=created_by.id)
    db.add(team)
    db.flush()
    return team


def _ensure_team_member(db: Session, *, team: Team, account: Account, position: int) -> None:
    exists = db.scalar(
        select(TeamMember.id).where(
            TeamMember.team_id == team.id,
            TeamMember.account_id == account.id,
        )
    )
    if exists is None:
        db.add(TeamMember(team_id=team.id, account_id=account.id, position=position))


def _get_or_create_client(db: Session, *, name: str, email: str) -> Client:
    client = db.scalar(select(Client).where(Client.email == email))
    if client is not None:
        return client

    client = Client(name=name, email=email)
    db.add(client)
    db.flush()
    return client


def _recent_periods(today: date, count: int) -> list[tuple[int, int]]:
    periods: list[tuple[int, int]] = []
    month, year = today.month, today.year
    for _ in range(count):
        periods.append((month, year))
        month -= 1
        if month == 0:
            month, year = 12, year - 1
    return list(reversed(periods))


def _seed_transactions(
    db: Session,
    *,
    accounts: list[Account],
    clients: list[Client],
    periods: list[tuple[int, int]],
) -> None:
    for month, year in periods:
        seed = year * 100 + month
        for index, account in enumerate(accounts):
            client = clients[(seed + index) % len(clients)]
            sale_amount = money(Decimal("1800") + Decimal((seed + index) % 7) * Decimal("350"))
            order_amount = money(Decimal("900") + Decimal((seed + index) % 5) * Decimal("220"))
            db.add_all(
                [
                    Transaction(
                        kind=TransactionKind.sales,
                        owner_account_id=account.id,
                        client_id=client.id,
                        client_name=client.name,
                        amount=sale_amount,
                        quantity=3 + (seed + index) % 4,
                        sourcing_cost=money(sale_amount * Decimal("0.55")),
                        occurred_on=date(year, month, 5 + index),
                    ),
                    Transaction(
                        kind=TransactionKind.order,
                        owner_account_id=account.id,
                        client_id=client.id,
                        client_name=client.name,
                        amount=order_amount,
                        quantity=2 + (seed + index) % 3,
                        sourcing_cost=money(order_amount * Decimal("0.6")),
                        occurred_on=date(year, month, 15 + index),
                    ),
                ]
            )


def seed_demo_data(db: Session, *, today: date | None = None) -> None:
    """Populate an empty database with a small team and six months of activity."""
    if db.scalar(select(Target.id).limit(1)) is not None:
        logger.info("Targets already present; skipping demo seed.")
        return

    admin = _get_or_create_account(
        db,
        email="admin@targettrack.local",
        name="Administrator",
        role=RoleName.admin,
        permission_level=PermissionLevel.all_permissions,
    )
    manager = _get_or_create_account(
        db,
        email="manager@targettrack.local",
        name="Amina Team Lead",
        role=RoleName.team_manager,
        permission_level=PermissionLevel.all_permissions,
    )
    staff = [
        _get_or_create_account(
            db,
            email="brian@targettrack.local",
            name="Brian Sales",
            role=RoleName.employee,
            permission_level=PermissionLevel.sales,
        ),
        _get_or_create_account(
            db,
            email="carol@targettrack.local",
            name="Carol Orders",
            role=RoleName.employee,
            permission_level=PermissionLevel.orders,
        ),
        _get_or_create_account(
            db,
            email="dennis@targettrack.local",
            name="Dennis Generalist",
            role=RoleName.employee,
            permission_level=PermissionLevel.sales_and_orders,
        ),
    ]

    team = _get_or_create_team(db, name="Field Team", manager=manager, created_by=admin)
    for position, account in enumerate(staff):
        _ensure_team_member(db, team=team, account=account, position=position)
    db.flush()
    db.refresh(team)

    clients = [
        _get_or_create_client(db, name="Kijani Traders", email="orders@kijani.example"),
        _get_or_create_client(db, name="Lakeside Supplies", email="buying@lakeside.example"),
        _get_or_create_client(db, name="Mosaic Retail", email="ops@mosaic.example"),
    ]

    periods = _recent_periods(today or date.today(), HISTORY_MONTHS)
    _seed_transactions(db, accounts=staff, clients=clients, periods=periods)

    for month, year in periods:
        for kind, amount in ((TransactionKind.sales, "9000"), (TransactionKind.order, "4500")):
            allocate_targets(
                db,
                AllocationRequest(
                    recipient_kind=RecipientKind.team,
                    recipient_id=team.id,
                    target_type=kind,
                    amount=Decimal(amount),
                    quantity=10,
                    month=month,
                    year=year,
                    created_by_id=admin.id,
                    divide_among_members=True,
                ),
            )

    db.commit()
    logger.info("Seeded demo data for %s periods", len(periods))
