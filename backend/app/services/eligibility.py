from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from app.core.errors import EmptyTeam, IneligibleRecipient, NoEligibleMembers
from app.models.enums import PermissionLevel, TransactionKind


ELIGIBILITY: dict[TransactionKind, frozenset[PermissionLevel]] = {
    TransactionKind.sales: frozenset(
        {PermissionLevel.sales, PermissionLevel.sales_and_orders, PermissionLevel.all_permissions}
    ),
    TransactionKind.order: frozenset(
        {PermissionLevel.orders, PermissionLevel.sales_and_orders, PermissionLevel.all_permissions}
    ),
}

PERMISSION_LABEL = {
    TransactionKind.sales: "Sales",
    TransactionKind.order: "Orders",
}


class EligibleAccount(Protocol):
    id: int
    name: str
    permission_level: PermissionLevel


def eligible_permission_levels(target_type: TransactionKind) -> frozenset[PermissionLevel]:
    return ELIGIBILITY[TransactionKind(target_type)]


def is_eligible(account: EligibleAccount, target_type: TransactionKind) -> bool:
    return PermissionLevel(account.permission_level) in eligible_permission_levels(target_type)


def _unique_by_id(accounts: Iterable[EligibleAccount]) -> list[EligibleAccount]:
    seen: set[int] = set()
    rows: list[EligibleAccount] = []
    for account in accounts:
        if account.id in seen:
            continue
        seen.add(account.id)
        rows.append(account)
    return rows


def resolve_eligible_accounts(
    target_type: TransactionKind,
    *,
    account: EligibleAccount | None = None,
    team_members: Sequence[EligibleAccount] | None = None,
    team_name: str = "team",
) -> list[EligibleAccount]:
    """Accounts that may receive a ``target_type`` target from one recipient.

    Exactly one of ``account`` or ``team_members`` must be given. The result
    keeps the source order.
    """
    if (account is None) == (team_members is None):
        raise ValueError("Provide either an account or a team member list.")

    label = PERMISSION_LABEL[TransactionKind(target_type)]
    if account is not None:
        if not is_eligible(account, target_type):
            raise IneligibleRecipient(
                f"Account {account.name} does not have {label} permission required for this target type."
            )
        return [account]

    if not team_members:
        raise EmptyTeam(f"Cannot assign a target to {team_name}: it has no members.")
    eligible = [member for member in _unique_by_id(team_members) if is_eligible(member, target_type)]
    if not eligible:
        raise NoEligibleMembers(f"No members of {team_name} have the required {label} permission.")
    return eligible
