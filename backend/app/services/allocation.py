from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AllocationFailed
from app.models.enums import RecipientKind, TransactionKind
from app.models.target import Target
from app.services.eligibility import EligibleAccount, resolve_eligible_accounts
from app.services.store import find_team_members, get_account_or_404, get_team_or_404, insert_targets
from app.utils.decimal_math import money


logger = logging.getLogger("targettrack.allocation")


@dataclass(frozen=True)
class AllocationRequest:
    recipient_kind: RecipientKind
    recipient_id: int
    target_type: TransactionKind
    amount: Decimal
    quantity: int
    month: int
    year: int
    created_by_id: int | None = None
    divide_among_members: bool = False
    created_for_id: int | None = None


@dataclass(frozen=True)
class TargetDraft:
    account_id: int
    target_type: TransactionKind
    amount: Decimal
    quantity: int
    month: int
    year: int
    original_total: Decimal | None
    member_count: int | None
    created_by_id: int | None

    def to_model(self) -> Target:
        return Target(
            assigned_to_kind=RecipientKind.account,
            assigned_to_id=self.account_id,
            target_type=self.target_type,
            amount=self.amount,
            quantity=self.quantity,
            month=self.month,
            year=self.year,
            original_total=self.original_total,
            member_count=self.member_count,
            created_by_id=self.created_by_id,
            created_for_id=self.account_id,
        )


def _narrow(eligible: Sequence[EligibleAccount], created_for_id: int | None) -> list[EligibleAccount]:
    if created_for_id is None:
        return list(eligible)
    specific = [account for account in eligible if account.id == created_for_id]
    return specific or list(eligible)


def plan_allocation(
    eligible_accounts: Sequence[EligibleAccount],
    request: AllocationRequest,
) -> list[TargetDraft]:
    """One draft per eligible account; amount split evenly when dividing.

    Quantity is never divided. Divided shares are rounded to cents
    individually, so their sum can drift from the requested total by the
    rounding of each share.
    """
    if not eligible_accounts:
        return []
    if money(request.amount) < money(0):
        raise ValueError("amount must be >= 0.")
    if request.quantity < 0:
        raise ValueError("quantity must be >= 0.")

    recipients = _narrow(eligible_accounts, request.created_for_id)
    total = money(request.amount)

    if request.divide_among_members:
        member_count = len(recipients)
        amount_each = money(total / Decimal(member_count))
        original_total: Decimal | None = total
    else:
        member_count = None
        amount_each = total
        original_total = None

    return [
        TargetDraft(
            account_id=account.id,
            target_type=TransactionKind(request.target_type),
            amount=amount_each,
            quantity=request.quantity,
            month=request.month,
            year=request.year,
            original_total=original_total,
            member_count=member_count,
            created_by_id=request.created_by_id,
        )
        for account in recipients
    ]


def _eligible_for_request(db: Session, request: AllocationRequest) -> list[EligibleAccount]:
    if RecipientKind(request.recipient_kind) == RecipientKind.account:
        account = get_account_or_404(db, request.recipient_id)
        return resolve_eligible_accounts(request.target_type, account=account)

    team = get_team_or_404(db, request.recipient_id)
    members = find_team_members(db, team.id)
    logger.info("Team %s has %s members", team.name, len(members))
    return resolve_eligible_accounts(
        request.target_type,
        team_members=members,
        team_name=f"team {team.name}",
    )


def allocate_targets(db: Session, request: AllocationRequest) -> list[Target]:
    """Resolve, plan and insert the targets for one allocation request.

    Eligibility failures are raised before anything is written. A failed
    insert rolls the session back so no partial batch survives; the caller
    owns the commit.
    """
    logger.info(
        "Allocating %s target to %s %s: amount=%s qty=%s period=%s/%s divide=%s",
        TransactionKind(request.target_type).value,
        RecipientKind(request.recipient_kind).value,
        request.recipient_id,
        request.amount,
        request.quantity,
        request.month,
        request.year,
        request.divide_among_members,
    )
    eligible = _eligible_for_request(db, request)
    drafts = plan_allocation(eligible, request)
    records = [draft.to_model() for draft in drafts]

    try:
        created = insert_targets(db, records)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Target batch insert failed after rollback of %s records", len(records))
        raise AllocationFailed(f"Failed to create targets: {exc.__class__.__name__}.") from exc

    logger.info("Created %s targets", len(created))
    return created
