from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.errors import IneligibleRecipient
from app.models.account import Account
from app.models.enums import TransactionKind
from app.models.target import Target
from app.services.allocation import AllocationRequest, allocate_targets
from app.services.audit import log_audit, target_state
from app.services.eligibility import is_eligible
from app.services.store import delete_target, get_account, get_target_or_404, update_target
from app.utils.decimal_math import money


logger = logging.getLogger("targettrack.targets")


def create_targets(db: Session, request: AllocationRequest, *, actor: Account | None) -> list[Target]:
    created = allocate_targets(db, request)
    for target in created:
        log_audit(
            db,
            actor=actor,
            action="target.create",
            entity_type="target",
            entity_id=str(target.id),
            after_state=target_state(target),
        )
    return created


def replace_target(
    db: Session,
    target_id: int,
    *,
    target_type: TransactionKind,
    amount: Decimal,
    quantity: int,
    month: int,
    year: int,
    actor: Account | None,
) -> Target:
    """Replace the editable fields of a target as a whole.

    An edited amount no longer derives from a division, so the division
    bookkeeping is cleared when the amount changes.
    """
    target = get_target_or_404(db, target_id)
    before = target_state(target)
    target_type = TransactionKind(target_type)

    if target_type != target.target_type and target.account_id is not None:
        account = get_account(db, target.account_id)
        if account is not None and not is_eligible(account, target_type):
            raise IneligibleRecipient(
                f"Account {account.name} is not eligible for {target_type.value} targets."
            )

    patch: dict[str, object] = {
        "target_type": target_type,
        "amount": money(amount),
        "quantity": quantity,
        "month": month,
        "year": year,
    }
    if money(amount) != money(target.amount):
        patch["original_total"] = None
        patch["member_count"] = None

    update_target(db, target, patch)
    log_audit(
        db,
        actor=actor,
        action="target.update",
        entity_type="target",
        entity_id=str(target.id),
        before_state=before,
        after_state=target_state(target),
    )
    return target


def remove_target(db: Session, target_id: int, *, actor: Account | None) -> None:
    target = get_target_or_404(db, target_id)
    before = target_state(target)
    delete_target(db, target)
    log_audit(
        db,
        actor=actor,
        action="target.delete",
        entity_type="target",
        entity_id=str(target_id),
        before_state=before,
    )
    logger.info("Deleted target %s", target_id)
