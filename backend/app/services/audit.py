from __future__ import annotations

from decimal import Decimal
from enum import Enum

from sqlalchemy.orm import Session

from app.models.account import Account
from app.models.audit import AuditLog
from app.models.target import Target


def target_state(target: Target) -> dict:
    state = {}
    for field_name in (
        "assigned_to_kind",
        "assigned_to_id",
        "target_type",
        "amount",
        "quantity",
        "month",
        "year",
        "original_total",
        "member_count",
        "created_for_id",
    ):
        value = getattr(target, field_name)
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, Decimal):
            value = str(value)
        state[field_name] = value
    return state


def log_audit(
    db: Session,
    *,
    actor: Account | None,
    action: str,
    entity_type: str,
    entity_id: str,
    before_state: dict | None = None,
    after_state: dict | None = None,
) -> AuditLog:
    log = AuditLog(
        actor_account_id=actor.id if actor is not None else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        before_state=before_state,
        after_state=after_state,
    )
    db.add(log)
    return log
