from collections.abc import Iterable

from fastapi import HTTPException, status

from app.models.account import Account
from app.models.enums import RoleName


def require_roles(account: Account, allowed_roles: Iterable[RoleName]) -> None:
    allowed = {RoleName(role) for role in allowed_roles}
    role = RoleName(account.role)
    if role == RoleName.admin or role in allowed:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient role privileges.",
    )
