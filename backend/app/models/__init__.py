from app.models.account import Account
from app.models.audit import AuditLog
from app.models.client import Client
from app.models.enums import PermissionLevel, RecipientKind, RoleName, TransactionKind
from app.models.target import Target
from app.models.team import Team, TeamMember
from app.models.transaction import Transaction

__all__ = [
    "Account",
    "AuditLog",
    "Client",
    "PermissionLevel",
    "RecipientKind",
    "RoleName",
    "TransactionKind",
    "Target",
    "Team",
    "TeamMember",
    "Transaction",
]
