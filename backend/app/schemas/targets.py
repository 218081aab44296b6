from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator

from app.models.enums import RecipientKind, TransactionKind
from app.schemas.common import CamelModel
from app.utils.identifiers import normalize_account_id


class TargetCreateRequest(CamelModel):
    assigned_to: int
    assigned_to_kind: RecipientKind = RecipientKind.account
    target_type: TransactionKind
    amount: Decimal = Field(ge=0)
    quantity: int = Field(ge=0)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=9999)
    divide_among_members: bool = False
    created_for: int | None = None

    @field_validator("assigned_to", "created_for", mode="before")
    @classmethod
    def _account_ref(cls, value):
        if value is None:
            return None
        return normalize_account_id(value)


class TargetUpdateRequest(CamelModel):
    target_type: TransactionKind
    amount: Decimal = Field(ge=0)
    quantity: int = Field(ge=0)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=9999)


class TargetOut(CamelModel):
    id: int
    assigned_to_kind: RecipientKind
    assigned_to_id: int
    target_type: TransactionKind
    amount: Decimal
    quantity: int
    month: int
    year: int
    original_total: Decimal | None = None
    member_count: int | None = None
    created_by_id: int | None = None
    created_for_id: int | None = None
    created_at: datetime | None = None


class TargetDeleteResponse(CamelModel):
    message: str
    target_id: int
