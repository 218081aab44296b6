from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_account, get_db, get_period_filter
from app.core.security import require_roles
from app.models.account import Account
from app.models.enums import RoleName, TransactionKind
from app.schemas.common import ErrorResponse
from app.schemas.targets import TargetCreateRequest, TargetDeleteResponse, TargetOut, TargetUpdateRequest
from app.services.allocation import AllocationRequest
from app.services.periods import PeriodFilter
from app.services.reports import account_targets, list_targets, team_member_targets
from app.services.targets import create_targets, remove_target, replace_target


router = APIRouter(
    prefix="/targets",
    tags=["targets"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.post("", response_model=list[TargetOut], status_code=status.HTTP_201_CREATED)
def create_target(
    payload: TargetCreateRequest,
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    request = AllocationRequest(
        recipient_kind=payload.assigned_to_kind,
        recipient_id=payload.assigned_to,
        target_type=payload.target_type,
        amount=payload.amount,
        quantity=payload.quantity,
        month=payload.month,
        year=payload.year,
        created_by_id=current_account.id,
        divide_among_members=payload.divide_among_members,
        created_for_id=payload.created_for,
    )
    created = create_targets(db, request, actor=current_account)
    db.commit()
    return [TargetOut.model_validate(target) for target in created]


@router.get("", response_model=list[TargetOut])
def get_targets(
    target_type: TransactionKind | None = Query(default=None, alias="targetType"),
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    return [TargetOut.model_validate(target) for target in list_targets(db, filters, target_type)]


@router.get("/my-targets", response_model=list[TargetOut])
def get_my_targets(
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return [TargetOut.model_validate(target) for target in account_targets(db, current_account.id)]


@router.get("/team-members", response_model=list[TargetOut])
def get_team_member_targets(
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.team_manager])
    targets = team_member_targets(db, current_account.id, filters)
    return [TargetOut.model_validate(target) for target in targets]


@router.put("/{target_id}", response_model=TargetOut)
def update_target(
    target_id: int,
    payload: TargetUpdateRequest,
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    target = replace_target(
        db,
        target_id,
        target_type=payload.target_type,
        amount=payload.amount,
        quantity=payload.quantity,
        month=payload.month,
        year=payload.year,
        actor=current_account,
    )
    db.commit()
    return TargetOut.model_validate(target)


@router.delete("/{target_id}", response_model=TargetDeleteResponse)
def delete_target(
    target_id: int,
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    remove_target(db, target_id, actor=current_account)
    db.commit()
    return TargetDeleteResponse(message="Target deleted successfully.", target_id=target_id)
