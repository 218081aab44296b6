from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_account, get_db, get_period_filter
from app.core.security import require_roles
from app.models.account import Account
from app.models.enums import RoleName, TransactionKind
from app.schemas.common import ErrorResponse
from app.schemas.performance import (
    AccountPerformanceOut,
    KindSummaryOut,
    MonthlyPerformanceOut,
    TeamPerformanceResponse,
)
from app.services.periods import PeriodFilter
from app.services.reports import (
    account_monthly_performance,
    all_accounts_monthly_performance,
    all_accounts_performance,
    kind_summary,
    team_performance,
)


router = APIRouter(
    prefix="/performance/{kind}",
    tags=["performance"],
    responses={404: {"model": ErrorResponse}},
)


@router.get("/accounts", response_model=list[AccountPerformanceOut])
def get_accounts_performance(
    kind: TransactionKind,
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    rows = all_accounts_performance(db, kind, filters)
    return [AccountPerformanceOut(**asdict(row)) for row in rows]


@router.get("/monthly", response_model=list[MonthlyPerformanceOut])
def get_monthly_performance(
    kind: TransactionKind,
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    rows = all_accounts_monthly_performance(db, kind, filters)
    return [MonthlyPerformanceOut(**asdict(row)) for row in rows]


@router.get("/accounts/{account_id}/monthly", response_model=list[MonthlyPerformanceOut])
def get_account_monthly_performance(
    kind: TransactionKind,
    account_id: int,
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    rows = account_monthly_performance(db, account_id, kind, filters)
    return [MonthlyPerformanceOut(**asdict(row)) for row in rows]


@router.get("/team", response_model=TeamPerformanceResponse)
def get_team_performance(
    kind: TransactionKind,
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.team_manager])
    report = team_performance(db, current_account.id, kind, filters)
    return TeamPerformanceResponse(
        members=[AccountPerformanceOut(**asdict(row)) for row in report.members],
        monthly=[MonthlyPerformanceOut(**asdict(row)) for row in report.monthly],
    )


@router.get("/me/monthly", response_model=list[MonthlyPerformanceOut])
def get_my_monthly_performance(
    kind: TransactionKind,
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    rows = account_monthly_performance(db, current_account.id, kind, filters)
    return [MonthlyPerformanceOut(**asdict(row)) for row in rows]


@router.get("/summary", response_model=KindSummaryOut)
def get_kind_summary(
    kind: TransactionKind,
    filters: PeriodFilter = Depends(get_period_filter),
    db: Session = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    require_roles(current_account, [RoleName.admin])
    return KindSummaryOut(**asdict(kind_summary(db, kind, filters)))
