from collections.abc import Generator

from fastapi import Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models.account import Account
from app.services.periods import PeriodFilter


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_account(
    db: Session = Depends(get_db),
    x_account_id: int | None = Header(default=None),
) -> Account:
    if x_account_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
        )
    account = db.get(Account, x_account_id)
    if account is None or not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid account.",
        )
    return account


def get_period_filter(
    start_month: int | None = Query(default=None, alias="startMonth"),
    start_year: int | None = Query(default=None, alias="startYear"),
    end_month: int | None = Query(default=None, alias="endMonth"),
    end_year: int | None = Query(default=None, alias="endYear"),
    month: int | None = Query(default=None),
    year: int | None = Query(default=None),
) -> PeriodFilter:
    return PeriodFilter(
        start_month=start_month,
        start_year=start_year,
        end_month=end_month,
        end_year=end_year,
        month=month,
        year=year,
    )
