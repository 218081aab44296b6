from decimal import Decimal

from app.schemas.common import CamelModel


class AccountPerformanceOut(CamelModel):
    account_id: int
    account_name: str
    actual_amount: Decimal
    actual_qty: int
    target_amount: Decimal
    target_qty: int
    performance_amount: str
    performance_qty: str


class MonthlyPerformanceOut(CamelModel):
    month: int
    year: int
    name: str
    actual: Decimal
    actual_qty: int
    target: Decimal
    target_qty: int
    performance: int
    account_id: int | None = None


class TeamPerformanceResponse(CamelModel):
    members: list[AccountPerformanceOut]
    monthly: list[MonthlyPerformanceOut]


class KindSummaryOut(CamelModel):
    period: str
    transaction_count: int
    actual_amount: Decimal
    actual_qty: int
    target_amount: Decimal
    target_qty: int
    performance_amount: str
    performance_qty: str
