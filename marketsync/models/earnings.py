from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel

from marketsync.core.enums import MarketplacePlatform


class PlatformEarnings(BaseModel):
    platform: MarketplacePlatform
    gross_sales: Decimal = Decimal("0")
    fees: Decimal = Decimal("0")
    order_count: int = 0

    @property
    def net_earnings(self) -> Decimal:
        return self.gross_sales - self.fees


class DailyEarnings(BaseModel):
    day: date
    gross_sales: Decimal = Decimal("0")
    total_fees: Decimal = Decimal("0")
    order_count: int = 0

    @property
    def net_earnings(self) -> Decimal:
        return self.gross_sales - self.total_fees


class EarningsSummary(BaseModel):
    period_start: datetime
    period_end: datetime
    total_gross_sales: Decimal
    total_fees: Decimal
    total_net_earnings: Decimal
    order_count: int
    average_order_value: Decimal
    platform_breakdown: Dict[MarketplacePlatform, PlatformEarnings]
    daily: List[DailyEarnings] = []
