"""
Earnings reporting over stored orders.
"""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, List

from marketsync.core.enums import MarketplacePlatform
from marketsync.models.earnings import DailyEarnings, EarningsSummary, PlatformEarnings
from marketsync.models.order import Order
from marketsync.services.object_store import ObjectStore

logger = logging.getLogger(__name__)


class EarningsService:

    def __init__(self, store: ObjectStore):
        self.store = store

    async def calculate(self, start: datetime, end: datetime) -> EarningsSummary:
        """
        Summarise earnings for orders attributed to [start, end]

        An order is attributed to its payment time, or its creation time when
        unpaid. Gross sales are item prices; net is gross minus all fees.
        """
        orders = [
            order for order in await self.store.fetch(Order)
            if start <= order.earnings_date <= end
        ]

        breakdown: Dict[MarketplacePlatform, PlatformEarnings] = {}
        for platform in MarketplacePlatform:
            platform_orders = [order for order in orders if order.platform == platform]
            breakdown[platform] = PlatformEarnings(
                platform=platform,
                gross_sales=sum((order.item_price for order in platform_orders), Decimal("0")),
                fees=sum((order.fees.total_fees for order in platform_orders), Decimal("0")),
                order_count=len(platform_orders)
            )

        total_gross = sum((p.gross_sales for p in breakdown.values()), Decimal("0"))
        total_fees = sum((p.fees for p in breakdown.values()), Decimal("0"))
        average = total_gross / len(orders) if orders else Decimal("0")

        summary = EarningsSummary(
            period_start=start,
            period_end=end,
            total_gross_sales=total_gross,
            total_fees=total_fees,
            total_net_earnings=total_gross - total_fees,
            order_count=len(orders),
            average_order_value=average,
            platform_breakdown=breakdown,
            daily=self._daily_breakdown(orders)
        )
        logger.info(f"Calculated earnings for {len(orders)} orders between {start.isoformat()} and {end.isoformat()}")
        return summary

    @staticmethod
    def _daily_breakdown(orders: List[Order]) -> List[DailyEarnings]:
        by_day: Dict = defaultdict(list)
        for order in orders:
            by_day[order.earnings_date.date()].append(order)

        daily = [
            DailyEarnings(
                day=day,
                gross_sales=sum((order.item_price for order in day_orders), Decimal("0")),
                total_fees=sum((order.fees.total_fees for order in day_orders), Decimal("0")),
                order_count=len(day_orders)
            )
            for day, day_orders in by_day.items()
        ]
        return sorted(daily, key=lambda d: d.day, reverse=True)
