"""
Order aggregation across every registered marketplace.
"""

import asyncio
import logging
from typing import Dict, List, Optional
from uuid import UUID

from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.core.exceptions import PlatformNotConfiguredError
from marketsync.core.utils import utcnow
from marketsync.integrations.base import MarketplaceAdapter
from marketsync.models.order import Order
from marketsync.services.activity_logger import ActivityLogger
from marketsync.services.object_store import ObjectStore

logger = logging.getLogger(__name__)


class OrderAggregator:

    def __init__(
        self,
        adapters: Dict[MarketplacePlatform, MarketplaceAdapter],
        store: ObjectStore,
        activity: Optional[ActivityLogger] = None
    ):
        self.adapters = adapters
        self.store = store
        self.activity = activity or ActivityLogger(logger)

    async def fetch_all(self) -> List[Order]:
        """
        Fetch orders from all platforms and persist them

        Returns:
            Every stored order, newest first

        Raises:
            The first adapter error. Nothing is persisted in that case.
        """
        platforms = list(self.adapters)
        results = await asyncio.gather(
            *(self.adapters[platform].fetch_orders() for platform in platforms),
            return_exceptions=True
        )

        fetched: List[Order] = []
        first_error: Optional[BaseException] = None
        for platform, result in zip(platforms, results):
            if isinstance(result, BaseException):
                self.activity.error(
                    "orders.fetch",
                    "Order fetch failed",
                    platform=platform.value,
                    error=str(result)
                )
                if first_error is None:
                    first_error = result
                continue
            self.activity.info("orders.fetch", "Fetched orders", platform=platform.value, count=len(result))
            fetched.extend(result)

        if first_error is not None:
            raise first_error

        await self._upsert(fetched)
        return await self.load_orders()

    async def _upsert(self, orders: List[Order]) -> None:
        existing = {
            (order.platform, order.platform_order_id): order
            for order in await self.store.fetch(Order)
        }
        for order in orders:
            known = existing.get((order.platform, order.platform_order_id))
            if known is not None:
                order = order.model_copy(update={
                    "id": known.id,
                    "product_id": order.product_id or known.product_id,
                    "updated_at": utcnow(),
                })
            await self.store.save(order)

    async def load_orders(self) -> List[Order]:
        orders = await self.store.fetch(Order)
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    async def update_order_status(
        self,
        order_id: UUID,
        new_status: OrderStatus,
        platform: MarketplacePlatform
    ) -> None:
        """
        Push a status change to the order's platform, then store it locally.

        Unknown order ids are ignored. If the platform rejects the change the
        local order is left untouched and the error propagates.
        """
        order = await self.store.get(Order, order_id)
        if order is None:
            logger.debug(f"Order {order_id} not found, nothing to update")
            return

        adapter = self.adapters.get(platform)
        if adapter is None:
            raise PlatformNotConfiguredError(f"No adapter registered for {platform.display_name}")

        await adapter.update_order_status(order.platform_order_id, new_status)

        now = utcnow()
        order.status = new_status
        order.updated_at = now
        if new_status == OrderStatus.PAID and order.paid_at is None:
            order.paid_at = now
        elif new_status == OrderStatus.SHIPPED and order.shipped_at is None:
            order.shipped_at = now
        await self.store.update(order)

        self.activity.info(
            "orders.status",
            "Order status updated",
            order_id=str(order_id),
            platform=platform.value,
            status=new_status.value
        )
