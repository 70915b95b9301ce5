# marketsync/integrations/platforms/mercari.py
import logging
from typing import List

from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.integrations.base import MarketplaceAdapter
from marketsync.models.listing import ListingStats
from marketsync.models.order import Order
from marketsync.models.product import Product
from marketsync.schemas.platform.common import CreateListingRequest, EmptyResponse, StatusUpdateRequest
from marketsync.schemas.platform.mercari import (
    MercariCreateListingResponse,
    MercariListingStatsResponse,
    MercariOrdersResponse,
)
from marketsync.services.gateway import Endpoint

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class MercariEndpoints:
    """Endpoint builders for the Mercari REST API"""

    @staticmethod
    def create_listing(request: CreateListingRequest) -> Endpoint:
        return Endpoint.with_json(MarketplacePlatform.MERCARI, f"{API_PREFIX}/listings", "POST", request)

    @staticmethod
    def delete_listing(listing_id: str) -> Endpoint:
        return Endpoint(MarketplacePlatform.MERCARI, f"{API_PREFIX}/listings/{listing_id}", "DELETE")

    @staticmethod
    def listing_stats(listing_id: str) -> Endpoint:
        return Endpoint(MarketplacePlatform.MERCARI, f"{API_PREFIX}/listings/{listing_id}/stats")

    @staticmethod
    def fetch_orders() -> Endpoint:
        return Endpoint(MarketplacePlatform.MERCARI, f"{API_PREFIX}/orders")

    @staticmethod
    def update_order_status(order_id: str, status: OrderStatus) -> Endpoint:
        return Endpoint.with_json(
            MarketplacePlatform.MERCARI,
            f"{API_PREFIX}/orders/{order_id}/status",
            "PUT",
            StatusUpdateRequest(status=status)
        )


class MercariAdapter(MarketplaceAdapter):
    platform = MarketplacePlatform.MERCARI

    async def create_listing(self, product: Product) -> str:
        endpoint = MercariEndpoints.create_listing(CreateListingRequest.from_product(product))
        response = await self.gateway.send(endpoint, MercariCreateListingResponse)
        logger.info(f"Created Mercari listing {response.listing_id} for product {product.id}")
        return response.listing_id

    async def end_listing(self, listing_id: str) -> None:
        await self.gateway.send(MercariEndpoints.delete_listing(listing_id), EmptyResponse)

    async def get_listing_stats(self, listing_id: str) -> ListingStats:
        response = await self.gateway.send(MercariEndpoints.listing_stats(listing_id), MercariListingStatsResponse)
        return response.to_stats()

    async def fetch_orders(self) -> List[Order]:
        response = await self.gateway.send(MercariEndpoints.fetch_orders(), MercariOrdersResponse)
        return [order.to_order() for order in response.orders]

    async def update_order_status(self, platform_order_id: str, status: OrderStatus) -> None:
        await self.gateway.send(MercariEndpoints.update_order_status(platform_order_id, status), EmptyResponse)
