# marketsync/integrations/platforms/ebay.py
import logging
from typing import List

from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.integrations.base import MarketplaceAdapter
from marketsync.models.listing import ListingStats
from marketsync.models.order import Order
from marketsync.models.product import Product
from marketsync.schemas.platform.common import CreateListingRequest, EmptyResponse, StatusUpdateRequest
from marketsync.schemas.platform.ebay import (
    EbayCreateListingResponse,
    EbayListingStatsResponse,
    EbayOrdersResponse,
)
from marketsync.services.gateway import Endpoint

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1.0"


class EbayEndpoints:
    """Endpoint builders for the eBay REST API"""

    @staticmethod
    def create_listing(request: CreateListingRequest) -> Endpoint:
        return Endpoint.with_json(MarketplacePlatform.EBAY, f"{API_PREFIX}/listing/create", "POST", request)

    @staticmethod
    def end_listing(listing_id: str) -> Endpoint:
        # eBay ends listings rather than deleting them
        return Endpoint(MarketplacePlatform.EBAY, f"{API_PREFIX}/listing/{listing_id}/end", "PUT")

    @staticmethod
    def listing_stats(listing_id: str) -> Endpoint:
        return Endpoint(MarketplacePlatform.EBAY, f"{API_PREFIX}/listing/{listing_id}/stats")

    @staticmethod
    def fetch_orders() -> Endpoint:
        return Endpoint(MarketplacePlatform.EBAY, f"{API_PREFIX}/orders")

    @staticmethod
    def update_order_status(order_id: str, status: OrderStatus) -> Endpoint:
        return Endpoint.with_json(
            MarketplacePlatform.EBAY,
            f"{API_PREFIX}/order/{order_id}/status",
            "PUT",
            StatusUpdateRequest(status=status)
        )


class EbayAdapter(MarketplaceAdapter):
    platform = MarketplacePlatform.EBAY

    async def create_listing(self, product: Product) -> str:
        endpoint = EbayEndpoints.create_listing(CreateListingRequest.from_product(product))
        response = await self.gateway.send(endpoint, EbayCreateListingResponse)
        logger.info(f"Created eBay listing {response.item_id} for product {product.id}")
        return response.item_id

    async def end_listing(self, listing_id: str) -> None:
        await self.gateway.send(EbayEndpoints.end_listing(listing_id), EmptyResponse)

    async def get_listing_stats(self, listing_id: str) -> ListingStats:
        response = await self.gateway.send(EbayEndpoints.listing_stats(listing_id), EbayListingStatsResponse)
        return response.stats

    async def fetch_orders(self) -> List[Order]:
        response = await self.gateway.send(EbayEndpoints.fetch_orders(), EbayOrdersResponse)
        return [order.to_order() for order in response.orders]

    async def update_order_status(self, platform_order_id: str, status: OrderStatus) -> None:
        await self.gateway.send(EbayEndpoints.update_order_status(platform_order_id, status), EmptyResponse)
