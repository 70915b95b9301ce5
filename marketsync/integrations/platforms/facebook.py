# marketsync/integrations/platforms/facebook.py
import logging
from typing import List

from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.integrations.base import MarketplaceAdapter
from marketsync.models.listing import ListingStats
from marketsync.models.order import Order
from marketsync.models.product import Product
from marketsync.schemas.platform.common import CreateListingRequest, EmptyResponse, StatusUpdateRequest
from marketsync.schemas.platform.facebook import (
    FacebookCreateListingResponse,
    FacebookInsightsResponse,
    FacebookOrdersResponse,
)
from marketsync.services.gateway import Endpoint

logger = logging.getLogger(__name__)

GRAPH_PREFIX = "/graph/v18.0"


class FacebookEndpoints:
    """Endpoint builders for the Facebook Marketplace graph API"""

    @staticmethod
    def create_listing(request: CreateListingRequest) -> Endpoint:
        return Endpoint.with_json(MarketplacePlatform.FACEBOOK, f"{GRAPH_PREFIX}/listings", "POST", request)

    @staticmethod
    def delete_listing(listing_id: str) -> Endpoint:
        return Endpoint(MarketplacePlatform.FACEBOOK, f"{GRAPH_PREFIX}/listings/{listing_id}", "DELETE")

    @staticmethod
    def listing_insights(listing_id: str) -> Endpoint:
        return Endpoint(MarketplacePlatform.FACEBOOK, f"{GRAPH_PREFIX}/listings/{listing_id}/insights")

    @staticmethod
    def fetch_orders() -> Endpoint:
        return Endpoint(MarketplacePlatform.FACEBOOK, f"{GRAPH_PREFIX}/orders")

    @staticmethod
    def update_order_status(order_id: str, status: OrderStatus) -> Endpoint:
        # Graph edges only accept POST for mutations
        return Endpoint.with_json(
            MarketplacePlatform.FACEBOOK,
            f"{GRAPH_PREFIX}/orders/{order_id}/status",
            "POST",
            StatusUpdateRequest(status=status)
        )


class FacebookAdapter(MarketplaceAdapter):
    platform = MarketplacePlatform.FACEBOOK

    async def create_listing(self, product: Product) -> str:
        endpoint = FacebookEndpoints.create_listing(CreateListingRequest.from_product(product))
        response = await self.gateway.send(endpoint, FacebookCreateListingResponse)
        logger.info(f"Created Facebook listing {response.id} for product {product.id}")
        return response.id

    async def end_listing(self, listing_id: str) -> None:
        await self.gateway.send(FacebookEndpoints.delete_listing(listing_id), EmptyResponse)

    async def get_listing_stats(self, listing_id: str) -> ListingStats:
        response = await self.gateway.send(FacebookEndpoints.listing_insights(listing_id), FacebookInsightsResponse)
        return response.to_stats()

    async def fetch_orders(self) -> List[Order]:
        response = await self.gateway.send(FacebookEndpoints.fetch_orders(), FacebookOrdersResponse)
        return [order.to_order() for order in response.data]

    async def update_order_status(self, platform_order_id: str, status: OrderStatus) -> None:
        await self.gateway.send(FacebookEndpoints.update_order_status(platform_order_id, status), EmptyResponse)
