from abc import ABC, abstractmethod
from typing import List, Optional

from marketsync.core.config import Settings, get_settings
from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.models.listing import ListingStats
from marketsync.models.order import Order
from marketsync.models.product import Product
from marketsync.services.gateway import MarketplaceGateway


class MarketplaceAdapter(ABC):
    """
    Five-operation interface every marketplace implements.

    Adapters translate domain entities to and from the platform's wire format
    and send everything through the shared gateway. They hold no other state.
    """
    platform: MarketplacePlatform

    def __init__(self, gateway: MarketplaceGateway, settings: Optional[Settings] = None):
        self.gateway = gateway
        self.settings = settings or get_settings()

    @abstractmethod
    async def create_listing(self, product: Product) -> str:
        """Publish the product, returning the platform's listing id"""
        pass

    @abstractmethod
    async def end_listing(self, listing_id: str) -> None:
        """End (or delete) a listing on the platform"""
        pass

    @abstractmethod
    async def get_listing_stats(self, listing_id: str) -> ListingStats:
        pass

    @abstractmethod
    async def fetch_orders(self) -> List[Order]:
        pass

    @abstractmethod
    async def update_order_status(self, platform_order_id: str, status: OrderStatus) -> None:
        pass

    def listing_url(self, listing_id: str) -> str:
        """Public URL of a listing on the marketplace"""
        template = self.settings.platform_value(self.platform, "LISTING_URL")
        return template.format(listing_id=listing_id)
