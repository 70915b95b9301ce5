from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from marketsync.core.enums import ListingStatus, MarketplacePlatform
from marketsync.core.utils import utcnow


class ListingStats(BaseModel):
    views: int
    active: bool


class PlatformListing(BaseModel):
    """
    A product published on one marketplace.

    One listing per (product, platform) is intended but not enforced here.
    """
    id: UUID = Field(default_factory=uuid4)
    product_id: UUID
    platform: MarketplacePlatform
    platform_listing_id: str
    status: ListingStatus = ListingStatus.DRAFT
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    view_count: int = 0
    platform_url: str = ""
    synced_at: datetime = Field(default_factory=utcnow)
