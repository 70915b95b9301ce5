"""
Shared enums and constants used across the application.
"""

from enum import Enum


class MarketplacePlatform(str, Enum):
    EBAY = "EBAY"
    MERCARI = "MERCARI"
    FACEBOOK = "FACEBOOK"

    @property
    def slug(self):
        return self.value.lower()

    @property
    def display_name(self):
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_slug(cls, slug: str) -> "MarketplacePlatform":
        for platform in cls:
            if platform.slug == slug.strip().lower():
                return platform
        raise ValueError(f"Unknown platform: {slug}")


_DISPLAY_NAMES = {
    MarketplacePlatform.EBAY: "eBay",
    MarketplacePlatform.MERCARI: "Mercari",
    MarketplacePlatform.FACEBOOK: "Facebook Marketplace",
}


class ProductCondition(str, Enum):
    """Product condition values used in both models and wire payloads"""
    NEW = "new"
    LIKE_NEW = "likeNew"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class ListingStatus(str, Enum):
    """Listing status values for platform listings"""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    SOLD = "sold"
    EXPIRED = "expired"
    ARCHIVED = "archived"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class JobState(str, Enum):
    """Publish job states. FAILED carries a reason on the job status."""
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class LogLevel(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
