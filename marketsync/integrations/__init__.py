from .base import MarketplaceAdapter

__all__ = ["MarketplaceAdapter"]
