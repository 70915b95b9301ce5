# marketsync/core/config.py

import os
from functools import lru_cache
from typing import Dict, List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from marketsync.core.enums import MarketplacePlatform


def _parse_scope_list(value: str) -> List[str]:
    return [scope.strip() for scope in value.split(",") if scope.strip()]


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # eBay
    EBAY_API_BASE_URL: str = "https://api.ebay.com"
    EBAY_AUTH_URL: str = "https://auth.ebay.com/oauth2/authorize"
    EBAY_TOKEN_URL: str = "https://api.ebay.com/identity/v1/oauth2/token"
    EBAY_CLIENT_ID: str = ""
    EBAY_CLIENT_SECRET: str = ""
    EBAY_REDIRECT_URI: str = "marketsync://oauth/ebay"
    EBAY_REFRESH_TOKEN: str = ""
    EBAY_SCOPES: str = "sell.inventory,sell.fulfillment"
    EBAY_LISTING_URL: str = "https://www.ebay.com/itm/{listing_id}"

    # Mercari
    MERCARI_API_BASE_URL: str = "https://api.mercari.com"
    MERCARI_AUTH_URL: str = "https://www.mercari.com/oauth/authorize"
    MERCARI_TOKEN_URL: str = "https://api.mercari.com/oauth/token"
    MERCARI_CLIENT_ID: str = ""
    MERCARI_CLIENT_SECRET: str = ""
    MERCARI_REDIRECT_URI: str = "marketsync://oauth/mercari"
    MERCARI_REFRESH_TOKEN: str = ""
    MERCARI_SCOPES: str = "listings,orders"
    MERCARI_LISTING_URL: str = "https://www.mercari.com/us/item/{listing_id}"

    # Facebook Marketplace
    FACEBOOK_API_BASE_URL: str = "https://graph.facebook.com"
    FACEBOOK_AUTH_URL: str = "https://www.facebook.com/v18.0/dialog/oauth"
    FACEBOOK_TOKEN_URL: str = "https://graph.facebook.com/v18.0/oauth/access_token"
    FACEBOOK_CLIENT_ID: str = ""
    FACEBOOK_CLIENT_SECRET: str = ""
    FACEBOOK_REDIRECT_URI: str = "marketsync://oauth/facebook"
    FACEBOOK_REFRESH_TOKEN: str = ""
    FACEBOOK_SCOPES: str = "commerce_manage_accounts,catalog_management"
    FACEBOOK_LISTING_URL: str = "https://www.facebook.com/marketplace/item/{listing_id}"

    # Gateway / auth
    REQUEST_TIMEOUT_SECONDS: float = 30.0
    TOKEN_VALIDITY_SECONDS: int = 3600

    # Publishing
    LISTING_LIFETIME_DAYS: int = 30
    MAX_PUBLISH_RETRIES: int = 3

    # Scheduler
    SYNC_SCHEDULE_ENABLED: bool = False
    SYNC_INTERVAL_MINUTES: int = 15

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists(os.environ.get('ENV_FILE', '.env')) else None,
        case_sensitive=True
    )

    def platform_value(self, platform: MarketplacePlatform, key: str):
        """Look up a per-platform setting, e.g. platform_value(EBAY, "TOKEN_URL")"""
        return getattr(self, f"{platform.value}_{key}")

    def scopes(self, platform: MarketplacePlatform) -> List[str]:
        return _parse_scope_list(self.platform_value(platform, "SCOPES"))

    def base_urls(self) -> Dict[MarketplacePlatform, str]:
        return {p: self.platform_value(p, "API_BASE_URL") for p in MarketplacePlatform}


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every lookup"""
    return Settings()


def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
