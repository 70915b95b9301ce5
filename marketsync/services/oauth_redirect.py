"""
OAuth redirect handling: authorization URLs out, callback URLs in.

The browser half of the flow lives elsewhere. This module builds the URL the
seller is sent to and turns the platform's callback into a connected account.
"""

import logging
from datetime import timedelta
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from marketsync.core.config import Settings, get_settings
from marketsync.core.enums import MarketplacePlatform
from marketsync.core.exceptions import OAuthRedirectError
from marketsync.core.utils import utcnow
from marketsync.models.account import PlatformAccount
from marketsync.services.account_directory import AccountDirectory
from marketsync.services.activity_logger import ActivityLogger
from marketsync.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def platform_from_callback_url(url: str) -> Optional[MarketplacePlatform]:
    """Detect the platform from a callback URL's host or path"""
    parsed = urlparse(url)
    haystack = f"{parsed.netloc}{parsed.path}".lower()
    for platform in MarketplacePlatform:
        if platform.slug in haystack:
            return platform
    return None


class OAuthRedirectHandler:

    def __init__(
        self,
        accounts: AccountDirectory,
        credentials: CredentialStore,
        settings: Optional[Settings] = None,
        activity: Optional[ActivityLogger] = None
    ):
        self.accounts = accounts
        self.credentials = credentials
        self.settings = settings or get_settings()
        self.activity = activity or ActivityLogger(logger)

    def authorization_url(self, platform: MarketplacePlatform, state: Optional[str] = None) -> str:
        """
        Generate the platform's user authorization URL

        Args:
            platform: Marketplace to connect
            state: Optional opaque value echoed back on the callback

        Returns:
            str: Authorization URL
        """
        params = {
            "client_id": self.settings.platform_value(platform, "CLIENT_ID"),
            "redirect_uri": self.settings.platform_value(platform, "REDIRECT_URI"),
            "response_type": "code",
            "scope": " ".join(self.settings.scopes(platform)),
        }
        if state:
            params["state"] = state
        return f"{self.settings.platform_value(platform, 'AUTH_URL')}?{urlencode(params)}"

    async def handle_redirect(self, url: str) -> PlatformAccount:
        """
        Complete an OAuth callback

        Raises:
            OAuthRedirectError: If the URL names no known platform or has no code
        """
        platform = platform_from_callback_url(url)
        if platform is None:
            raise OAuthRedirectError(f"Unsupported redirect URL: {url}")

        codes = parse_qs(urlparse(url).query).get("code")
        if not codes or not codes[0]:
            raise OAuthRedirectError("Missing authorization code")
        code = codes[0]

        self.activity.info("auth.redirect", "Received OAuth redirect", platform=platform.value, code=f"{code[:4]}...")

        grant = await self.accounts.exchange_authorization_code(platform, code)
        await self.credentials.store_token(platform, grant.access_token)

        account = PlatformAccount(
            platform=platform,
            account_name=f"{platform.display_name} User",
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            token_expires_at=utcnow() + timedelta(seconds=grant.expires_in),
            scopes=grant.scopes or self.settings.scopes(platform),
        )
        await self.accounts.update(account)

        self.activity.info("auth.redirect", "Stored OAuth tokens", platform=platform.value, expires_in=grant.expires_in)
        return account
