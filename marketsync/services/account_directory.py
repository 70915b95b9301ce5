"""
Account directory: one PlatformAccount per marketplace plus the OAuth token
endpoint exchanges (refresh_token and authorization_code grants).
"""

import asyncio
import logging
from typing import Dict, List, Optional

import httpx

from marketsync.core.config import Settings, get_settings
from marketsync.core.enums import MarketplacePlatform
from marketsync.core.exceptions import HTTPError, InvalidResponseError, NetworkError
from marketsync.models.account import PlatformAccount, TokenGrant
from marketsync.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)


class AccountDirectory:
    """
    Holds connected accounts and talks to each platform's token endpoint.

    Token exchanges run outside the lock so a slow platform never blocks
    account lookups for the others.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        activity: Optional[ActivityLogger] = None
    ):
        self.settings = settings or get_settings()
        self._http_client = http_client
        self.activity = activity or ActivityLogger(logger)
        self._accounts: Dict[MarketplacePlatform, PlatformAccount] = {}
        self._lock = asyncio.Lock()

    async def get_account(self, platform: MarketplacePlatform) -> Optional[PlatformAccount]:
        async with self._lock:
            account = self._accounts.get(platform)
            return account.model_copy(deep=True) if account else None

    async def list_accounts(self) -> List[PlatformAccount]:
        async with self._lock:
            return [account.model_copy(deep=True) for account in self._accounts.values()]

    async def update(self, account: PlatformAccount) -> None:
        async with self._lock:
            self._accounts[account.platform] = account.model_copy(deep=True)

    async def remove(self, platform: MarketplacePlatform) -> None:
        async with self._lock:
            self._accounts.pop(platform, None)

    async def refresh_access_token(self, platform: MarketplacePlatform, refresh_token: str) -> TokenGrant:
        """
        Exchange a refresh token for a new access token

        Args:
            platform: Marketplace the token belongs to
            refresh_token: Stored refresh token

        Returns:
            TokenGrant: New access token (and a rotated refresh token if the platform sent one)

        Raises:
            HTTPError, InvalidResponseError, NetworkError: If the exchange fails
        """
        grant = await self._request_token(platform, {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        self.activity.info("auth.refresh", "Exchanged refresh token", platform=platform.value)
        return grant

    async def exchange_authorization_code(self, platform: MarketplacePlatform, code: str) -> TokenGrant:
        """Exchange an OAuth authorization code for access and refresh tokens"""
        grant = await self._request_token(platform, {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.settings.platform_value(platform, "REDIRECT_URI"),
        })
        self.activity.info("auth.redirect", "Exchanged authorization code", platform=platform.value)
        return grant

    async def _request_token(self, platform: MarketplacePlatform, form: Dict[str, str]) -> TokenGrant:
        token_url = self.settings.platform_value(platform, "TOKEN_URL")
        auth = httpx.BasicAuth(
            self.settings.platform_value(platform, "CLIENT_ID"),
            self.settings.platform_value(platform, "CLIENT_SECRET")
        )

        try:
            if self._http_client is not None:
                response = await self._http_client.post(token_url, data=form, auth=auth)
            else:
                async with httpx.AsyncClient(timeout=self.settings.REQUEST_TIMEOUT_SECONDS) as client:
                    response = await client.post(token_url, data=form, auth=auth)
        except httpx.RequestError as e:
            logger.error(f"Network error contacting {platform.slug} token endpoint: {str(e)}")
            raise NetworkError(e) from e

        if response.status_code != 200:
            logger.error(f"{platform.display_name} token exchange failed: {response.text}")
            raise HTTPError(response.status_code, response.text)

        try:
            token_data = response.json()
            return TokenGrant(
                access_token=token_data["access_token"],
                refresh_token=token_data.get("refresh_token"),
                expires_in=int(token_data.get("expires_in", self.settings.TOKEN_VALIDITY_SECONDS)),
                scopes=str(token_data.get("scope", "")).split()
            )
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidResponseError(f"Malformed token response from {platform.display_name}") from e
