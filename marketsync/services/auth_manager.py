"""
Authentication manager: the single authority for access-token refreshes.

Access tokens come from the CredentialStore, account metadata (expiry, refresh
token) from the AccountDirectory. Concurrent refreshes for the same platform
share one in-flight exchange, so every caller observes the same outcome.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Dict, Optional

from marketsync.core.enums import MarketplacePlatform
from marketsync.core.exceptions import NoRefreshTokenError, TokenRefreshFailedError
from marketsync.core.utils import utcnow
from marketsync.services.account_directory import AccountDirectory
from marketsync.services.activity_logger import ActivityLogger
from marketsync.services.credential_store import CredentialStore
from marketsync.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_VALIDITY_SECONDS = 3600


class AuthenticationManager:

    def __init__(
        self,
        accounts: AccountDirectory,
        credentials: CredentialStore,
        telemetry: Optional[TelemetryService] = None,
        activity: Optional[ActivityLogger] = None,
        token_validity_seconds: int = DEFAULT_TOKEN_VALIDITY_SECONDS
    ):
        self.accounts = accounts
        self.credentials = credentials
        self.telemetry = telemetry
        self.activity = activity or ActivityLogger(logger)
        self.token_validity = timedelta(seconds=token_validity_seconds)
        self._refreshes: Dict[MarketplacePlatform, asyncio.Task] = {}

    async def valid_access_token(self, platform: MarketplacePlatform) -> Optional[str]:
        """
        Get a valid access token, refreshing if necessary

        Returns:
            The stored access token, or None when no account is connected
        """
        account = await self.accounts.get_account(platform)
        if account is None:
            return None

        if account.is_token_expired:
            logger.info(f"{platform.display_name} access token expired, refreshing...")
            await self.refresh_token(platform)
            account = await self.accounts.get_account(platform)
            if account is None:
                return None

        return await self.credentials.retrieve_token(account.platform)

    async def refresh_token(self, platform: MarketplacePlatform) -> None:
        """
        Refresh the platform's access token, joining an in-flight refresh if any

        Raises:
            NoRefreshTokenError: If the account has no refresh token
            TokenRefreshFailedError: If the exchange with the platform fails
        """
        task = self._refreshes.get(platform)
        if task is None:
            task = asyncio.create_task(self._refresh(platform))
            self._refreshes[platform] = task
            task.add_done_callback(lambda done: self._forget_refresh(platform, done))
        await asyncio.shield(task)

    def _forget_refresh(self, platform: MarketplacePlatform, task: asyncio.Task) -> None:
        if self._refreshes.get(platform) is task:
            del self._refreshes[platform]
        if not task.cancelled():
            # Mark the exception retrieved; awaiting callers re-raise it themselves
            task.exception()

    async def _refresh(self, platform: MarketplacePlatform) -> None:
        account = await self.accounts.get_account(platform)
        if account is None or not account.refresh_token:
            self.activity.error("auth.refresh", "No refresh token available", platform=platform.value)
            raise NoRefreshTokenError(platform)

        try:
            grant = await self.accounts.refresh_access_token(platform, account.refresh_token)
        except Exception as e:
            self.activity.error("auth.refresh", "Token refresh failed", platform=platform.value, error=str(e))
            raise TokenRefreshFailedError(platform, str(e)) from e

        await self.credentials.store_token(platform, grant.access_token)

        updated_account = account.model_copy(update={
            "access_token": grant.access_token,
            "refresh_token": grant.refresh_token or account.refresh_token,
            "token_expires_at": utcnow() + self.token_validity,
        })
        await self.accounts.update(updated_account)

        if self.telemetry is not None:
            await self.telemetry.record_token_refresh(platform)

        self.activity.info(
            "auth.refresh",
            "Refreshed access token",
            platform=platform.value,
            expires_at=updated_account.token_expires_at.isoformat()
        )
