"""
Secure token storage for platform access tokens.
Access tokens live in memory only and are never persisted to disk.
"""

import asyncio
import logging
from typing import Dict, Optional

from marketsync.core.enums import MarketplacePlatform

logger = logging.getLogger(__name__)


class CredentialStore:
    """One secret access token per platform."""

    def __init__(self):
        self._tokens: Dict[MarketplacePlatform, str] = {}
        self._lock = asyncio.Lock()

    async def store_token(self, platform: MarketplacePlatform, token: str) -> None:
        """Save access token to memory only"""
        async with self._lock:
            self._tokens[platform] = token
        logger.debug(f"Stored access token for {platform.slug}")

    async def retrieve_token(self, platform: MarketplacePlatform) -> Optional[str]:
        async with self._lock:
            return self._tokens.get(platform)

    async def clear_token(self, platform: MarketplacePlatform) -> None:
        async with self._lock:
            if platform in self._tokens:
                del self._tokens[platform]
                logger.info(f"Cleared access token for {platform.slug}")
