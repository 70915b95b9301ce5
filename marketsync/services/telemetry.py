"""
Sync telemetry: monotonic counters for successful syncs, retries and token
refreshes plus the last error reason. Uses asyncio.Lock so increments from
concurrent tasks are applied one at a time.
"""

import asyncio
import logging
from typing import Optional

from pydantic import BaseModel

from marketsync.core.enums import MarketplacePlatform
from marketsync.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)


class Metrics(BaseModel):
    successful_syncs: int = 0
    retry_count: int = 0
    token_refreshes: int = 0
    last_error_reason: Optional[str] = None


class TelemetryService:
    def __init__(self, activity: Optional[ActivityLogger] = None):
        self.activity = activity or ActivityLogger(logger)
        self._metrics = Metrics()
        self._lock = asyncio.Lock()

    async def record_sync_success(self) -> None:
        async with self._lock:
            self._metrics.successful_syncs += 1
            count = self._metrics.successful_syncs
        self.activity.info("telemetry", "Sync success", count=count)

    async def record_retry(self, reason: str) -> None:
        async with self._lock:
            self._metrics.retry_count += 1
            self._metrics.last_error_reason = reason
            count = self._metrics.retry_count
        self.activity.warning("telemetry", "Retry triggered", reason=reason, count=count)

    async def record_token_refresh(self, platform: MarketplacePlatform) -> None:
        async with self._lock:
            self._metrics.token_refreshes += 1
            count = self._metrics.token_refreshes
        self.activity.info("telemetry", "Token refreshed", platform=platform.value, count=count)

    async def snapshot(self) -> Metrics:
        """Copy of the current counters"""
        async with self._lock:
            return self._metrics.model_copy()
