"""
Recurring reconciliation for marketsync.

Each cycle refreshes orders from every platform, then retries failed publish
jobs. A phase failure is recorded in telemetry and logged; it never stops the
next phase or escapes the cycle.
"""

import logging
from datetime import datetime
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from marketsync.core.config import Settings, get_settings
from marketsync.services.activity_logger import ActivityLogger
from marketsync.services.listing_service import ListingService
from marketsync.services.order_aggregator import OrderAggregator
from marketsync.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)

SYNC_JOB_ID = "marketsync_cycle"


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error(f"Job {event.job_id} crashed: {event.exception}")
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now()}")


class SyncScheduler:

    def __init__(
        self,
        orders: OrderAggregator,
        listings: ListingService,
        telemetry: TelemetryService,
        settings: Optional[Settings] = None,
        activity: Optional[ActivityLogger] = None
    ):
        self.orders = orders
        self.listings = listings
        self.telemetry = telemetry
        self.settings = settings or get_settings()
        self.activity = activity or ActivityLogger(logger)
        self.scheduler: Optional[AsyncIOScheduler] = None

    async def run_cycle(self) -> None:
        """Run one reconciliation cycle. Never raises."""
        self.activity.info("scheduler.cycle", "Sync cycle starting")

        try:
            await self.orders.fetch_all()
            await self.telemetry.record_sync_success()
        except Exception as e:
            reason = str(e) or type(e).__name__
            await self.telemetry.record_retry(reason)
            self.activity.error("scheduler.cycle", "Order refresh failed", error=reason)

        try:
            await self.listings.retry_failed_publishes(self.settings.MAX_PUBLISH_RETRIES)
        except Exception as e:
            reason = str(e) or type(e).__name__
            await self.telemetry.record_retry(reason)
            self.activity.error("scheduler.cycle", "Publish retry failed", error=reason)

        self.activity.info("scheduler.cycle", "Sync cycle finished")

    def create_scheduler(self) -> AsyncIOScheduler:
        """Create and configure the APScheduler instance driving run_cycle"""
        if self.scheduler is not None:
            return self.scheduler

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
        self.scheduler.add_job(
            self.run_cycle,
            IntervalTrigger(minutes=self.settings.SYNC_INTERVAL_MINUTES),
            id=SYNC_JOB_ID,
            name="Marketplace Sync Cycle",
            replace_existing=True,
            max_instances=1,  # Only one cycle at a time
            coalesce=True
        )
        logger.info(f"Sync cycle scheduled every {self.settings.SYNC_INTERVAL_MINUTES} minutes")
        return self.scheduler

    def start(self) -> None:
        """Start the scheduler. Must be called with a running event loop."""
        scheduler = self.create_scheduler()
        if not scheduler.running:
            scheduler.start()
            logger.info("Scheduler started successfully")

    def shutdown(self) -> None:
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped successfully")

    @property
    def running(self) -> bool:
        return bool(self.scheduler and self.scheduler.running)
