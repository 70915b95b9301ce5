"""
Listing publish orchestration and the product catalogue.

publish() records a PublishJob before any network call, fans the product out to
every target platform concurrently and persists one PlatformListing per success.
A partial failure leaves the job Failed with the first error observed; listings
already created stay in place and are recorded on the job so retries skip them.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Set
from uuid import UUID

from marketsync.core.config import Settings, get_settings
from marketsync.core.enums import ListingStatus, MarketplacePlatform
from marketsync.core.exceptions import PlatformNotConfiguredError, ProductNotFoundError
from marketsync.core.utils import utcnow
from marketsync.integrations.base import MarketplaceAdapter
from marketsync.models.listing import PlatformListing
from marketsync.models.product import Product
from marketsync.models.publish_job import PublishJob, PublishJobStatus
from marketsync.services.activity_logger import ActivityLogger
from marketsync.services.object_store import ObjectStore

logger = logging.getLogger(__name__)


class ListingService:

    def __init__(
        self,
        adapters: Dict[MarketplacePlatform, MarketplaceAdapter],
        store: ObjectStore,
        settings: Optional[Settings] = None,
        activity: Optional[ActivityLogger] = None
    ):
        self.adapters = adapters
        self.store = store
        self.settings = settings or get_settings()
        self.activity = activity or ActivityLogger(logger)
        self._jobs: Dict[UUID, PublishJob] = {}
        self._jobs_lock = asyncio.Lock()

    def _adapter(self, platform: MarketplacePlatform) -> MarketplaceAdapter:
        adapter = self.adapters.get(platform)
        if adapter is None:
            raise PlatformNotConfiguredError(f"No adapter registered for {platform.display_name}")
        return adapter

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def _save_job(self, job: PublishJob) -> None:
        async with self._jobs_lock:
            self._jobs[job.id] = job.model_copy(deep=True)

    async def get_job(self, job_id: UUID) -> Optional[PublishJob]:
        async with self._jobs_lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    async def list_jobs(self) -> List[PublishJob]:
        async with self._jobs_lock:
            return [job.model_copy(deep=True) for job in self._jobs.values()]

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(self, product: Product, platforms: Iterable[MarketplacePlatform]) -> PublishJob:
        """
        Publish a product to several platforms concurrently

        Args:
            product: Product to list
            platforms: Target marketplaces

        Returns:
            PublishJob: The Succeeded job

        Raises:
            The first error observed among the platform publishes. The job is
            Failed by then and successful listings are kept.
        """
        job = PublishJob(product_id=product.id, platforms=set(platforms))
        await self._save_job(job)
        self.activity.info(
            "listing.publish",
            "Publish job started",
            job_id=str(job.id),
            product_id=str(product.id),
            platforms=sorted(p.value for p in job.platforms)
        )

        published, first_error = await self._publish_to(product, job.platforms)

        job.published_platforms |= published
        if first_error is None:
            job.status = PublishJobStatus.succeeded()
            job.last_error = None
            await self._save_job(job)
            self.activity.info("listing.publish", "Publish job succeeded", job_id=str(job.id))
            return job

        job.status = PublishJobStatus.failed(first_error)
        job.last_error = job.status.reason
        await self._save_job(job)
        self.activity.error(
            "listing.publish",
            "Publish job failed",
            job_id=str(job.id),
            published=sorted(p.value for p in published),
            error=job.last_error
        )
        raise first_error

    async def _publish_to(self, product: Product, platforms: Set[MarketplacePlatform]):
        """Run every single-platform publish; returns (succeeded platforms, first error)"""
        tasks = {
            asyncio.ensure_future(self._publish_single(product, platform)): platform
            for platform in platforms
        }

        published: Set[MarketplacePlatform] = set()
        first_error: Optional[Exception] = None
        for finished in asyncio.as_completed(list(tasks)):
            try:
                platform = await finished
                published.add(platform)
            except Exception as e:
                if first_error is None:
                    first_error = e

        return published, first_error

    async def _publish_single(self, product: Product, platform: MarketplacePlatform) -> MarketplacePlatform:
        adapter = self._adapter(platform)
        try:
            listing_id = await adapter.create_listing(product)
        except Exception as e:
            self.activity.error(
                "listing.publish",
                "Platform publish failed",
                platform=platform.value,
                product_id=str(product.id),
                error=str(e)
            )
            raise

        now = utcnow()
        listing = PlatformListing(
            product_id=product.id,
            platform=platform,
            platform_listing_id=listing_id,
            status=ListingStatus.ACTIVE,
            published_at=now,
            expires_at=now + timedelta(days=self.settings.LISTING_LIFETIME_DAYS),
            platform_url=adapter.listing_url(listing_id),
            synced_at=now
        )
        await self.store.save(listing)
        self.activity.info(
            "listing.publish",
            "Listing created",
            platform=platform.value,
            listing_id=listing_id,
            product_id=str(product.id)
        )
        return platform

    async def retry_failed_publishes(self, max_retries: Optional[int] = None) -> None:
        """
        Re-attempt the unpublished platforms of every retryable Failed job.

        Platform failures don't stop the pass. Each failing platform counts as one
        retry. A pass with any failure leaves the job Failed; a clean pass marks
        it Succeeded.
        """
        if max_retries is None:
            max_retries = self.settings.MAX_PUBLISH_RETRIES

        for job in await self.list_jobs():
            if not job.is_retryable(max_retries):
                continue

            product = await self.store.get(Product, job.product_id)
            if product is None:
                logger.warning(f"Skipping retry of job {job.id}: product {job.product_id} no longer exists")
                continue

            failure: Optional[Exception] = None
            for platform in sorted(job.pending_platforms, key=lambda p: p.value):
                try:
                    await self._publish_single(product, platform)
                    job.published_platforms.add(platform)
                except Exception as e:
                    failure = e
                    job.retry_count += 1
                    job.last_error = str(e) or type(e).__name__
                    self.activity.warning(
                        "listing.retry",
                        "Retry failed",
                        job_id=str(job.id),
                        platform=platform.value,
                        error=job.last_error
                    )

            if failure is None:
                job.status = PublishJobStatus.succeeded()
                job.last_error = None
                self.activity.info("listing.retry", "Retry succeeded", job_id=str(job.id))
            else:
                job.status = PublishJobStatus.failed(failure)

            await self._save_job(job)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_listings(self, product_id: Optional[UUID] = None) -> List[PlatformListing]:
        listings = await self.store.fetch(PlatformListing)
        if product_id is not None:
            listings = [listing for listing in listings if listing.product_id == product_id]
        return listings

    async def sync_listing_stats(self) -> None:
        """Refresh view count and status of every stored listing. The first failure propagates."""
        for listing in await self.store.fetch(PlatformListing):
            stats = await self._adapter(listing.platform).get_listing_stats(listing.platform_listing_id)
            listing.view_count = stats.views
            listing.status = ListingStatus.ACTIVE if stats.active else ListingStatus.SOLD
            listing.synced_at = utcnow()
            await self.store.update(listing)

        logger.info("Listing stats synced")

    async def remove_listings(self, product_id: UUID) -> None:
        """
        End every listing of a product on its platform.

        Local listings are deleted only where the remote removal succeeded. All
        listings are attempted; the first failure is raised afterwards.
        """
        first_error: Optional[Exception] = None
        for listing in await self.list_listings(product_id):
            try:
                await self._adapter(listing.platform).end_listing(listing.platform_listing_id)
            except Exception as e:
                self.activity.error(
                    "listing.remove",
                    "Failed to remove listing",
                    platform=listing.platform.value,
                    listing_id=listing.platform_listing_id,
                    error=str(e)
                )
                if first_error is None:
                    first_error = e
                continue

            await self.store.delete(PlatformListing, listing.id)
            self.activity.info(
                "listing.remove",
                "Listing removed",
                platform=listing.platform.value,
                listing_id=listing.platform_listing_id
            )

        if first_error is not None:
            raise first_error

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def create_product(self, product: Product) -> Product:
        await self.store.save(product)
        logger.info(f"Created product {product.id}: {product.title}")
        return product

    async def update_product(self, product: Product) -> Product:
        if await self.store.get(Product, product.id) is None:
            raise ProductNotFoundError(f"Product {product.id} not found")
        product.updated_at = utcnow()
        await self.store.update(product)
        return product

    async def get_product(self, product_id: UUID) -> Optional[Product]:
        return await self.store.get(Product, product_id)

    async def list_products(self) -> List[Product]:
        products = await self.store.fetch(Product)
        return sorted(products, key=lambda p: p.created_at, reverse=True)

    async def delete_product(self, product_id: UUID) -> None:
        """
        Remove a product's listings from every platform, then the product.

        Raises the first listing removal error; the product is kept in that case.
        """
        if await self.store.get(Product, product_id) is None:
            raise ProductNotFoundError(f"Product {product_id} not found")

        await self.remove_listings(product_id)
        await self.store.delete(Product, product_id)
        logger.info(f"Deleted product {product_id}")
