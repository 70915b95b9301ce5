"""
Wiring of the marketsync services.

build_services creates one instance of each component, registers the three
platform adapters and seeds accounts for every platform that has a refresh
token configured. Seeded accounts start expired so the first request refreshes.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from marketsync.core.config import Settings, get_settings
from marketsync.core.enums import MarketplacePlatform
from marketsync.core.utils import utcnow
from marketsync.integrations.base import MarketplaceAdapter
from marketsync.integrations.platforms import EbayAdapter, FacebookAdapter, MercariAdapter
from marketsync.models.account import PlatformAccount
from marketsync.scheduler import SyncScheduler
from marketsync.services.account_directory import AccountDirectory
from marketsync.services.activity_logger import ActivityLogger
from marketsync.services.auth_manager import AuthenticationManager
from marketsync.services.credential_store import CredentialStore
from marketsync.services.earnings_service import EarningsService
from marketsync.services.gateway import MarketplaceGateway
from marketsync.services.listing_service import ListingService
from marketsync.services.oauth_redirect import OAuthRedirectHandler
from marketsync.services.object_store import InMemoryObjectStore, ObjectStore
from marketsync.services.order_aggregator import OrderAggregator
from marketsync.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)

ADAPTER_CLASSES = {
    MarketplacePlatform.EBAY: EbayAdapter,
    MarketplacePlatform.FACEBOOK: FacebookAdapter,
    MarketplacePlatform.MERCARI: MercariAdapter,
}


@dataclass
class MarketSyncServices:
    settings: Settings
    store: ObjectStore
    credentials: CredentialStore
    accounts: AccountDirectory
    telemetry: TelemetryService
    auth: AuthenticationManager
    gateway: MarketplaceGateway
    adapters: Dict[MarketplacePlatform, MarketplaceAdapter]
    listings: ListingService
    orders: OrderAggregator
    earnings: EarningsService
    oauth: OAuthRedirectHandler
    scheduler: SyncScheduler

    async def aclose(self) -> None:
        self.scheduler.shutdown()
        await self.gateway.aclose()


def create_adapters(gateway: MarketplaceGateway, settings: Settings) -> Dict[MarketplacePlatform, MarketplaceAdapter]:
    return {platform: cls(gateway, settings) for platform, cls in ADAPTER_CLASSES.items()}


async def seed_accounts(accounts: AccountDirectory, settings: Settings) -> int:
    """Register an account for each platform with a configured refresh token"""
    seeded = 0
    for platform in MarketplacePlatform:
        refresh_token = settings.platform_value(platform, "REFRESH_TOKEN")
        if not refresh_token:
            continue
        await accounts.update(PlatformAccount(
            platform=platform,
            account_name=f"{platform.display_name} User",
            access_token="",
            refresh_token=refresh_token,
            token_expires_at=utcnow(),
            scopes=settings.scopes(platform),
        ))
        seeded += 1
        logger.info(f"Seeded {platform.display_name} account from configured refresh token")
    return seeded


async def build_services(
    settings: Optional[Settings] = None,
    store: Optional[ObjectStore] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    activity: Optional[ActivityLogger] = None
) -> MarketSyncServices:
    settings = settings or get_settings()
    store = store or InMemoryObjectStore()
    activity = activity or ActivityLogger()

    credentials = CredentialStore()
    accounts = AccountDirectory(settings, http_client=http_client, activity=activity)
    telemetry = TelemetryService(activity)
    auth = AuthenticationManager(
        accounts,
        credentials,
        telemetry=telemetry,
        activity=activity,
        token_validity_seconds=settings.TOKEN_VALIDITY_SECONDS
    )
    gateway = MarketplaceGateway(auth, settings, http_client=http_client, activity=activity)
    adapters = create_adapters(gateway, settings)
    listings = ListingService(adapters, store, settings, activity)
    orders = OrderAggregator(adapters, store, activity)

    await seed_accounts(accounts, settings)

    return MarketSyncServices(
        settings=settings,
        store=store,
        credentials=credentials,
        accounts=accounts,
        telemetry=telemetry,
        auth=auth,
        gateway=gateway,
        adapters=adapters,
        listings=listings,
        orders=orders,
        earnings=EarningsService(store),
        oauth=OAuthRedirectHandler(accounts, credentials, settings, activity),
        scheduler=SyncScheduler(orders, listings, telemetry, settings, activity),
    )
