from .account import PlatformAccount, TokenGrant
from .product import Product, ProductImage
from .listing import PlatformListing, ListingStats
from .order import Order, OrderFees
from .publish_job import PublishJob, PublishJobStatus
from .earnings import EarningsSummary, PlatformEarnings, DailyEarnings
