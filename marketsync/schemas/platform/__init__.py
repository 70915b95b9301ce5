# marketsync/schemas/platform/__init__.py
from .common import CreateListingRequest, StatusUpdateRequest, EmptyResponse
from .ebay import EbayCreateListingResponse, EbayListingStatsResponse, EbayOrdersResponse
from .facebook import FacebookCreateListingResponse, FacebookInsightsResponse, FacebookOrdersResponse
from .mercari import MercariCreateListingResponse, MercariListingStatsResponse, MercariOrdersResponse
