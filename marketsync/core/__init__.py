"""
Core module exports.
"""
from .enums import (
    MarketplacePlatform,
    ProductCondition,
    ListingStatus,
    OrderStatus,
    JobState,
)

from .exceptions import (
    MarketSyncError,
    GatewayError,
    InvalidResponseError,
    HTTPError,
    RateLimitedError,
    DecodingError,
    NetworkError,
    AuthError,
    NoRefreshTokenError,
    TokenRefreshFailedError,
    PlatformNotConfiguredError,
    ProductNotFoundError,
    OAuthRedirectError,
)
