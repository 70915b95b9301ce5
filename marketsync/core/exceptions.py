from typing import Optional


class MarketSyncError(Exception):
    """Base exception for all marketsync errors."""
    pass

class GatewayError(MarketSyncError):
    """Base exception for request outcomes classified by the gateway."""
    pass

class InvalidResponseError(GatewayError):
    """Raised when a successful response body is not a JSON document."""

    def __init__(self, message: str = "Invalid response from server"):
        super().__init__(message)

class HTTPError(GatewayError):
    """Raised for non-2xx responses other than rate limiting."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP Error: {status_code}")

class RateLimitedError(GatewayError):
    """Raised on HTTP 429. The gateway never retries these."""

    def __init__(self, retry_after: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__("Rate limited. Please try again later.")

class DecodingError(GatewayError):
    """Raised when a JSON body does not match the expected response shape."""
    pass

class NetworkError(GatewayError):
    """Raised for transport-level failures (connect, timeout, DNS)."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Network error: {cause}")

class AuthError(MarketSyncError):
    """Base exception for credential errors."""
    pass

class NoRefreshTokenError(AuthError):
    """Raised when an account has no refresh token to exchange."""

    def __init__(self, platform=None):
        self.platform = platform
        super().__init__("No refresh token available")

class TokenRefreshFailedError(AuthError):
    """Raised when the refresh-token exchange fails for any reason."""

    def __init__(self, platform=None, reason: str = ""):
        self.platform = platform
        self.reason = reason
        super().__init__(f"Token refresh failed{': ' + reason if reason else ''}")

class PlatformNotConfiguredError(MarketSyncError):
    """Raised when no adapter is registered for a platform."""
    pass

class ProductNotFoundError(MarketSyncError):
    """Raised when a product is not in the store."""
    pass

class OAuthRedirectError(MarketSyncError):
    """Raised when an OAuth callback URL cannot be handled."""
    pass
