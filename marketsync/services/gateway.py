"""
Resilient gateway: the single chokepoint for marketplace API requests.

Each request is described by an Endpoint (platform, path, method, headers, body).
The gateway attaches the bearer token, classifies the outcome into the
GatewayError hierarchy and retries exactly once after a 401 with a fresh token.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from marketsync.core.config import Settings, get_settings
from marketsync.core.enums import MarketplacePlatform
from marketsync.core.exceptions import (
    DecodingError,
    HTTPError,
    NetworkError,
    PlatformNotConfiguredError,
    RateLimitedError,
)
from marketsync.services.activity_logger import ActivityLogger
from marketsync.services.auth_manager import AuthenticationManager

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class Endpoint:
    """Request descriptor for one marketplace API call."""
    platform: MarketplacePlatform
    path: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    @classmethod
    def with_json(
        cls,
        platform: MarketplacePlatform,
        path: str,
        method: str,
        payload: Union[BaseModel, Dict[str, Any]]
    ) -> "Endpoint":
        """Build an endpoint carrying a JSON body"""
        if isinstance(payload, BaseModel):
            body = payload.model_dump_json(by_alias=True, exclude_none=True).encode()
        else:
            body = json.dumps(payload, default=str).encode()
        return cls(
            platform=platform,
            path=path,
            method=method,
            headers={"Content-Type": "application/json"},
            body=body
        )


class MarketplaceGateway:
    """
    Sends Endpoints to the configured platform base URLs.

    A single httpx.AsyncClient is shared by all requests; pass one in (e.g. with
    an httpx.MockTransport) to control the transport.
    """

    def __init__(
        self,
        auth: AuthenticationManager,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        activity: Optional[ActivityLogger] = None
    ):
        self.auth = auth
        self.settings = settings or get_settings()
        self.activity = activity or ActivityLogger(logger)
        self.base_urls = self.settings.base_urls()
        self._client = http_client or httpx.AsyncClient(timeout=self.settings.REQUEST_TIMEOUT_SECONDS)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, endpoint: Endpoint, response_model: Type[T]) -> T:
        """
        Send a request and decode the response body

        Args:
            endpoint: Request descriptor
            response_model: Pydantic model the 2xx body is decoded into

        Returns:
            Decoded response

        Raises:
            HTTPError: Non-2xx status, including a 401 that survives one token refresh
            RateLimitedError: On 429 (not retried)
            NetworkError: Transport failure
            DecodingError: 2xx body that is not JSON or does not fit response_model
        """
        attempt = 1
        while True:
            response = await self._perform(endpoint, attempt)

            if response.status_code == 401 and attempt < MAX_ATTEMPTS:
                self.activity.warning(
                    "gateway.request",
                    "Unauthorized, refreshing token and retrying",
                    platform=endpoint.platform.value,
                    path=endpoint.path
                )
                await self.auth.refresh_token(endpoint.platform)
                attempt += 1
                continue

            return self._handle_response(endpoint, response, response_model)

    async def _perform(self, endpoint: Endpoint, attempt: int) -> httpx.Response:
        base_url = self.base_urls.get(endpoint.platform)
        if not base_url:
            raise PlatformNotConfiguredError(f"No API base URL configured for {endpoint.platform.display_name}")

        headers = dict(endpoint.headers)
        headers.setdefault("Accept", "application/json")
        token = await self.auth.valid_access_token(endpoint.platform)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{base_url.rstrip('/')}/{endpoint.path.lstrip('/')}"
        self.activity.info(
            "gateway.request",
            f"{endpoint.method} {endpoint.path}",
            platform=endpoint.platform.value,
            path=endpoint.path,
            method=endpoint.method,
            attempt=attempt
        )

        try:
            request = self._client.build_request(
                endpoint.method,
                url,
                headers=headers,
                content=endpoint.body
            )
            return await self._client.send(request)
        except httpx.RequestError as e:
            self.activity.error(
                "gateway.request",
                "Network error",
                platform=endpoint.platform.value,
                path=endpoint.path,
                error=str(e)
            )
            raise NetworkError(e) from e

    def _handle_response(self, endpoint: Endpoint, response: httpx.Response, response_model: Type[T]) -> T:
        status = response.status_code

        if 200 <= status < 300:
            return self._decode(endpoint, response, response_model)

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            self.activity.warning(
                "gateway.response",
                "Rate limited",
                platform=endpoint.platform.value,
                path=endpoint.path,
                retry_after=retry_after
            )
            raise RateLimitedError(retry_after)

        logger.error(f"{endpoint.platform.display_name} API error {status} for {endpoint.path}: {response.text[:500]}")
        raise HTTPError(status, response.text)

    def _decode(self, endpoint: Endpoint, response: httpx.Response, response_model: Type[T]) -> T:
        if not response.content.strip():
            data = {}
        else:
            try:
                data = response.json()
            except ValueError as e:
                logger.error(f"Non-JSON body from {endpoint.path}: {response.text[:500]}")
                raise DecodingError(
                    f"Non-JSON response from {endpoint.platform.display_name} {endpoint.path}"
                ) from e

        try:
            return response_model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Could not decode {response_model.__name__} from {endpoint.path}: {e}")
            raise DecodingError(f"Unexpected response shape for {response_model.__name__}") from e
