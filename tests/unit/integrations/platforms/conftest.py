# tests/unit/integrations/platforms/conftest.py
import httpx
import pytest

from marketsync.services.gateway import MarketplaceGateway

from tests.helpers import json_response, mock_client


class PlatformAPI:
    """Fake marketplace API: canned JSON per (method, path), requests recorded"""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, method, path, data=None, status_code=200):
        self.routes[(method, path)] = (data, status_code)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        data, status_code = self.routes.get((request.method, request.url.path), (None, 404))
        if data is None:
            return httpx.Response(status_code)
        return json_response(data, status_code)


@pytest.fixture
def api():
    return PlatformAPI()


@pytest.fixture
def gateway(auth, settings, api):
    return MarketplaceGateway(auth, settings, http_client=mock_client(api))
