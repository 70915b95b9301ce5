# tests/unit/services/test_oauth_redirect.py
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import pytest

from marketsync.core.enums import MarketplacePlatform
from marketsync.core.exceptions import OAuthRedirectError
from marketsync.models.account import TokenGrant
from marketsync.services.oauth_redirect import OAuthRedirectHandler, platform_from_callback_url


@pytest.fixture
def handler(accounts, credentials, settings):
    return OAuthRedirectHandler(accounts, credentials, settings)


"""
1. Authorization URL Tests
"""

def test_authorization_url_contains_oauth_parameters(handler, settings):
    url = handler.authorization_url(MarketplacePlatform.EBAY, state="xyz")

    assert url.startswith(settings.EBAY_AUTH_URL)
    params = parse_qs(urlparse(url).query)
    assert params["client_id"] == ["ebay-client"]
    assert params["redirect_uri"] == [settings.EBAY_REDIRECT_URI]
    assert params["response_type"] == ["code"]
    assert params["scope"] == ["sell.inventory sell.fulfillment"]
    assert params["state"] == ["xyz"]


@pytest.mark.parametrize("url,expected", [
    ("marketsync://oauth/ebay?code=abc", MarketplacePlatform.EBAY),
    ("marketsync://oauth/mercari?code=abc", MarketplacePlatform.MERCARI),
    ("https://callback.facebook.example/?code=abc", MarketplacePlatform.FACEBOOK),
    ("marketsync://oauth/etsy?code=abc", None),
])
def test_platform_from_callback_url(url, expected):
    assert platform_from_callback_url(url) == expected


"""
2. Redirect Handling Tests
"""

async def test_handle_redirect_connects_account(handler, accounts, credentials, mocker):
    exchange = mocker.patch.object(
        accounts,
        "exchange_authorization_code",
        new=AsyncMock(return_value=TokenGrant(access_token="access-1", refresh_token="refresh-1", expires_in=3600))
    )

    account = await handler.handle_redirect("marketsync://oauth/mercari?code=abc123&state=xyz")

    exchange.assert_awaited_once_with(MarketplacePlatform.MERCARI, "abc123")
    assert account.platform == MarketplacePlatform.MERCARI
    assert account.refresh_token == "refresh-1"
    assert not account.is_token_expired
    assert account.scopes == ["listings", "orders"]
    assert await credentials.retrieve_token(MarketplacePlatform.MERCARI) == "access-1"
    assert (await accounts.get_account(MarketplacePlatform.MERCARI)).id == account.id


async def test_handle_redirect_without_code_raises(handler):
    with pytest.raises(OAuthRedirectError, match="Missing authorization code"):
        await handler.handle_redirect("marketsync://oauth/ebay?state=xyz")


async def test_handle_redirect_unknown_platform_raises(handler):
    with pytest.raises(OAuthRedirectError, match="Unsupported redirect URL"):
        await handler.handle_redirect("marketsync://oauth/etsy?code=abc")
