# tests/unit/services/test_auth_manager.py
import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from marketsync.core.enums import MarketplacePlatform
from marketsync.core.exceptions import HTTPError, NoRefreshTokenError, TokenRefreshFailedError
from marketsync.core.utils import utcnow
from marketsync.models.account import TokenGrant

from tests.helpers import make_account

EBAY = MarketplacePlatform.EBAY

"""
1. Valid Access Token Tests
"""

async def test_valid_token_returned_without_refresh(auth, accounts, credentials, mocker):
    """A non-expired account returns the stored token and never refreshes"""
    await accounts.update(make_account(EBAY, expired=False))
    await credentials.store_token(EBAY, "stored-token")
    exchange = mocker.patch.object(accounts, "refresh_access_token", new=AsyncMock())

    token = await auth.valid_access_token(EBAY)

    assert token == "stored-token"
    exchange.assert_not_awaited()


async def test_no_account_returns_none(auth):
    assert await auth.valid_access_token(EBAY) is None


async def test_account_without_expiry_is_never_refreshed(auth, accounts, credentials, mocker):
    account = make_account(EBAY)
    account.token_expires_at = None
    await accounts.update(account)
    await credentials.store_token(EBAY, "stored-token")
    exchange = mocker.patch.object(accounts, "refresh_access_token", new=AsyncMock())

    assert await auth.valid_access_token(EBAY) == "stored-token"
    exchange.assert_not_awaited()


async def test_expired_token_refreshes_once(auth, accounts, credentials, telemetry, mocker):
    """An expired account refreshes exactly once before returning the new token"""
    await accounts.update(make_account(EBAY, expired=True))
    await credentials.store_token(EBAY, "old-token")
    exchange = mocker.patch.object(
        accounts,
        "refresh_access_token",
        new=AsyncMock(return_value=TokenGrant(access_token="new-token"))
    )

    token = await auth.valid_access_token(EBAY)

    assert token == "new-token"
    exchange.assert_awaited_once_with(EBAY, "refresh-1")
    metrics = await telemetry.snapshot()
    assert metrics.token_refreshes == 1


async def test_concurrent_callers_share_one_refresh(auth, accounts, credentials, mocker):
    """Several callers asking at once observe a single refresh"""
    await accounts.update(make_account(EBAY, expired=True))

    async def slow_exchange(platform, refresh_token):
        await asyncio.sleep(0.01)
        return TokenGrant(access_token="new-token")

    exchange = mocker.patch.object(accounts, "refresh_access_token", new=AsyncMock(side_effect=slow_exchange))

    tokens = await asyncio.gather(*(auth.valid_access_token(EBAY) for _ in range(5)))

    assert tokens == ["new-token"] * 5
    assert exchange.await_count == 1


"""
2. Refresh Token Tests
"""

async def test_refresh_updates_account_expiry_and_token(auth, accounts, credentials, mocker):
    await accounts.update(make_account(EBAY, expired=True))
    mocker.patch.object(
        accounts,
        "refresh_access_token",
        new=AsyncMock(return_value=TokenGrant(access_token="new-token", refresh_token="refresh-2"))
    )

    before = utcnow()
    await auth.refresh_token(EBAY)

    account = await accounts.get_account(EBAY)
    assert account.access_token == "new-token"
    assert account.refresh_token == "refresh-2"
    assert account.token_expires_at >= before + timedelta(seconds=3600)
    assert account.token_expires_at <= utcnow() + timedelta(seconds=3600)
    assert not account.is_token_expired
    assert await credentials.retrieve_token(EBAY) == "new-token"


async def test_refresh_keeps_refresh_token_when_not_rotated(auth, accounts, mocker):
    await accounts.update(make_account(EBAY, expired=True))
    mocker.patch.object(
        accounts,
        "refresh_access_token",
        new=AsyncMock(return_value=TokenGrant(access_token="new-token"))
    )

    await auth.refresh_token(EBAY)

    account = await accounts.get_account(EBAY)
    assert account.refresh_token == "refresh-1"


async def test_refresh_without_refresh_token_raises(auth, accounts, mocker):
    await accounts.update(make_account(EBAY, expired=True, refresh_token=None))
    exchange = mocker.patch.object(accounts, "refresh_access_token", new=AsyncMock())

    with pytest.raises(NoRefreshTokenError):
        await auth.refresh_token(EBAY)
    exchange.assert_not_awaited()


async def test_refresh_without_account_raises(auth):
    with pytest.raises(NoRefreshTokenError):
        await auth.refresh_token(EBAY)


async def test_exchange_failure_becomes_token_refresh_failed(auth, accounts, credentials, telemetry, mocker):
    await accounts.update(make_account(EBAY, expired=True))
    await credentials.store_token(EBAY, "old-token")
    mocker.patch.object(accounts, "refresh_access_token", new=AsyncMock(side_effect=HTTPError(400, "invalid_grant")))

    with pytest.raises(TokenRefreshFailedError) as exc_info:
        await auth.refresh_token(EBAY)

    assert isinstance(exc_info.value.__cause__, HTTPError)
    assert exc_info.value.platform == EBAY
    # Nothing changed
    assert await credentials.retrieve_token(EBAY) == "old-token"
    assert (await accounts.get_account(EBAY)).is_token_expired
    assert (await telemetry.snapshot()).token_refreshes == 0


async def test_concurrent_callers_share_refresh_failure(auth, accounts, mocker):
    await accounts.update(make_account(EBAY, expired=True))

    async def failing_exchange(platform, refresh_token):
        await asyncio.sleep(0.01)
        raise HTTPError(500)

    exchange = mocker.patch.object(accounts, "refresh_access_token", new=AsyncMock(side_effect=failing_exchange))

    results = await asyncio.gather(*(auth.refresh_token(EBAY) for _ in range(3)), return_exceptions=True)

    assert all(isinstance(result, TokenRefreshFailedError) for result in results)
    assert exchange.await_count == 1


async def test_refresh_after_completed_refresh_runs_again(auth, accounts, mocker):
    """The shared refresh only covers callers that overlap with it"""
    await accounts.update(make_account(EBAY, expired=True))
    exchange = mocker.patch.object(
        accounts,
        "refresh_access_token",
        new=AsyncMock(return_value=TokenGrant(access_token="new-token"))
    )

    await auth.refresh_token(EBAY)
    await auth.refresh_token(EBAY)

    assert exchange.await_count == 2


async def test_refreshes_for_different_platforms_are_independent(auth, accounts, mocker):
    await accounts.update(make_account(EBAY, expired=True))
    await accounts.update(make_account(MarketplacePlatform.MERCARI, expired=True))
    exchange = mocker.patch.object(
        accounts,
        "refresh_access_token",
        new=AsyncMock(return_value=TokenGrant(access_token="new-token"))
    )

    await asyncio.gather(auth.refresh_token(EBAY), auth.refresh_token(MarketplacePlatform.MERCARI))

    assert exchange.await_count == 2
