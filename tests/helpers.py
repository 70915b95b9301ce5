# tests/helpers.py
import json
from datetime import timedelta
from decimal import Decimal

import httpx

from marketsync.core.enums import MarketplacePlatform
from marketsync.core.utils import utcnow
from marketsync.models.account import PlatformAccount
from marketsync.models.product import Product, ProductImage


def make_account(platform=MarketplacePlatform.EBAY, expired=False, refresh_token="refresh-1", access_token="old-token"):
    """PlatformAccount whose token expires an hour from now, or expired an hour ago"""
    offset = timedelta(hours=-1) if expired else timedelta(hours=1)
    return PlatformAccount(
        platform=platform,
        account_name=f"{platform.display_name} User",
        access_token=access_token,
        refresh_token=refresh_token,
        token_expires_at=utcnow() + offset,
    )


def make_product(title="Vintage Jacket", price="49.99", **kwargs):
    return Product(
        title=title,
        description="Warm and waterproof",
        price=Decimal(price),
        quantity=kwargs.pop("quantity", 1),
        category="clothing",
        images=kwargs.pop("images", [
            ProductImage(remote_url="https://img.example.com/2.jpg", order=2),
            ProductImage(remote_url="https://img.example.com/1.jpg", order=1),
            ProductImage(remote_url=None, order=0),
        ]),
        **kwargs
    )


def json_response(data, status_code=200, headers=None):
    return httpx.Response(status_code, content=json.dumps(data).encode(), headers=headers)


def mock_client(handler):
    """AsyncClient whose requests are answered by handler(request)"""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
