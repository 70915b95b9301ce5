# tests/unit/integrations/platforms/test_mercari_adapter.py
import json
from decimal import Decimal

import pytest

from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.core.exceptions import DecodingError
from marketsync.integrations.platforms.mercari import MercariAdapter


@pytest.fixture
def adapter(gateway, settings):
    return MercariAdapter(gateway, settings)


async def test_create_listing(adapter, api, product):
    api.route("POST", "/api/v1/listings", {"listing_id": "m-9"})

    assert await adapter.create_listing(product) == "m-9"


async def test_end_listing_deletes(adapter, api):
    api.route("DELETE", "/api/v1/listings/m-9", {})

    await adapter.end_listing("m-9")

    assert api.requests[0].method == "DELETE"


async def test_sold_out_listing_is_not_active(adapter, api):
    api.route("GET", "/api/v1/listings/m-9/stats", {"views": 8, "status": "sold_out"})

    stats = await adapter.get_listing_stats("m-9")

    assert stats.views == 8
    assert stats.active is False


async def test_fetch_orders_maps_status_and_fees(adapter, api):
    api.route("GET", "/api/v1/orders", {"orders": [{
        "order_id": "M-1",
        "buyer_name": "Linus",
        "price": "30.00",
        "total": "34.00",
        "quantity": 1,
        "status": "wait_shipping",
        "fees": {"selling_fee": "3.00", "processing_fee": "1.20", "shipping_fee": "4.00"},
        "created_at": "2024-03-04T10:00:00Z"
    }]})

    orders = await adapter.fetch_orders()

    order = orders[0]
    assert order.platform == MarketplacePlatform.MERCARI
    assert order.status == OrderStatus.PAID
    assert order.item_price == Decimal("30.00")
    assert order.fees.platform_fee == Decimal("3.00")
    assert order.fees.total_fees == Decimal("8.20")


async def test_update_order_status_puts(adapter, api):
    api.route("PUT", "/api/v1/orders/M-1/status", {})

    await adapter.update_order_status("M-1", OrderStatus.SHIPPED)

    assert api.requests[0].method == "PUT"
    assert json.loads(api.requests[0].content) == {"status": "shipped"}


async def test_empty_stats_body_raises_decoding_error(adapter, api):
    api.route("GET", "/api/v1/listings/m-9/stats")

    with pytest.raises(DecodingError):
        await adapter.get_listing_stats("m-9")


async def test_empty_orders_body_raises_decoding_error(adapter, api):
    api.route("GET", "/api/v1/orders")

    with pytest.raises(DecodingError):
        await adapter.fetch_orders()
