# tests/unit/services/test_order_aggregator.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.core.exceptions import HTTPError, RateLimitedError
from marketsync.integrations.platforms.ebay import EbayAdapter
from marketsync.integrations.platforms.mercari import MercariAdapter
from marketsync.models.order import Order, OrderFees
from marketsync.services.gateway import MarketplaceGateway
from marketsync.services.order_aggregator import OrderAggregator

from tests.helpers import json_response, mock_client
from tests.mocks.mock_platform import MockAdapter

EBAY = MarketplacePlatform.EBAY
MERCARI = MarketplacePlatform.MERCARI
FACEBOOK = MarketplacePlatform.FACEBOOK

BASE_TIME = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_order(platform, platform_order_id, hours=0, **kwargs):
    return Order(
        platform_order_id=platform_order_id,
        platform=platform,
        buyer_name="Buyer",
        item_price=Decimal("10.00"),
        total_amount=Decimal("12.00"),
        fees=OrderFees(platform_fee=Decimal("1.00"), payment_processing_fee=Decimal("0.30")),
        created_at=BASE_TIME + timedelta(hours=hours),
        **kwargs
    )


@pytest.fixture
def adapters(settings):
    return {
        EBAY: MockAdapter(EBAY, settings, orders=[make_order(EBAY, "E-1", hours=1), make_order(EBAY, "E-2", hours=5)]),
        MERCARI: MockAdapter(MERCARI, settings, orders=[make_order(MERCARI, "M-1", hours=3)]),
        FACEBOOK: MockAdapter(FACEBOOK, settings, orders=[]),
    }


@pytest.fixture
def aggregator(adapters, store):
    return OrderAggregator(adapters, store)


"""
1. Fetch Tests
"""

async def test_fetch_all_merges_and_sorts_newest_first(aggregator, store):
    """2 + 1 + 0 orders are all persisted, newest first"""
    orders = await aggregator.fetch_all()

    assert [order.platform_order_id for order in orders] == ["E-2", "M-1", "E-1"]
    assert len(await store.fetch(Order)) == 3


async def test_fetch_all_failure_persists_nothing(aggregator, adapters, store):
    adapters[MERCARI].should_fail = True
    adapters[MERCARI].error = RateLimitedError("60")

    with pytest.raises(RateLimitedError):
        await aggregator.fetch_all()

    assert await store.fetch(Order) == []


async def test_repeated_fetch_keeps_local_ids(aggregator, store):
    first = {order.platform_order_id: order.id for order in await aggregator.fetch_all()}
    second = {order.platform_order_id: order.id for order in await aggregator.fetch_all()}

    assert first == second
    assert len(await store.fetch(Order)) == 3


async def test_same_order_id_on_different_platforms_is_kept(adapters, store):
    adapters[FACEBOOK].orders = [make_order(FACEBOOK, "E-1", hours=2)]
    aggregator = OrderAggregator(adapters, store)

    orders = await aggregator.fetch_all()

    assert len(orders) == 4


async def test_load_orders_sorted(aggregator, store):
    await store.save(make_order(EBAY, "old", hours=-10))
    await store.save(make_order(EBAY, "new", hours=10))

    orders = await aggregator.load_orders()

    assert [order.platform_order_id for order in orders] == ["new", "old"]


async def test_wire_times_without_offset_sort_with_utc_times(auth, settings, store):
    """One platform omits the UTC offset, another sends Z; both are stored and sortable"""
    def handler(request):
        if request.url.path == "/api/v1.0/orders":
            return json_response({"orders": [{
                "orderId": "E-1",
                "buyerName": "Ada",
                "itemPrice": "10.00",
                "totalAmount": "10.00",
                "fees": {"platformFee": "1.00", "processingFee": "0.30"},
                "createdAt": "2024-03-01T10:00:00"
            }]})
        return json_response({"orders": [{
            "order_id": "M-1",
            "buyer_name": "Linus",
            "price": "10.00",
            "total": "10.00",
            "created_at": "2024-03-01T11:00:00Z"
        }]})

    gateway = MarketplaceGateway(auth, settings, http_client=mock_client(handler))
    aggregator = OrderAggregator(
        {EBAY: EbayAdapter(gateway, settings), MERCARI: MercariAdapter(gateway, settings)},
        store
    )

    orders = await aggregator.fetch_all()

    assert [order.platform_order_id for order in orders] == ["M-1", "E-1"]
    assert all(order.created_at.tzinfo is not None for order in orders)
    assert [order.platform_order_id for order in await aggregator.load_orders()] == ["M-1", "E-1"]


"""
2. Status Update Tests
"""

async def test_update_unknown_order_is_noop(aggregator, adapters):
    await aggregator.update_order_status(uuid4(), OrderStatus.SHIPPED, EBAY)

    assert adapters[EBAY].status_calls == []


async def test_update_order_status_pushes_and_persists(aggregator, adapters, store):
    order = make_order(EBAY, "E-9")
    await store.save(order)

    await aggregator.update_order_status(order.id, OrderStatus.SHIPPED, EBAY)

    assert adapters[EBAY].status_calls == [{"platform_order_id": "E-9", "status": OrderStatus.SHIPPED}]
    stored = await store.get(Order, order.id)
    assert stored.status == OrderStatus.SHIPPED
    assert stored.shipped_at is not None
    assert stored.updated_at is not None
    assert stored.paid_at is None


async def test_update_to_paid_stamps_paid_at(aggregator, store):
    order = make_order(MERCARI, "M-9")
    await store.save(order)

    await aggregator.update_order_status(order.id, OrderStatus.PAID, MERCARI)

    assert (await store.get(Order, order.id)).paid_at is not None


async def test_update_push_failure_leaves_order_unchanged(aggregator, adapters, store):
    order = make_order(EBAY, "E-9")
    await store.save(order)
    adapters[EBAY].should_fail = True

    with pytest.raises(HTTPError):
        await aggregator.update_order_status(order.id, OrderStatus.SHIPPED, EBAY)

    stored = await store.get(Order, order.id)
    assert stored.status == OrderStatus.PENDING
    assert stored.updated_at is None
