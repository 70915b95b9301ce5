from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from marketsync.core.enums import MarketplacePlatform, OrderStatus
from marketsync.models.listing import ListingStats
from marketsync.models.order import Order, OrderFees
from marketsync.schemas.platform.common import UtcDatetime

# Mercari order states that don't share a name with OrderStatus
MERCARI_STATUS_MAP = {
    "wait_payment": OrderStatus.PENDING,
    "wait_shipping": OrderStatus.PAID,
    "shipped": OrderStatus.SHIPPED,
    "done": OrderStatus.DELIVERED,
    "cancelled": OrderStatus.CANCELLED,
}


class MercariCreateListingResponse(BaseModel):
    listing_id: str


class MercariListingStatsResponse(BaseModel):
    views: int
    status: str

    def to_stats(self) -> ListingStats:
        return ListingStats(views=self.views, active=self.status == "on_sale")


class MercariOrderFees(BaseModel):
    selling_fee: Decimal = Decimal("0")
    processing_fee: Decimal = Decimal("0")
    shipping_fee: Optional[Decimal] = None

    def to_order_fees(self) -> OrderFees:
        return OrderFees(
            platform_fee=self.selling_fee,
            payment_processing_fee=self.processing_fee,
            shipping_fee=self.shipping_fee
        )


class MercariOrder(BaseModel):
    order_id: str
    buyer_name: str
    price: Decimal
    total: Decimal
    quantity: int = 1
    status: Optional[str] = None
    fees: MercariOrderFees = Field(default_factory=MercariOrderFees)
    created_at: UtcDatetime

    def to_order(self) -> Order:
        return Order(
            platform_order_id=self.order_id,
            platform=MarketplacePlatform.MERCARI,
            buyer_name=self.buyer_name,
            quantity=self.quantity,
            item_price=self.price,
            total_amount=self.total,
            fees=self.fees.to_order_fees(),
            status=MERCARI_STATUS_MAP.get(self.status, OrderStatus.PENDING),
            created_at=self.created_at
        )


class MercariOrdersResponse(BaseModel):
    orders: List[MercariOrder]
