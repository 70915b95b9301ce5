from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from marketsync.core.enums import MarketplacePlatform
from marketsync.models.listing import ListingStats
from marketsync.models.order import Order, OrderFees
from marketsync.schemas.platform.common import UtcDatetime


class FacebookCreateListingResponse(BaseModel):
    id: str


class FacebookInsightsResponse(BaseModel):
    """Graph insights edge for a listing"""
    views: int
    is_active: bool

    def to_stats(self) -> ListingStats:
        return ListingStats(views=self.views, active=self.is_active)


class FacebookBuyer(BaseModel):
    name: str


class FacebookOrderFees(BaseModel):
    marketplace_fee: Decimal = Decimal("0")
    payment_fee: Decimal = Decimal("0")
    shipping_fee: Optional[Decimal] = None

    def to_order_fees(self) -> OrderFees:
        return OrderFees(
            platform_fee=self.marketplace_fee,
            payment_processing_fee=self.payment_fee,
            shipping_fee=self.shipping_fee
        )


class FacebookOrder(BaseModel):
    id: str
    buyer: FacebookBuyer
    item_price: Decimal
    total: Decimal
    fees: FacebookOrderFees = Field(default_factory=FacebookOrderFees)
    created_time: UtcDatetime
    quantity: int = 1

    def to_order(self) -> Order:
        return Order(
            platform_order_id=self.id,
            platform=MarketplacePlatform.FACEBOOK,
            buyer_name=self.buyer.name,
            quantity=self.quantity,
            item_price=self.item_price,
            total_amount=self.total,
            fees=self.fees.to_order_fees(),
            created_at=self.created_time
        )


class FacebookOrdersResponse(BaseModel):
    data: List[FacebookOrder]
