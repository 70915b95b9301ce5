from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketsync.core.enums import MarketplacePlatform
from marketsync.models.listing import ListingStats
from marketsync.models.order import Order, OrderFees
from marketsync.schemas.platform.common import UtcDatetime


class EbayCreateListingResponse(BaseModel):
    item_id: str = Field(alias="itemId")


class EbayListingStatsResponse(BaseModel):
    stats: ListingStats


class EbayOrderFees(BaseModel):
    platform_fee: Decimal = Field(alias="platformFee")
    processing_fee: Decimal = Field(alias="processingFee")
    shipping_fee: Optional[Decimal] = Field(default=None, alias="shippingFee")

    def to_order_fees(self) -> OrderFees:
        return OrderFees(
            platform_fee=self.platform_fee,
            payment_processing_fee=self.processing_fee,
            shipping_fee=self.shipping_fee
        )


class EbayOrder(BaseModel):
    order_id: str = Field(alias="orderId")
    buyer_name: str = Field(alias="buyerName")
    item_price: Decimal = Field(alias="itemPrice")
    total_amount: Decimal = Field(alias="totalAmount")
    fees: EbayOrderFees
    created_at: UtcDatetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    def to_order(self) -> Order:
        # eBay order lines are always single-quantity in this API
        return Order(
            platform_order_id=self.order_id,
            platform=MarketplacePlatform.EBAY,
            buyer_name=self.buyer_name,
            quantity=1,
            item_price=self.item_price,
            total_amount=self.total_amount,
            fees=self.fees.to_order_fees(),
            created_at=self.created_at
        )


class EbayOrdersResponse(BaseModel):
    orders: List[EbayOrder]
