from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from marketsync.core.enums import MarketplacePlatform, OrderStatus


class OrderFees(BaseModel):
    platform_fee: Decimal = Decimal("0")
    payment_processing_fee: Decimal = Decimal("0")
    shipping_fee: Optional[Decimal] = None

    @property
    def total_fees(self) -> Decimal:
        return self.platform_fee + self.payment_processing_fee + (self.shipping_fee or Decimal("0"))


class Order(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    platform_order_id: str
    platform: MarketplacePlatform
    product_id: Optional[UUID] = None
    buyer_name: str
    quantity: int = 1
    item_price: Decimal
    total_amount: Decimal
    fees: OrderFees = Field(default_factory=OrderFees)
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime
    updated_at: Optional[datetime] = None
    estimated_delivery_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None

    @property
    def earnings_date(self) -> datetime:
        """When the sale counts for earnings: payment time, else creation time."""
        return self.paid_at or self.created_at
