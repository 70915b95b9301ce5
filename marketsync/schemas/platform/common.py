from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, List

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from marketsync.core.enums import OrderStatus
from marketsync.models.product import Product


def _as_utc(value: datetime) -> datetime:
    # Marketplaces that omit the offset report UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CreateListingRequest(BaseModel):
    """Listing body shared by every platform's create endpoint"""
    title: str
    description: str
    price: Decimal
    quantity: int
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")
    category: str

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_product(cls, product: Product) -> "CreateListingRequest":
        return cls(
            title=product.title,
            description=product.description,
            price=product.price,
            quantity=product.quantity,
            image_urls=product.image_urls,
            category=product.category
        )


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


class EmptyResponse(BaseModel):
    """Body of endpoints whose response content is ignored"""
    model_config = ConfigDict(extra="allow")
