from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from marketsync.core.enums import ProductCondition
from marketsync.core.utils import utcnow


class ProductImage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    remote_url: Optional[str] = None
    order: int = 0


class Product(BaseModel):
    """Catalogue item. Listings and jobs refer to it by id only."""
    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    price: Decimal
    quantity: int = 1
    category: str = ""
    condition: ProductCondition = ProductCondition.GOOD
    images: List[ProductImage] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator('price', mode='before')
    @classmethod
    def validate_price(cls, v):
        if v is None or v == '':
            raise ValueError('Price is required')
        try:
            price = Decimal(str(v))
        except (ArithmeticError, ValueError, TypeError):
            raise ValueError(f'Price must be a valid number, got: {v}')
        if price < 0:
            raise ValueError('Price must not be negative')
        return price

    @field_validator('quantity')
    @classmethod
    def validate_quantity(cls, v):
        if v < 0:
            raise ValueError('Quantity must not be negative')
        return v

    @property
    def image_urls(self) -> List[str]:
        """Remote image URLs in display order; local-only images are skipped."""
        ordered = sorted(self.images, key=lambda image: image.order)
        return [image.remote_url for image in ordered if image.remote_url]
