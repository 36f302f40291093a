from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from uuid import UUID
from datetime import datetime

from storefront.schemas.user import UserSummary
from storefront.schemas.product import ProductSummary

Priority = Literal["low", "medium", "high"]


class WishlistAdd(BaseModel):
    product_id: UUID = Field(..., description="Product UUID")
    priority: Optional[Priority] = Field(None, description="Defaults to medium")


class WishlistUpdate(BaseModel):
    priority: Optional[Priority] = None
    is_notified: Optional[bool] = None

    @field_validator("priority", "is_notified")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class WishlistItemResponse(BaseModel):
    id: UUID
    user_id: UUID
    product_id: UUID
    priority: str
    is_notified: bool
    added_at: datetime
    user: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None

    class Config:
        from_attributes = True


class WishlistUserStatistics(BaseModel):
    total_items: int
    high_priority_items: int
    medium_priority_items: int
    low_priority_items: int


class PopularWishlistProduct(BaseModel):
    product: ProductSummary
    wishlist_count: int
    unique_users: int
