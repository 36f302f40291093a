from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict
from uuid import UUID
from datetime import datetime

from storefront.schemas.user import UserSummary
from storefront.schemas.product import ProductSummary


class ReviewCreate(BaseModel):
    user_id: UUID = Field(..., description="Author UUID")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: str = Field(..., min_length=1, max_length=1000, description="Review text")


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, min_length=1, max_length=1000)

    @field_validator("rating", "comment")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class ReviewResponse(BaseModel):
    id: UUID
    user_id: UUID
    product_id: UUID
    rating: int
    comment: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None

    class Config:
        from_attributes = True


class RatingStats(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[str, int]


class TopRatedProduct(BaseModel):
    product: ProductSummary
    average_rating: float
    total_reviews: int
