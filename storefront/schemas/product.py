from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict
from uuid import UUID
from datetime import datetime

from storefront.schemas.category import CategorySummary


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: str = Field(..., min_length=1, max_length=1000, description="Detailed product description")
    price: float = Field(..., gt=0, description="Product price in currency units")
    category_id: Optional[UUID] = Field(None, description="Category UUID - Use GET /products/categories to get available categories")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200, description="Product name")
    description: Optional[str] = Field(None, min_length=1, max_length=1000, description="Detailed product description")
    price: Optional[float] = Field(None, gt=0, description="Product price in currency units")
    category_id: Optional[UUID] = Field(None, description="Category UUID")
    is_active: Optional[bool] = Field(None, description="Product availability status")

    @field_validator("name", "description", "price", "is_active")
    @classmethod
    def reject_null(cls, value):
        # category_id may be null to uncategorize a product; these columns may not
        if value is None:
            raise ValueError("may not be null")
        return value


class ProductRatingSummary(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[str, int]


class ProductSummary(BaseModel):
    id: UUID
    name: str
    description: str
    price: float

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    id: UUID = Field(..., description="Product UUID")
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    price: float = Field(..., description="Product price")
    category_id: Optional[UUID] = Field(None, description="Category UUID")
    category: Optional[CategorySummary] = Field(None, description="Resolved category, null when missing")
    is_active: bool = Field(..., description="Product availability status")
    total_purchases: int = Field(..., description="Number of purchases made")
    average_rating: float = Field(..., description="Running mean of review ratings")
    total_reviews: int = Field(..., description="Number of reviews counted in the average")
    review_stats: Optional[ProductRatingSummary] = Field(None, description="Rating breakdown of active reviews")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int
    page: int
    page_size: int
    has_next: bool
