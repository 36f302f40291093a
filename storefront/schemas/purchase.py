from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from storefront.schemas.user import UserSummary
from storefront.schemas.product import ProductSummary


class PurchaseCreate(BaseModel):
    user_id: UUID = Field(..., description="Buyer UUID")
    product_id: UUID = Field(..., description="Product UUID")


class PurchaseResponse(BaseModel):
    id: UUID
    user_id: UUID
    product_id: UUID
    price: float = Field(..., description="Product price at purchase time")
    status: str = Field(..., description="completed, cancelled or pending")
    purchase_date: datetime
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None
    product: Optional[ProductSummary] = None

    class Config:
        from_attributes = True
