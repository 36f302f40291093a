from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from uuid import UUID
from datetime import datetime


class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="Login email, unique across all users")
    password: str = Field(..., min_length=6, max_length=50, description="Plain password, stored as a bcrypt hash")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None

    @field_validator("email", "password", "name", "is_active")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class UserSummary(BaseModel):
    id: UUID
    name: str
    email: str

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: UUID = Field(..., description="User UUID")
    email: str = Field(..., description="Login email")
    name: str = Field(..., description="Display name")
    is_active: bool = Field(..., description="Whether the account is active")
    created_at: datetime = Field(..., description="Registration timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    class Config:
        from_attributes = True


class UserStatistics(BaseModel):
    total_purchases: int
    total_spent: float
    wishlist_count: int
    total_reviews: int
    average_rating_given: float
    member_since: datetime
    is_active: bool


class UserProfileResponse(UserResponse):
    statistics: UserStatistics
