"""
Engagement Domain Models

Request/response schemas for marketing campaigns, coupon codes, order notes,
product reviews and wishlists. These records are persisted in the commerce
backend (campaign/promotion entities and entity metadata).

Author: Store Insights
Date: 2026-01-17
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _strip(value):
    return value.strip() if isinstance(value, str) else value


DiscountType = Literal["percentage", "fixed"]

# Metadata keys on the backend entities that hold engagement records
NOTES_METADATA_KEY = "notes"          # order.metadata
REVIEWS_METADATA_KEY = "reviews"      # product.metadata
WISHLIST_METADATA_KEY = "wishlist"    # customer.metadata


class CampaignCreate(BaseModel):
    """Schema for creating a marketing campaign"""
    name: str = Field(..., min_length=1, max_length=200)
    type: DiscountType = "percentage"
    discount: float = Field(..., gt=0)
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if self.type == "percentage" and self.discount > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self


class Campaign(BaseModel):
    id: str
    name: str
    type: Optional[DiscountType] = None
    status: Literal["scheduled", "active", "expired"]
    discount: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    usage_count: int = 0
    codes: List[str] = Field(default_factory=list)


class CouponCode(BaseModel):
    code: str
    campaign_id: str
    promotion_id: Optional[str] = None


class OrderNoteCreate(BaseModel):
    note: str = Field(..., min_length=1, max_length=2000)
    created_by: str = Field("Admin User", max_length=100)

    @field_validator("note", mode="before")
    @classmethod
    def _strip_note(cls, value):
        return _strip(value)


class OrderNote(BaseModel):
    id: str
    note: str
    created_at: datetime
    created_by: str


class ReviewCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=4000)
    title: Optional[str] = Field(None, max_length=120)
    customer_id: Optional[str] = None
    customer_name: Optional[str] = Field(None, max_length=120)

    @field_validator("comment", mode="before")
    @classmethod
    def _strip_comment(cls, value):
        return _strip(value)


class Review(BaseModel):
    id: str
    product_id: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    rating: int
    title: Optional[str] = None
    comment: str
    created_at: datetime
    verified_purchase: bool = False


class WishlistItemCreate(BaseModel):
    customer_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    variant_id: Optional[str] = None


class WishlistItem(BaseModel):
    id: str
    customer_id: str
    product_id: str
    variant_id: Optional[str] = None
    product_title: Optional[str] = None
    product_handle: Optional[str] = None
    added_at: datetime
