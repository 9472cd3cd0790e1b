"""
Customer and Cart Domain Models

Author: Store Insights
Date: 2026-01-16
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from store_insights.domain.fields import lenient_datetime, lenient_float, lenient_int


class Customer(BaseModel):
    """Customer projection (admin API)"""

    id: str = Field(..., description="Customer ID")
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_default(cls, value):
        return lenient_datetime(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value):
        return value if isinstance(value, dict) else {}

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class CartItem(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    quantity: int = 0
    unit_price: float = 0
    thumbnail: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_default(cls, value):
        return lenient_int(value)

    @field_validator("unit_price", mode="before")
    @classmethod
    def _price_default(cls, value):
        return lenient_float(value)


class CartRegion(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    currency_code: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class Cart(BaseModel):
    """
    Cart projection

    A cart counts as abandoned when it has an email and items but was never
    completed (see services.order_stats.abandoned_carts).
    """

    id: str
    email: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total: float = 0
    items: List[CartItem] = Field(default_factory=list)
    region: Optional[CartRegion] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("completed_at", "created_at", "updated_at", mode="before")
    @classmethod
    def _timestamp_default(cls, value):
        return lenient_datetime(value)

    @field_validator("items", mode="before")
    @classmethod
    def _list_default(cls, value):
        return value if isinstance(value, list) else []

    @field_validator("total", mode="before")
    @classmethod
    def _total_default(cls, value):
        return lenient_float(value)
