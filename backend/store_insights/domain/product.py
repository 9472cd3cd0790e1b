"""
Product Domain Models

Projections of catalog records (products, variants, categories) as returned
by the commerce backend admin API.

Author: Store Insights
Date: 2026-01-16
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from store_insights.domain.fields import lenient_datetime, lenient_int


class ProductCategory(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    handle: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ProductVariant(BaseModel):
    """
    Product variant

    inventory_quantity is only present when the backend is asked to expand
    inventory; missing values count as 0 (out of stock).
    """

    id: Optional[str] = None
    title: Optional[str] = None
    sku: Optional[str] = None
    inventory_quantity: int = 0
    manage_inventory: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("inventory_quantity", mode="before")
    @classmethod
    def _stock_default(cls, value):
        return lenient_int(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value):
        return value if isinstance(value, dict) else {}


class Product(BaseModel):
    """Product domain model"""

    id: str = Field(..., description="Product ID")
    title: str = Field("Untitled", description="Product title")
    handle: Optional[str] = None
    status: Optional[str] = None
    thumbnail: Optional[str] = None
    created_at: Optional[datetime] = None
    variants: List[ProductVariant] = Field(default_factory=list)
    categories: List[ProductCategory] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", mode="before")
    @classmethod
    def _title_default(cls, value):
        return value or "Untitled"

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_default(cls, value):
        return lenient_datetime(value)

    @field_validator("variants", "categories", mode="before")
    @classmethod
    def _list_default(cls, value):
        return value if isinstance(value, list) else []

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value):
        return value if isinstance(value, dict) else {}
