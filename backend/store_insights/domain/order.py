"""
Order Domain Models

Lenient projections of the commerce backend's order JSON. Missing or
unparseable amounts count as 0, unparseable timestamps as missing and lists
default to empty, so aggregations never fail on partially expanded or
malformed records.

Author: Store Insights
Date: 2026-01-16
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from store_insights.domain.fields import lenient_datetime, lenient_float, lenient_int, lenient_optional_int


class ProductCategoryRef(BaseModel):
    """Category reference embedded in an expanded variant"""
    id: Optional[str] = None
    name: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class VariantProductRef(BaseModel):
    """Product reference embedded in an expanded variant"""
    id: Optional[str] = None
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    categories: List[ProductCategoryRef] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class LineItemVariant(BaseModel):
    """Variant as expanded on an order line item"""
    id: Optional[str] = None
    title: Optional[str] = None
    sku: Optional[str] = None
    product_id: Optional[str] = None
    product: Optional[VariantProductRef] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value):
        return value if isinstance(value, dict) else {}

    @property
    def cost_price(self) -> float:
        """Unit cost recorded in variant metadata (0 when absent)"""
        try:
            return float(self.metadata.get("cost_price") or 0)
        except (TypeError, ValueError):
            return 0.0


class OrderItem(BaseModel):
    """
    Order line item

    Fields:
        id: Line item ID
        title: Product title at order time
        product_id: Product reference (may be missing on older records)
        variant_id: Variant reference
        quantity: Units ordered
        unit_price: Price per unit (currency units as reported by the backend)
        variant: Expanded variant (optional)
    """

    id: Optional[str] = None
    title: Optional[str] = None
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    quantity: int = 0
    unit_price: float = 0
    thumbnail: Optional[str] = None
    variant: Optional[LineItemVariant] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_default(cls, value):
        return lenient_int(value)

    @field_validator("unit_price", mode="before")
    @classmethod
    def _price_default(cls, value):
        return lenient_float(value)

    @property
    def resolved_product_id(self) -> Optional[str]:
        """Product id from the variant, falling back to the line item"""
        if self.variant and self.variant.product_id:
            return self.variant.product_id
        return self.product_id

    @property
    def product_title(self) -> str:
        if self.title:
            return self.title
        if self.variant and self.variant.product and self.variant.product.title:
            return self.variant.product.title
        return "Unknown Product"

    @property
    def category_name(self) -> str:
        if self.variant and self.variant.product and self.variant.product.categories:
            name = self.variant.product.categories[0].name
            if name:
                return name
        return "Uncategorized"

    @property
    def image(self) -> Optional[str]:
        if self.thumbnail:
            return self.thumbnail
        if self.variant and self.variant.product:
            return self.variant.product.thumbnail
        return None


class ShippingAddress(BaseModel):
    """Shipping address projection"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address_1: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country_code: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class OrderCustomer(BaseModel):
    """Customer as expanded on an order"""
    id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Order(BaseModel):
    """
    Order domain model - projection of a commerce backend order

    Fields:
        id: Backend order ID
        display_id: Human-readable order number
        email: Customer email on the order
        status: Order status (pending, completed, canceled, ...)
        payment_status: Payment status (awaiting, not_paid, captured, authorized, requires_action, ...)
        fulfillment_status: Fulfillment status (not_fulfilled, shipped, delivered, ...)

        # Financial information (currency units as reported by the backend)
        total, subtotal, tax_total, shipping_total, discount_total

        created_at: When the order was placed
        customer_id / customer: Customer reference
        shipping_address: Delivery address (city is used for city breakdowns)
        items: Line items
        metadata: Free-form metadata (notes, completion markers)
    """

    id: str = Field(..., description="Order ID")
    display_id: Optional[int] = Field(None, description="Human-readable order number")
    email: Optional[str] = Field(None, description="Customer email")
    status: Optional[str] = Field(None, description="Order status")
    payment_status: Optional[str] = Field(None, description="Payment status")
    fulfillment_status: Optional[str] = Field(None, description="Fulfillment status")
    currency_code: Optional[str] = Field(None, description="Currency code")

    total: float = Field(0, description="Order total")
    subtotal: float = Field(0, description="Subtotal before tax/shipping")
    tax_total: float = Field(0, description="Tax amount")
    shipping_total: float = Field(0, description="Shipping amount")
    discount_total: float = Field(0, description="Discount amount")

    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    customer_id: Optional[str] = Field(None, description="Customer ID")
    customer: Optional[OrderCustomer] = None
    shipping_address: Optional[ShippingAddress] = None
    items: List[OrderItem] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("total", "subtotal", "tax_total", "shipping_total", "discount_total", mode="before")
    @classmethod
    def _amount_default(cls, value):
        return lenient_float(value)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _timestamp_default(cls, value):
        return lenient_datetime(value)

    @field_validator("display_id", mode="before")
    @classmethod
    def _display_id_default(cls, value):
        return lenient_optional_int(value)

    @field_validator("items", mode="before")
    @classmethod
    def _list_default(cls, value):
        return value if isinstance(value, list) else []

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value):
        return value if isinstance(value, dict) else {}

    @property
    def order_number(self) -> str:
        """Display id, or the first 8 characters of the id"""
        if self.display_id is not None:
            return str(self.display_id)
        return self.id[:8]

    @property
    def city(self) -> Optional[str]:
        return self.shipping_address.city if self.shipping_address else None

    @property
    def customer_label(self) -> str:
        """Customer name when expanded, else the order email, else Guest"""
        if self.customer and self.customer.first_name:
            return self.customer.full_name
        return self.email or "Guest"

