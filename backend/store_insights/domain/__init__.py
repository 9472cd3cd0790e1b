"""
Domain Layer - Business Entities

Pydantic projections of the commerce backend's records plus the request and
response schemas of the routes this service exposes.
"""
from store_insights.domain.order import Order, OrderItem, ShippingAddress
from store_insights.domain.product import Product, ProductVariant, ProductCategory
from store_insights.domain.customer import Customer, Cart, CartItem

__all__ = [
    'Order', 'OrderItem', 'ShippingAddress',
    'Product', 'ProductVariant', 'ProductCategory',
    'Customer', 'Cart', 'CartItem',
]
