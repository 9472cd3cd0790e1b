"""
Storefront Service
Product reviews (product metadata) and customer wishlists (customer metadata)

Author: Store Insights
Date: 2026-01-21
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.domain.engagement import (
    REVIEWS_METADATA_KEY,
    WISHLIST_METADATA_KEY,
    Review,
    ReviewCreate,
    WishlistItem,
    WishlistItemCreate,
)
from store_insights.services.formatting import ensure_aware, round_half_up, utc_now

logger = logging.getLogger(__name__)


class WishlistItemNotFound(LookupError):
    pass


def _parse_entries(metadata: Dict[str, Any], key: str, model):
    raw = metadata.get(key) or []
    if not isinstance(raw, list):
        return []
    entries = []
    for entry in raw:
        try:
            entries.append(model.model_validate(entry))
        except ValueError:
            logger.warning(f"Skipping malformed {key} entry: {entry!r}")
    return entries


def review_summary(product_id: str, reviews: List[Review]) -> Dict[str, Any]:
    """Reviews newest first with the average rating (one decimal)"""
    ordered = sorted(reviews, key=lambda r: ensure_aware(r.created_at), reverse=True)
    average = round_half_up(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0.0
    return {
        'product_id': product_id,
        'reviews': [r.model_dump(mode='json') for r in ordered],
        'average_rating': average,
        'total_reviews': len(reviews),
    }


class StorefrontService:

    def __init__(self, connector: MedusaConnector):
        self.connector = connector

    # =========================================================================
    # Reviews
    # =========================================================================

    async def get_reviews(self, product_id: str) -> Dict[str, Any]:
        product = await self.connector.get_product(product_id)
        return review_summary(product.id, _parse_entries(product.metadata, REVIEWS_METADATA_KEY, Review))

    async def _has_purchased(self, customer_id: Optional[str], product_id: str) -> bool:
        if not customer_id:
            return False
        orders = await self.connector.list_orders(customer_id=customer_id)
        return any(
            item.resolved_product_id == product_id
            for order in orders if order.status != 'canceled'
            for item in order.items
        )

    async def submit_review(self, data: ReviewCreate) -> Review:
        product = await self.connector.get_product(data.product_id)
        review = Review(
            id=f"rev_{uuid.uuid4().hex[:16]}",
            product_id=product.id,
            customer_id=data.customer_id,
            customer_name=data.customer_name,
            rating=data.rating,
            title=data.title,
            comment=data.comment,
            created_at=utc_now(),
            verified_purchase=await self._has_purchased(data.customer_id, product.id),
        )

        stored = [r.model_dump(mode='json') for r in _parse_entries(product.metadata, REVIEWS_METADATA_KEY, Review)]
        stored.append(review.model_dump(mode='json'))
        await self.connector.update_product(product.id, {
            'metadata': {**product.metadata, REVIEWS_METADATA_KEY: stored},
        })
        logger.info(f"Review {review.id} ({review.rating}/5) saved for product {product.id}")
        return review

    # =========================================================================
    # Wishlist
    # =========================================================================

    async def get_wishlist(self, customer_id: str) -> Dict[str, Any]:
        customer = await self.connector.get_customer(customer_id)
        items = _parse_entries(customer.metadata, WISHLIST_METADATA_KEY, WishlistItem)
        return {
            'customer_id': customer.id,
            'items': [i.model_dump(mode='json') for i in items],
            'total_items': len(items),
        }

    async def add_to_wishlist(self, data: WishlistItemCreate) -> WishlistItem:
        """Add a product; adding the same product/variant again returns the existing entry"""
        customer = await self.connector.get_customer(data.customer_id)
        items = _parse_entries(customer.metadata, WISHLIST_METADATA_KEY, WishlistItem)
        for item in items:
            if item.product_id == data.product_id and item.variant_id == data.variant_id:
                return item

        product = await self.connector.get_product(data.product_id)
        item = WishlistItem(
            id=f"wish_{uuid.uuid4().hex[:16]}",
            customer_id=customer.id,
            product_id=product.id,
            variant_id=data.variant_id,
            product_title=product.title,
            product_handle=product.handle,
            added_at=utc_now(),
        )
        items.append(item)
        await self._save_wishlist(customer.id, customer.metadata, items)
        logger.info(f"Customer {customer.id} wishlisted product {product.id}")
        return item

    async def remove_from_wishlist(self, customer_id: str, item_id: str) -> str:
        customer = await self.connector.get_customer(customer_id)
        items = _parse_entries(customer.metadata, WISHLIST_METADATA_KEY, WishlistItem)
        remaining = [i for i in items if i.id != item_id]
        if len(remaining) == len(items):
            raise WishlistItemNotFound(f"Wishlist item {item_id} not found")

        await self._save_wishlist(customer.id, customer.metadata, remaining)
        return item_id

    async def _save_wishlist(self, customer_id: str, metadata: Dict[str, Any], items: List[WishlistItem]) -> None:
        await self.connector.update_customer(customer_id, {
            'metadata': {**metadata, WISHLIST_METADATA_KEY: [i.model_dump(mode='json') for i in items]},
        })
