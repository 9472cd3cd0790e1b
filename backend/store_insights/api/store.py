"""
Store API Endpoints
Product reviews and customer wishlists for the storefront

Author: Store Insights
Date: 2026-01-24
"""
from fastapi import APIRouter, Depends

from store_insights.api.deps import get_storefront_service
from store_insights.api.responses import http_error
from store_insights.core.auth import verify_publishable_key
from store_insights.domain.engagement import ReviewCreate, WishlistItemCreate
from store_insights.services.storefront_service import StorefrontService

router = APIRouter(prefix="/store", tags=["Store"], dependencies=[Depends(verify_publishable_key)])


# ============================================================================
# Reviews
# ============================================================================

@router.get("/reviews/{product_id}")
async def get_product_reviews(product_id: str, service: StorefrontService = Depends(get_storefront_service)):
    """Reviews for a product (newest first), average rating and total"""
    try:
        data = await service.get_reviews(product_id)
    except Exception as e:
        raise http_error("fetching reviews", e)
    return {"status": "success", "data": data}


@router.post("/reviews", status_code=201)
async def submit_review(data: ReviewCreate, service: StorefrontService = Depends(get_storefront_service)):
    try:
        review = await service.submit_review(data)
    except Exception as e:
        raise http_error("submitting review", e)
    return {
        "status": "success",
        "message": "Review submitted successfully",
        "data": review.model_dump(mode='json'),
    }


# ============================================================================
# Wishlist
# ============================================================================

@router.get("/wishlist/{customer_id}")
async def get_wishlist(customer_id: str, service: StorefrontService = Depends(get_storefront_service)):
    try:
        data = await service.get_wishlist(customer_id)
    except Exception as e:
        raise http_error("fetching wishlist", e)
    return {"status": "success", "data": data}


@router.post("/wishlist", status_code=201)
async def add_to_wishlist(data: WishlistItemCreate, service: StorefrontService = Depends(get_storefront_service)):
    try:
        item = await service.add_to_wishlist(data)
    except Exception as e:
        raise http_error("adding to wishlist", e)
    return {"status": "success", "data": item.model_dump(mode='json')}


@router.delete("/wishlist/{customer_id}/{item_id}")
async def remove_from_wishlist(
    customer_id: str,
    item_id: str,
    service: StorefrontService = Depends(get_storefront_service),
):
    try:
        removed = await service.remove_from_wishlist(customer_id, item_id)
    except Exception as e:
        raise http_error("removing from wishlist", e)
    return {"status": "success", "message": "Item removed from wishlist", "data": {"id": removed}}
