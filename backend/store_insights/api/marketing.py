"""
Marketing API Endpoints
Campaigns and coupon codes

Author: Store Insights
Date: 2026-01-23
"""
from fastapi import APIRouter, Depends, Query

from store_insights.api.deps import get_marketing_service
from store_insights.api.responses import http_error, with_fallback
from store_insights.core.auth import verify_admin_key
from store_insights.domain.engagement import CampaignCreate
from store_insights.services.marketing_service import MarketingService

router = APIRouter(
    prefix="/admin/custom/marketing",
    tags=["Marketing"],
    dependencies=[Depends(verify_admin_key)],
)


async def _campaign_list(service: MarketingService):
    campaigns = await service.list_campaigns()
    return [c.model_dump(mode='json') for c in campaigns]


@router.get("/campaigns")
async def list_campaigns(service: MarketingService = Depends(get_marketing_service)):
    """All campaigns with status (scheduled/active/expired), discount and codes"""
    return await with_fallback("campaigns", _campaign_list(service), list)


@router.post("/campaigns", status_code=201)
async def create_campaign(
    data: CampaignCreate,
    service: MarketingService = Depends(get_marketing_service),
):
    """
    Create a campaign with a first promotion code

    The discount is percentage (1-100) or a fixed PKR amount.
    """
    try:
        campaign = await service.create_campaign(data)
    except Exception as e:
        raise http_error("creating campaign", e)
    return {"status": "success", "data": campaign.model_dump(mode='json')}


@router.post("/coupons/generate", status_code=201)
async def generate_coupon(
    campaign_id: str = Query(..., min_length=1, description="Campaign to attach the code to"),
    service: MarketingService = Depends(get_marketing_service),
):
    """Generate an 8-character code (A-Z, 0-9) with the campaign's discount"""
    try:
        coupon = await service.generate_coupon(campaign_id)
    except Exception as e:
        raise http_error("generating coupon", e)
    return {"status": "success", "data": coupon.model_dump()}
