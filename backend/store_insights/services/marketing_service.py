"""
Marketing Service
Campaigns and coupon codes backed by the commerce backend's campaign and
promotion entities

Author: Store Insights
Date: 2026-01-20
"""
import logging
import re
import secrets
import string
from datetime import datetime
from typing import Any, Dict, List, Optional

from store_insights.connectors.medusa_connector import MedusaAPIError, MedusaConnector
from store_insights.core.config import settings
from store_insights.domain.engagement import Campaign, CampaignCreate, CouponCode
from store_insights.services.formatting import ensure_aware, utc_now

logger = logging.getLogger(__name__)

COUPON_ALPHABET = string.ascii_uppercase + string.digits
COUPON_LENGTH = 8
COUPON_ATTEMPTS = 3


class CampaignConfigError(ValueError):
    """Campaign cannot issue codes (no discount configured)"""


def generate_coupon_code(length: int = COUPON_LENGTH) -> str:
    return ''.join(secrets.choice(COUPON_ALPHABET) for _ in range(length))


def campaign_status(starts_at: Optional[datetime], ends_at: Optional[datetime],
                    now: Optional[datetime] = None) -> str:
    now = ensure_aware(now or utc_now())
    if starts_at and now < ensure_aware(starts_at):
        return 'scheduled'
    if ends_at and now > ensure_aware(ends_at):
        return 'expired'
    return 'active'


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))


def campaign_from_backend(raw: Dict[str, Any], now: Optional[datetime] = None) -> Campaign:
    """Flatten a backend campaign (with promotions and budget) into a Campaign"""
    promotions = raw.get('promotions') or []
    method = (promotions[0].get('application_method') or {}) if promotions else {}
    discount_type = method.get('type') if method.get('type') in ('percentage', 'fixed') else None
    starts_at = _parse_datetime(raw.get('starts_at'))
    ends_at = _parse_datetime(raw.get('ends_at'))

    return Campaign(
        id=raw['id'],
        name=raw.get('name') or raw.get('campaign_identifier') or raw['id'],
        type=discount_type,
        status=campaign_status(starts_at, ends_at, now),
        discount=method.get('value'),
        start_date=starts_at,
        end_date=ends_at,
        usage_count=int((raw.get('budget') or {}).get('used') or 0),
        codes=[p['code'] for p in promotions if p.get('code')],
    )


def _campaign_identifier(name: str) -> str:
    slug = re.sub(r'[^A-Z0-9]+', '-', name.upper()).strip('-')
    return f"{slug[:40]}-{generate_coupon_code(4)}"


def _application_method(discount_type: str, value: float) -> Dict[str, Any]:
    method = {
        'type': discount_type,
        'target_type': 'order',
        'value': value,
    }
    if discount_type == 'fixed':
        method['currency_code'] = settings.CURRENCY_CODE
        method['allocation'] = 'across'
    return method


class MarketingService:

    def __init__(self, connector: MedusaConnector):
        self.connector = connector

    async def list_campaigns(self) -> List[Campaign]:
        raw = await self.connector.list_campaigns()
        return [campaign_from_backend(c) for c in raw]

    async def create_campaign(self, data: CampaignCreate) -> Campaign:
        """
        Create a campaign and its first promotion code

        The promotion carries the discount type and value; later codes for
        the campaign copy them.
        """
        raw = await self.connector.create_campaign({
            'name': data.name,
            'campaign_identifier': _campaign_identifier(data.name),
            'starts_at': data.start_date.isoformat(),
            'ends_at': data.end_date.isoformat(),
        })
        logger.info(f"Created campaign {raw.get('id')} ({data.name})")

        coupon = await self._create_code(raw['id'], _application_method(data.type, data.discount))

        raw['promotions'] = [{
            'code': coupon.code,
            'application_method': {'type': data.type, 'value': data.discount},
        }]
        return campaign_from_backend(raw)

    async def generate_coupon(self, campaign_id: str) -> CouponCode:
        """
        Issue a new random code for an existing campaign

        Raises:
            MedusaAPIError (404) when the campaign does not exist
            CampaignConfigError when the campaign has no discount to copy
        """
        raw = await self.connector.get_campaign(campaign_id)
        promotions = raw.get('promotions') or []
        method = (promotions[0].get('application_method') or {}) if promotions else {}
        if method.get('type') not in ('percentage', 'fixed') or method.get('value') is None:
            raise CampaignConfigError(f"Campaign {campaign_id} has no discount configured")

        return await self._create_code(
            campaign_id, _application_method(method['type'], float(method['value']))
        )

    async def _create_code(self, campaign_id: str, application_method: Dict[str, Any]) -> CouponCode:
        attempt = 0
        while True:
            attempt += 1
            code = generate_coupon_code()
            try:
                promotion = await self.connector.create_promotion({
                    'code': code,
                    'type': 'standard',
                    'status': 'active',
                    'is_automatic': False,
                    'campaign_id': campaign_id,
                    'application_method': application_method,
                })
            except MedusaAPIError as e:
                # Code already taken: retry with a fresh one
                if e.status_code in (400, 409, 422) and attempt < COUPON_ATTEMPTS:
                    logger.warning(f"Coupon code {code} rejected ({e.message}), retrying")
                    continue
                raise
            logger.info(f"Generated coupon {code} for campaign {campaign_id}")
            return CouponCode(code=code, campaign_id=campaign_id, promotion_id=promotion.get('id'))
