"""
Unit tests for campaigns and coupon codes

Author: Store Insights
Date: 2026-01-25
"""
import asyncio
import re
from datetime import timedelta

import pytest
from pydantic import ValidationError

from store_insights.connectors.medusa_connector import MedusaAPIError
from store_insights.domain.engagement import CampaignCreate
from store_insights.services.marketing_service import (
    COUPON_ATTEMPTS,
    CampaignConfigError,
    MarketingService,
    campaign_from_backend,
    campaign_status,
    generate_coupon_code,
)

CODE_PATTERN = re.compile(r'^[A-Z0-9]{8}$')


def campaign_data(now, **overrides):
    data = {
        'name': 'Eid Sale',
        'type': 'percentage',
        'discount': 20,
        'start_date': now - timedelta(days=1),
        'end_date': now + timedelta(days=6),
    }
    data.update(overrides)
    return CampaignCreate(**data)


class TestCouponCodes:

    def test_code_format(self):
        """Test generated codes match the 8-character uppercase pattern"""
        for _ in range(50):
            assert CODE_PATTERN.match(generate_coupon_code())

    def test_codes_vary(self):
        """Codes are random, not fixed"""
        assert len({generate_coupon_code() for _ in range(20)}) > 1


class TestCampaignStatus:

    def test_status(self, now):
        """Test scheduled, expired and active status from the campaign dates"""
        assert campaign_status(now + timedelta(days=1), None, now) == 'scheduled'
        assert campaign_status(None, now - timedelta(days=1), now) == 'expired'
        assert campaign_status(now - timedelta(days=1), now + timedelta(days=1), now) == 'active'
        assert campaign_status(None, None, now) == 'active'

    def test_from_backend(self, now):
        """Test a backend campaign is mapped with its discount and codes"""
        raw = {
            'id': 'camp_9',
            'name': 'Ramadan',
            'starts_at': '2026-01-01T00:00:00Z',
            'ends_at': '2026-01-10T00:00:00Z',
            'budget': {'used': 12},
            'promotions': [
                {'code': 'ABCD1234', 'application_method': {'type': 'fixed', 'value': 500}},
            ],
        }
        campaign = campaign_from_backend(raw, now)

        assert campaign.status == 'expired'
        assert campaign.type == 'fixed'
        assert campaign.discount == 500
        assert campaign.usage_count == 12
        assert campaign.codes == ['ABCD1234']


class TestCampaignValidation:

    def test_end_before_start(self, now):
        """End date before start date is rejected"""
        with pytest.raises(ValidationError):
            campaign_data(now, end_date=now - timedelta(days=2))

    def test_percentage_over_100(self, now):
        """Percentage discounts are capped at 100"""
        with pytest.raises(ValidationError):
            campaign_data(now, discount=150)

    def test_fixed_amount_over_100_is_fine(self, now):
        """Fixed amounts have no 100 cap"""
        assert campaign_data(now, type='fixed', discount=500).discount == 500


class TestMarketingService:

    def test_create_campaign_issues_first_code(self, fake_connector, now):
        """Test creating a campaign also creates its first promotion code"""
        service = MarketingService(fake_connector)
        campaign = asyncio.run(service.create_campaign(campaign_data(now)))

        assert campaign.id == 'camp_1'
        assert campaign.type == 'percentage'
        assert campaign.discount == 20
        assert len(campaign.codes) == 1
        assert CODE_PATTERN.match(campaign.codes[0])

        promotion = fake_connector.promotions[0]
        assert promotion['campaign_id'] == 'camp_1'
        assert promotion['application_method'] == {'type': 'percentage', 'target_type': 'order', 'value': 20}

    def test_fixed_discount_uses_store_currency(self, fake_connector, now):
        """Fixed discounts are created in the store currency"""
        service = MarketingService(fake_connector)
        asyncio.run(service.create_campaign(campaign_data(now, type='fixed', discount=500)))

        method = fake_connector.promotions[0]['application_method']
        assert method['currency_code'] == 'pkr'
        assert method['allocation'] == 'across'

    def test_generate_coupon_copies_discount(self, fake_connector, now):
        """Test a new coupon copies the campaign's existing discount"""
        service = MarketingService(fake_connector)
        campaign = asyncio.run(service.create_campaign(campaign_data(now)))
        coupon = asyncio.run(service.generate_coupon(campaign.id))

        assert coupon.campaign_id == campaign.id
        assert coupon.code != campaign.codes[0]
        assert fake_connector.promotions[1]['application_method']['value'] == 20

        listed = asyncio.run(service.list_campaigns())
        assert len(listed[0].codes) == 2

    def test_generate_coupon_retries_taken_codes(self, fake_connector, now):
        """Taken codes are retried with a fresh one"""
        service = MarketingService(fake_connector)
        campaign = asyncio.run(service.create_campaign(campaign_data(now)))
        fake_connector.rejected_codes = COUPON_ATTEMPTS - 1

        coupon = asyncio.run(service.generate_coupon(campaign.id))
        assert coupon.promotion_id == 'promo_2'

    def test_generate_coupon_gives_up(self, fake_connector, now):
        """Test generation stops after the last attempt is rejected"""
        service = MarketingService(fake_connector)
        campaign = asyncio.run(service.create_campaign(campaign_data(now)))
        fake_connector.rejected_codes = COUPON_ATTEMPTS

        with pytest.raises(MedusaAPIError):
            asyncio.run(service.generate_coupon(campaign.id))

    def test_generate_coupon_unknown_campaign(self, fake_connector):
        """Unknown campaign raises a not-found backend error"""
        service = MarketingService(fake_connector)
        with pytest.raises(MedusaAPIError) as exc_info:
            asyncio.run(service.generate_coupon('camp_missing'))
        assert exc_info.value.is_not_found

    def test_generate_coupon_without_discount(self, fake_connector):
        """A campaign without promotions cannot issue coupons"""
        fake_connector.campaigns['camp_empty'] = {'id': 'camp_empty', 'promotions': []}
        service = MarketingService(fake_connector)

        with pytest.raises(CampaignConfigError):
            asyncio.run(service.generate_coupon('camp_empty'))
