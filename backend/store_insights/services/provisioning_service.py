"""
Provisioning Service
Idempotent setup of a Pakistan-market store through the backend admin API

Every step looks for an existing resource with a list call and only creates
what is missing, so runs can be repeated safely. There is no rollback: an
error aborts the run and resources created by earlier steps stay in place.

Author: Store Insights
Date: 2026-01-22
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from store_insights.connectors.medusa_connector import MedusaConnector

logger = logging.getLogger(__name__)

# ============================================================================
# CONFIGURATION
# ============================================================================

SALES_CHANNEL_NAME = "Default Sales Channel"
CURRENCY_CODE = "pkr"
SUPPORTED_CURRENCIES = [
    {'currency_code': 'pkr', 'is_default': True},
    {'currency_code': 'usd', 'is_default': False},
]

REGION_NAME = "Pakistan"
COUNTRY_CODE = "pk"
PAYMENT_PROVIDER = "pp_system_default"
TAX_PROVIDER = "tp_system"
FULFILLMENT_PROVIDER = "manual_manual"

STOCK_LOCATION = {
    'name': "Pakistan Warehouse",
    'address': {
        'city': "Karachi",
        'country_code': "PK",
        'address_1': "Main Warehouse",
    },
}

SHIPPING_PROFILE = {'name': "Default Shipping Profile", 'type': "default"}
FULFILLMENT_SET = {'name': "Pakistan Delivery", 'type': "shipping"}
SERVICE_ZONE = {
    'name': "Pakistan",
    'geo_zones': [{'type': "country", 'country_code': COUNTRY_CODE}],
}

# (name, label, description, code, amount in PKR)
SHIPPING_OPTIONS = [
    ("Standard Delivery", "Standard", "Delivery within 3-5 business days", "standard", 250),
    ("Express Delivery", "Express", "Delivery within 1-2 business days", "express", 500),
    ("Free Shipping", "Free", "Free delivery on orders above PKR 5000", "free", 0),
]

API_KEY_TITLE = "Webshop"

PRODUCT_CATEGORIES = ["Electronics", "Fashion", "Home & Living", "Sports & Outdoors"]

SAMPLE_PRODUCTS = [
    {
        'title': "Premium Wireless Headphones",
        'handle': "wireless-headphones",
        'category': "Electronics",
        'description': "High-quality wireless headphones with noise cancellation",
        'weight': 300,
        'option': "Color",
        'variants': [("Black", "HEADPHONES-BLACK"), ("White", "HEADPHONES-WHITE")],
        'price': 12999,
    },
    {
        'title': "Designer Cotton T-Shirt",
        'handle': "cotton-tshirt",
        'category': "Fashion",
        'description': "Premium quality cotton t-shirt",
        'weight': 200,
        'option': "Size",
        'variants': [("S", "TSHIRT-S"), ("M", "TSHIRT-M"), ("L", "TSHIRT-L")],
        'price': 1999,
    },
]


class ProvisioningError(Exception):
    """A prerequisite is missing; the run stops"""


@dataclass
class StepResult:
    step: str
    action: str  # created | existing | updated | planned
    resource_id: Optional[str] = None
    detail: str = ""


@dataclass
class ProvisioningReport:
    steps: List[StepResult] = field(default_factory=list)

    def add(self, step: str, action: str, resource_id: Optional[str] = None, detail: str = "") -> None:
        self.steps.append(StepResult(step, action, resource_id, detail))
        logger.info(f"[{action}] {step} {resource_id or ''} {detail}".rstrip())

    @property
    def created(self) -> List[StepResult]:
        return [s for s in self.steps if s.action in ('created', 'updated')]


def _ids(records: List[Dict[str, Any]]) -> List[str]:
    return [r.get('id') for r in records or [] if r.get('id')]


def _country_codes(region: Dict[str, Any]) -> List[str]:
    return [(c.get('iso_2') or '').lower() for c in region.get('countries') or []]


def find_pakistan_region(regions: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Region named Pakistan, or any region that ships to PK"""
    for region in regions:
        if (region.get('name') or '').lower() == REGION_NAME.lower():
            return region
    for region in regions:
        if COUNTRY_CODE in _country_codes(region):
            return region
    return None


def shipping_option_payload(name: str, label: str, description: str, code: str, amount: int,
                            service_zone_id: str, shipping_profile_id: str, region_id: str) -> Dict[str, Any]:
    return {
        'name': name,
        'price_type': "flat",
        'provider_id': FULFILLMENT_PROVIDER,
        'service_zone_id': service_zone_id,
        'shipping_profile_id': shipping_profile_id,
        'type': {'label': label, 'description': description, 'code': code},
        'prices': [
            {'currency_code': CURRENCY_CODE, 'amount': amount},
            {'region_id': region_id, 'amount': amount},
        ],
        'rules': [
            {'attribute': "enabled_in_store", 'value': "true", 'operator': "eq"},
            {'attribute': "is_return", 'value': "false", 'operator': "eq"},
        ],
    }


def product_payload(sample: Dict[str, Any], category_id: Optional[str], shipping_profile_id: str,
                    sales_channel_id: str) -> Dict[str, Any]:
    option = sample['option']
    return {
        'title': sample['title'],
        'handle': sample['handle'],
        'description': sample['description'],
        'weight': sample['weight'],
        'status': "published",
        'shipping_profile_id': shipping_profile_id,
        'category_ids': [category_id] if category_id else [],
        'options': [{'title': option, 'values': [value for value, _ in sample['variants']]}],
        'variants': [
            {
                'title': value,
                'sku': sku,
                'options': {option: value},
                'prices': [{'amount': sample['price'], 'currency_code': CURRENCY_CODE}],
            }
            for value, sku in sample['variants']
        ],
        'sales_channels': [{'id': sales_channel_id}],
    }


class StoreProvisioner:
    """
    Provision a store step by step

    With dry_run=True the list calls still run but nothing is created or
    updated; planned resources get placeholder ids.
    """

    def __init__(self, connector: MedusaConnector, dry_run: bool = False):
        self.connector = connector
        self.dry_run = dry_run
        self.report = ProvisioningReport()

    async def _create(self, step: str, create: Callable[[], Awaitable[Dict[str, Any]]], detail: str = "") -> Dict[str, Any]:
        if self.dry_run:
            placeholder = {'id': f"dry-run:{step}"}
            self.report.add(step, 'planned', placeholder['id'], detail)
            return placeholder
        created = await create()
        self.report.add(step, 'created', created.get('id'), detail)
        return created

    async def _update(self, step: str, resource_id: str, update: Callable[[], Awaitable[Any]], detail: str = "") -> None:
        if self.dry_run:
            self.report.add(step, 'planned', resource_id, detail)
            return
        await update()
        self.report.add(step, 'updated', resource_id, detail)

    # =========================================================================
    # Steps
    # =========================================================================

    async def ensure_sales_channel(self) -> Dict[str, Any]:
        channels = await self.connector.list_sales_channels(name=SALES_CHANNEL_NAME)
        if channels:
            self.report.add("sales channel", 'existing', channels[0].get('id'))
            return channels[0]
        return await self._create(
            "sales channel",
            lambda: self.connector.create_sales_channel({'name': SALES_CHANNEL_NAME}),
            SALES_CHANNEL_NAME,
        )

    async def get_store(self) -> Dict[str, Any]:
        stores = await self.connector.list_stores()
        if not stores:
            raise ProvisioningError("No store found on the backend")
        return stores[0]

    async def configure_store(self, store: Dict[str, Any], sales_channel_id: str) -> None:
        """PKR as default currency (USD supported) and the default sales channel"""
        current = {
            (c.get('currency_code'), bool(c.get('is_default')))
            for c in store.get('supported_currencies') or []
        }
        wanted = {(c['currency_code'], c['is_default']) for c in SUPPORTED_CURRENCIES}
        if current == wanted and store.get('default_sales_channel_id') == sales_channel_id:
            self.report.add("store currencies", 'existing', store.get('id'))
            return
        await self._update(
            "store currencies", store['id'],
            lambda: self.connector.update_store(store['id'], {
                'supported_currencies': SUPPORTED_CURRENCIES,
                'default_sales_channel_id': sales_channel_id,
            }),
            "PKR default, USD",
        )

    async def ensure_region(self) -> Dict[str, Any]:
        region = find_pakistan_region(await self.connector.list_regions())
        if region:
            self.report.add("region", 'existing', region.get('id'), region.get('name', ''))
            return region
        return await self._create(
            "region",
            lambda: self.connector.create_region({
                'name': REGION_NAME,
                'currency_code': CURRENCY_CODE,
                'countries': [COUNTRY_CODE],
                'payment_providers': [PAYMENT_PROVIDER],
            }),
            REGION_NAME,
        )

    async def require_region(self) -> Dict[str, Any]:
        region = find_pakistan_region(await self.connector.list_regions())
        if not region:
            raise ProvisioningError("Pakistan region not found! Please run seed first.")
        self.report.add("region", 'existing', region.get('id'), region.get('name', ''))
        return region

    async def ensure_tax_region(self) -> Dict[str, Any]:
        tax_regions = await self.connector.list_tax_regions(country_code=COUNTRY_CODE)
        if tax_regions:
            self.report.add("tax region", 'existing', tax_regions[0].get('id'))
            return tax_regions[0]
        return await self._create(
            "tax region",
            lambda: self.connector.create_tax_region({
                'country_code': COUNTRY_CODE,
                'provider_id': TAX_PROVIDER,
            }),
            COUNTRY_CODE,
        )

    async def ensure_stock_location(self, any_location: bool = False) -> Dict[str, Any]:
        """
        Find the Pakistan warehouse (or, with any_location, the first
        location) and make sure the manual fulfillment provider is linked
        """
        locations = await self.connector.list_stock_locations()
        location = next((l for l in locations if l.get('name') == STOCK_LOCATION['name']), None)
        if location is None and any_location and locations:
            location = locations[0]

        if location:
            self.report.add("stock location", 'existing', location.get('id'), location.get('name', ''))
        else:
            location = await self._create(
                "stock location",
                lambda: self.connector.create_stock_location(STOCK_LOCATION),
                STOCK_LOCATION['name'],
            )

        if FULFILLMENT_PROVIDER not in _ids(location.get('fulfillment_providers')):
            await self._update(
                "fulfillment provider link", location['id'],
                lambda: self.connector.add_fulfillment_provider(location['id'], FULFILLMENT_PROVIDER),
                FULFILLMENT_PROVIDER,
            )
        return location

    async def set_default_location(self, store: Dict[str, Any], location_id: str) -> None:
        if store.get('default_location_id') == location_id:
            return
        await self._update(
            "store default location", store['id'],
            lambda: self.connector.update_store(store['id'], {'default_location_id': location_id}),
        )

    async def ensure_shipping_profile(self) -> Dict[str, Any]:
        profiles = await self.connector.list_shipping_profiles(profile_type="default")
        if profiles:
            self.report.add("shipping profile", 'existing', profiles[0].get('id'))
            return profiles[0]
        return await self._create(
            "shipping profile",
            lambda: self.connector.create_shipping_profile(SHIPPING_PROFILE),
            SHIPPING_PROFILE['name'],
        )

    async def ensure_service_zone(self, location: Dict[str, Any]) -> Dict[str, Any]:
        """Fulfillment set on the location with a Pakistan service zone; returns the zone"""
        sets = location.get('fulfillment_sets') or []
        fulfillment_set = next((s for s in sets if s.get('name') == FULFILLMENT_SET['name']), None)
        if fulfillment_set is None and sets:
            fulfillment_set = sets[0]

        if fulfillment_set:
            self.report.add("fulfillment set", 'existing', fulfillment_set.get('id'), fulfillment_set.get('name', ''))
        elif self.dry_run:
            self.report.add("fulfillment set", 'planned', None, FULFILLMENT_SET['name'])
            self.report.add("service zone", 'planned', None, SERVICE_ZONE['name'])
            return {'id': "dry-run:service zone"}
        else:
            updated = await self.connector.create_fulfillment_set(location['id'], FULFILLMENT_SET)
            sets = updated.get('fulfillment_sets') or []
            fulfillment_set = next((s for s in sets if s.get('name') == FULFILLMENT_SET['name']), None)
            if fulfillment_set is None:
                raise ProvisioningError("Fulfillment set was not returned after creation")
            self.report.add("fulfillment set", 'created', fulfillment_set.get('id'), FULFILLMENT_SET['name'])

        zones = fulfillment_set.get('service_zones') or []
        if zones:
            self.report.add("service zone", 'existing', zones[0].get('id'), zones[0].get('name', ''))
            return zones[0]

        if self.dry_run:
            self.report.add("service zone", 'planned', None, SERVICE_ZONE['name'])
            return {'id': "dry-run:service zone"}

        updated_set = await self.connector.create_service_zone(fulfillment_set['id'], SERVICE_ZONE)
        zones = updated_set.get('service_zones') or []
        if not zones:
            raise ProvisioningError("No service zones found in fulfillment set!")
        self.report.add("service zone", 'created', zones[0].get('id'), SERVICE_ZONE['name'])
        return zones[0]

    async def ensure_shipping_options(self, service_zone_id: str, shipping_profile_id: str,
                                      region_id: str) -> List[Dict[str, Any]]:
        existing = await self.connector.list_shipping_options(service_zone_id=service_zone_id)
        existing_names = {o.get('name') for o in existing}
        options = list(existing)
        for name, label, description, code, amount in SHIPPING_OPTIONS:
            if name in existing_names:
                self.report.add("shipping option", 'existing', None, name)
                continue
            payload = shipping_option_payload(
                name, label, description, code, amount,
                service_zone_id, shipping_profile_id, region_id,
            )
            options.append(await self._create(
                "shipping option",
                lambda payload=payload: self.connector.create_shipping_option(payload),
                f"{name} (PKR {amount})",
            ))
        return options

    async def link_sales_channel_to_location(self, location: Dict[str, Any], sales_channel_id: str) -> None:
        if sales_channel_id in _ids(location.get('sales_channels')):
            self.report.add("location sales channel link", 'existing', location.get('id'))
            return
        await self._update(
            "location sales channel link", location['id'],
            lambda: self.connector.link_sales_channel_to_location(location['id'], sales_channel_id),
        )

    async def ensure_publishable_key(self, sales_channel_id: str) -> Dict[str, Any]:
        keys = [k for k in await self.connector.list_api_keys() if not k.get('revoked_at')]
        if keys:
            key = keys[0]
            self.report.add("publishable key", 'existing', key.get('id'), key.get('title', ''))
        else:
            key = await self._create(
                "publishable key",
                lambda: self.connector.create_api_key({'title': API_KEY_TITLE, 'type': "publishable"}),
                API_KEY_TITLE,
            )

        if sales_channel_id not in _ids(key.get('sales_channels')):
            await self._update(
                "key sales channel link", key['id'],
                lambda: self.connector.link_sales_channel_to_api_key(key['id'], sales_channel_id),
            )
        return key

    async def ensure_categories(self) -> Dict[str, str]:
        """Category name -> id"""
        existing = {c.get('name'): c.get('id') for c in await self.connector.list_product_categories()}
        categories = {}
        for name in PRODUCT_CATEGORIES:
            if name in existing:
                self.report.add("product category", 'existing', existing[name], name)
                categories[name] = existing[name]
                continue
            created = await self._create(
                "product category",
                lambda name=name: self.connector.create_product_category({'name': name, 'is_active': True}),
                name,
            )
            categories[name] = created.get('id')
        return categories

    async def ensure_sample_products(self, categories: Dict[str, str], shipping_profile_id: str,
                                     sales_channel_id: str) -> None:
        for sample in SAMPLE_PRODUCTS:
            found = await self.connector.list_products(limit=1, handle=sample['handle'])
            if found:
                self.report.add("product", 'existing', found[0].id, sample['title'])
                continue
            payload = product_payload(sample, categories.get(sample['category']), shipping_profile_id, sales_channel_id)
            await self._create(
                "product",
                lambda payload=payload: self.connector.create_product(payload),
                sample['title'],
            )

    # =========================================================================
    # Entry points
    # =========================================================================

    async def seed_complete(self) -> ProvisioningReport:
        """Full store setup for the Pakistan market"""
        logger.info("Starting complete store setup for Pakistan")
        store = await self.get_store()
        channel = await self.ensure_sales_channel()
        await self.configure_store(store, channel['id'])

        region = await self.ensure_region()
        await self.ensure_tax_region()

        location = await self.ensure_stock_location()
        await self.set_default_location(store, location['id'])

        profile = await self.ensure_shipping_profile()
        zone = await self.ensure_service_zone(location)
        await self.ensure_shipping_options(zone['id'], profile['id'], region['id'])
        await self.link_sales_channel_to_location(location, channel['id'])

        await self.ensure_publishable_key(channel['id'])

        categories = await self.ensure_categories()
        await self.ensure_sample_products(categories, profile['id'], channel['id'])
        return self.report

    async def fix_shipping(self) -> ProvisioningReport:
        """Shipping only: profile, location, fulfillment set and options"""
        logger.info("Fixing shipping options for Pakistan")
        region = await self.require_region()
        profile = await self.ensure_shipping_profile()
        location = await self.ensure_stock_location(any_location=True)
        zone = await self.ensure_service_zone(location)
        await self.ensure_shipping_options(zone['id'], profile['id'], region['id'])
        return self.report


async def list_regions(connector: MedusaConnector) -> List[Dict[str, Any]]:
    """Regions with their country codes"""
    regions = await connector.list_regions()
    return [
        {
            'id': r.get('id'),
            'name': r.get('name'),
            'currency_code': r.get('currency_code'),
            'countries': _country_codes(r),
        }
        for r in regions
    ]


async def list_publishable_keys(connector: MedusaConnector) -> List[Dict[str, Any]]:
    keys = await connector.list_api_keys()
    return [
        {'id': k.get('id'), 'title': k.get('title'), 'token': k.get('token'), 'revoked': bool(k.get('revoked_at'))}
        for k in keys
    ]
