"""
Medusa API Connector
Handles all interactions with the commerce backend's Admin and Store REST APIs

Author: Store Insights
Date: 2026-01-16
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from store_insights.core.config import settings
from store_insights.domain.customer import Cart, Customer
from store_insights.domain.order import Order
from store_insights.domain.product import Product

logger = logging.getLogger(__name__)

Record = TypeVar("Record", bound=BaseModel)


# Relations expanded on every order fetch so a single list call feeds every
# aggregation (cities, items, categories, cost prices)
ORDER_FIELDS = ",".join([
    "id", "display_id", "email", "status", "payment_status", "fulfillment_status",
    "currency_code", "total", "subtotal", "tax_total", "shipping_total", "discount_total",
    "created_at", "updated_at", "customer_id", "metadata",
    "*customer", "*shipping_address",
    "*items", "*items.variant", "*items.variant.product", "*items.variant.product.categories",
])

PRODUCT_FIELDS = "*variants,*categories,+variants.inventory_quantity,+metadata"

CART_FIELDS = "id,email,completed_at,created_at,updated_at,total,*items,*region"


class MedusaAPIError(Exception):
    """Raised for non-2xx responses and transport failures"""

    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.path = path

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.path} -> {self.status_code}: {self.message}"
        return f"{self.path}: {self.message}"


def parse_records(model: Type[Record], records: List[Any], kind: str) -> List[Record]:
    """Validate list results; records that cannot be parsed at all (no id, wrong shape) are logged and skipped"""
    parsed = []
    for record in records:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as e:
            record_id = record.get("id") if isinstance(record, dict) else None
            logger.warning(f"Skipping malformed {kind} {record_id or record!r}: {e.error_count()} validation errors")
    return parsed


class MedusaConnector:
    """
    Connector for the Medusa v2 REST API

    Handles:
    - Order, product, customer and cart retrieval (admin)
    - Metadata updates used to persist notes, reviews and wishlists
    - Campaign / promotion management
    - Provisioning endpoints (regions, stock locations, shipping, API keys)

    Admin calls authenticate with a secret API token (HTTP Basic, token as the
    user name). Store calls send the publishable key header.
    """

    def __init__(self, base_url: str = None, admin_token: str = None,
                 publishable_key: str = None, timeout: float = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize Medusa connector

        Args:
            base_url: Backend URL (e.g. 'http://localhost:9000')
            admin_token: Secret admin API token
            publishable_key: Publishable key for /store routes
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = (base_url or settings.MEDUSA_BACKEND_URL).rstrip("/")
        self.admin_token = admin_token if admin_token is not None else settings.MEDUSA_ADMIN_TOKEN
        self.publishable_key = publishable_key if publishable_key is not None else settings.MEDUSA_PUBLISHABLE_KEY
        self.timeout = timeout or settings.MEDUSA_TIMEOUT_SECONDS
        self._transport = transport

        if not self.admin_token:
            logger.warning("MEDUSA_ADMIN_TOKEN not configured - admin API calls will be rejected")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _make_request(self, method: str, path: str, params: Optional[Dict] = None,
                            json: Optional[Dict] = None, store: bool = False) -> Dict:
        """
        Make an authenticated request

        Args:
            method: HTTP method
            path: API path (e.g. '/admin/orders')
            params: Query parameters
            json: JSON body
            store: Use publishable-key auth instead of admin auth

        Returns:
            Parsed JSON body (empty dict for empty responses)

        Raises:
            MedusaAPIError on transport errors and non-2xx responses
        """
        headers = {'Accept': 'application/json'}
        auth = None
        if store:
            if self.publishable_key:
                headers['x-publishable-api-key'] = self.publishable_key
        elif self.admin_token:
            auth = httpx.BasicAuth(self.admin_token, "")

        async with self._client() as client:
            try:
                response = await client.request(
                    method, path, params=params, json=json, headers=headers, auth=auth
                )
            except httpx.HTTPError as e:
                logger.error(f"Request to {path} failed: {e}")
                raise MedusaAPIError(str(e) or e.__class__.__name__, path=path) from e

        if response.status_code >= 400:
            message = response.text
            try:
                body = response.json()
                if isinstance(body, dict):
                    message = body.get('message') or body.get('error') or message
            except ValueError:
                pass
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise MedusaAPIError(message, status_code=response.status_code, path=path)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {'raw': response.text}

    async def _list(self, path: str, key: str, params: Optional[Dict] = None) -> List[Dict]:
        data = await self._make_request("GET", path, params=params)
        return data.get(key) or []

    async def _create(self, path: str, key: str, payload: Dict) -> Dict:
        data = await self._make_request("POST", path, json=payload)
        return data.get(key) or {}

    # =========================================================================
    # Health
    # =========================================================================

    async def health(self) -> bool:
        """True when the backend answers /health"""
        try:
            await self._make_request("GET", "/health")
            return True
        except MedusaAPIError:
            return False

    # =========================================================================
    # Orders
    # =========================================================================

    async def list_orders(self, limit: int = None, created_after: datetime = None,
                          created_before: datetime = None, status: List[str] = None,
                          customer_id: str = None) -> List[Order]:
        """
        Get orders, newest first

        Args:
            limit: Max orders to fetch (default ORDERS_FETCH_LIMIT)
            created_after: Only orders created at/after this datetime
            created_before: Only orders created at/before this datetime
            status: Restrict to these order statuses
            customer_id: Only orders placed by this customer
        """
        params: Dict[str, Any] = {
            'limit': limit or settings.ORDERS_FETCH_LIMIT,
            'fields': ORDER_FIELDS,
            'order': '-created_at',
        }
        if created_after:
            params['created_at[$gte]'] = created_after.isoformat()
        if created_before:
            params['created_at[$lte]'] = created_before.isoformat()
        if status:
            params['status[]'] = status
        if customer_id:
            params['customer_id'] = customer_id

        raw = await self._list("/admin/orders", "orders", params)
        return parse_records(Order, raw, "order")

    async def get_order(self, order_id: str) -> Order:
        data = await self._make_request("GET", f"/admin/orders/{order_id}", params={'fields': ORDER_FIELDS})
        return Order.model_validate(data.get('order') or {})

    async def update_order(self, order_id: str, payload: Dict) -> Order:
        data = await self._make_request("POST", f"/admin/orders/{order_id}", json=payload)
        return Order.model_validate(data.get('order') or {})

    # =========================================================================
    # Products
    # =========================================================================

    async def list_products(self, limit: int = None, handle: str = None) -> List[Product]:
        params: Dict[str, Any] = {
            'limit': limit or settings.ORDERS_FETCH_LIMIT,
            'fields': PRODUCT_FIELDS,
        }
        if handle:
            params['handle'] = handle
        raw = await self._list("/admin/products", "products", params)
        return parse_records(Product, raw, "product")

    async def get_product(self, product_id: str) -> Product:
        data = await self._make_request(
            "GET", f"/admin/products/{product_id}", params={'fields': PRODUCT_FIELDS}
        )
        return Product.model_validate(data.get('product') or {})

    async def update_product(self, product_id: str, payload: Dict) -> Product:
        data = await self._make_request("POST", f"/admin/products/{product_id}", json=payload)
        return Product.model_validate(data.get('product') or {})

    async def create_product(self, payload: Dict) -> Dict:
        return await self._create("/admin/products", "product", payload)

    async def list_product_categories(self, name: str = None) -> List[Dict]:
        params = {'limit': 100}
        if name:
            params['q'] = name
        return await self._list("/admin/product-categories", "product_categories", params)

    async def create_product_category(self, payload: Dict) -> Dict:
        return await self._create("/admin/product-categories", "product_category", payload)

    # =========================================================================
    # Customers & carts
    # =========================================================================

    async def list_customers(self, limit: int = None) -> List[Customer]:
        params = {
            'limit': limit or settings.ORDERS_FETCH_LIMIT,
            'order': '-created_at',
            'fields': '+metadata',
        }
        raw = await self._list("/admin/customers", "customers", params)
        return parse_records(Customer, raw, "customer")

    async def get_customer(self, customer_id: str) -> Customer:
        data = await self._make_request(
            "GET", f"/admin/customers/{customer_id}", params={'fields': '+metadata'}
        )
        return Customer.model_validate(data.get('customer') or {})

    async def update_customer(self, customer_id: str, payload: Dict) -> Customer:
        data = await self._make_request("POST", f"/admin/customers/{customer_id}", json=payload)
        return Customer.model_validate(data.get('customer') or {})

    async def list_carts(self, updated_after: datetime = None, limit: int = 50) -> List[Cart]:
        """
        Get carts that were never completed, most recently updated first

        Requires the backend to expose an admin cart listing route.
        """
        params: Dict[str, Any] = {
            'limit': limit,
            'fields': CART_FIELDS,
            'order': '-updated_at',
            'completed_at': 'null',
        }
        if updated_after:
            params['updated_at[$gt]'] = updated_after.isoformat()
        raw = await self._list("/admin/carts", "carts", params)
        return parse_records(Cart, raw, "cart")

    # =========================================================================
    # Campaigns & promotions
    # =========================================================================

    async def list_campaigns(self) -> List[Dict]:
        params = {
            'limit': 100,
            'fields': '*budget,*promotions,*promotions.application_method',
        }
        return await self._list("/admin/campaigns", "campaigns", params)

    async def get_campaign(self, campaign_id: str) -> Dict:
        data = await self._make_request(
            "GET", f"/admin/campaigns/{campaign_id}",
            params={'fields': '*budget,*promotions,*promotions.application_method'}
        )
        return data.get('campaign') or {}

    async def create_campaign(self, payload: Dict) -> Dict:
        return await self._create("/admin/campaigns", "campaign", payload)

    async def create_promotion(self, payload: Dict) -> Dict:
        return await self._create("/admin/promotions", "promotion", payload)

    # =========================================================================
    # Store, sales channels, regions
    # =========================================================================

    async def list_stores(self) -> List[Dict]:
        return await self._list("/admin/stores", "stores")

    async def update_store(self, store_id: str, payload: Dict) -> Dict:
        return await self._create(f"/admin/stores/{store_id}", "store", payload)

    async def list_sales_channels(self, name: str = None) -> List[Dict]:
        params = {'name': name} if name else None
        return await self._list("/admin/sales-channels", "sales_channels", params)

    async def create_sales_channel(self, payload: Dict) -> Dict:
        return await self._create("/admin/sales-channels", "sales_channel", payload)

    async def list_regions(self, store: bool = False) -> List[Dict]:
        params = {'fields': '*countries', 'limit': 100}
        if store:
            data = await self._make_request("GET", "/store/regions", params=params, store=True)
            return data.get('regions') or []
        return await self._list("/admin/regions", "regions", params)

    async def create_region(self, payload: Dict) -> Dict:
        return await self._create("/admin/regions", "region", payload)

    async def list_tax_regions(self, country_code: str = None) -> List[Dict]:
        params = {'country_code': country_code} if country_code else None
        return await self._list("/admin/tax-regions", "tax_regions", params)

    async def create_tax_region(self, payload: Dict) -> Dict:
        return await self._create("/admin/tax-regions", "tax_region", payload)

    # =========================================================================
    # Stock locations & fulfillment
    # =========================================================================

    async def list_stock_locations(self) -> List[Dict]:
        params = {'fields': '*address,*fulfillment_providers,*fulfillment_sets,*fulfillment_sets.service_zones,*sales_channels'}
        return await self._list("/admin/stock-locations", "stock_locations", params)

    async def create_stock_location(self, payload: Dict) -> Dict:
        return await self._create("/admin/stock-locations", "stock_location", payload)

    async def add_fulfillment_provider(self, location_id: str, provider_id: str) -> Dict:
        return await self._create(
            f"/admin/stock-locations/{location_id}/fulfillment-providers",
            "stock_location", {'add': [provider_id]}
        )

    async def link_sales_channel_to_location(self, location_id: str, sales_channel_id: str) -> Dict:
        return await self._create(
            f"/admin/stock-locations/{location_id}/sales-channels",
            "stock_location", {'add': [sales_channel_id]}
        )

    async def create_fulfillment_set(self, location_id: str, payload: Dict) -> Dict:
        """Create a fulfillment set on a stock location; returns the updated location"""
        return await self._create(
            f"/admin/stock-locations/{location_id}/fulfillment-sets", "stock_location", payload
        )

    async def create_service_zone(self, fulfillment_set_id: str, payload: Dict) -> Dict:
        """Add a service zone; returns the updated fulfillment set"""
        return await self._create(
            f"/admin/fulfillment-sets/{fulfillment_set_id}/service-zones", "fulfillment_set", payload
        )

    async def list_shipping_profiles(self, profile_type: str = None) -> List[Dict]:
        params = {'type': profile_type} if profile_type else None
        return await self._list("/admin/shipping-profiles", "shipping_profiles", params)

    async def create_shipping_profile(self, payload: Dict) -> Dict:
        return await self._create("/admin/shipping-profiles", "shipping_profile", payload)

    async def list_shipping_options(self, service_zone_id: str = None) -> List[Dict]:
        params = {'service_zone_id': service_zone_id} if service_zone_id else None
        return await self._list("/admin/shipping-options", "shipping_options", params)

    async def create_shipping_option(self, payload: Dict) -> Dict:
        return await self._create("/admin/shipping-options", "shipping_option", payload)

    # =========================================================================
    # API keys
    # =========================================================================

    async def list_api_keys(self, key_type: str = "publishable") -> List[Dict]:
        params = {'type': key_type, 'fields': 'id,token,title,type,revoked_at,*sales_channels'}
        return await self._list("/admin/api-keys", "api_keys", params)

    async def create_api_key(self, payload: Dict) -> Dict:
        return await self._create("/admin/api-keys", "api_key", payload)

    async def link_sales_channel_to_api_key(self, api_key_id: str, sales_channel_id: str) -> Dict:
        return await self._create(
            f"/admin/api-keys/{api_key_id}/sales-channels", "api_key", {'add': [sales_channel_id]}
        )
