"""
Pytest fixtures and configuration for Store Insights backend tests

Provides sample backend records (orders, products, customers, carts) pinned
to a fixed clock, and an in-memory connector that stands in for the
commerce backend in service and API tests.

Author: Store Insights
Date: 2026-01-25
"""
import copy
from datetime import datetime, timedelta, timezone

import pytest

from store_insights.connectors.medusa_connector import MedusaAPIError, parse_records
from store_insights.core.config import settings
from store_insights.domain.customer import Cart, Customer
from store_insights.domain.order import Order
from store_insights.domain.product import Product

# 17:00 in Karachi
NOW = datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc)


def _iso(delta: timedelta) -> str:
    return (NOW - delta).isoformat()


def headphones_item(quantity: int, unit_price: float) -> dict:
    return {
        'id': f'li_hp_{quantity}',
        'title': 'Premium Wireless Headphones',
        'product_id': 'prod_1',
        'variant_id': 'var_black',
        'quantity': quantity,
        'unit_price': unit_price,
        'variant': {
            'id': 'var_black',
            'title': 'Black',
            'sku': 'HEADPHONES-BLACK',
            'product_id': 'prod_1',
            'metadata': {'cost_price': 1500},
            'product': {
                'id': 'prod_1',
                'title': 'Premium Wireless Headphones',
                'categories': [{'id': 'pcat_1', 'name': 'Electronics'}],
            },
        },
    }


def tshirt_item(quantity: int, unit_price: float) -> dict:
    return {
        'id': f'li_ts_{quantity}',
        'title': 'Designer Cotton T-Shirt',
        'product_id': 'prod_2',
        'variant_id': 'var_s',
        'quantity': quantity,
        'unit_price': unit_price,
        'variant': {
            'id': 'var_s',
            'title': 'S',
            'sku': 'TSHIRT-S',
            'product_id': 'prod_2',
            'product': {
                'id': 'prod_2',
                'title': 'Designer Cotton T-Shirt',
                'categories': [{'id': 'pcat_2', 'name': 'Fashion'}],
            },
        },
    }


def raw_orders() -> list:
    """
    Four orders:
    - order_1: completed, card payment, Karachi, today
    - order_2: pending COD, Lahore, 3 days ago, not fulfilled
    - order_3: completed COD (not paid), guest, Karachi, 10 days ago
    - order_4: canceled, payment requires action, no address, 40 days ago
    """
    return [
        {
            'id': 'order_1',
            'display_id': 1001,
            'email': 'ali@example.com',
            'status': 'completed',
            'payment_status': 'captured',
            'fulfillment_status': 'delivered',
            'currency_code': 'pkr',
            'total': 5000,
            'subtotal': 4500,
            'tax_total': 0,
            'shipping_total': 250,
            'discount_total': 100,
            'created_at': _iso(timedelta(hours=1)),
            'customer_id': 'cus_1',
            'customer': {'id': 'cus_1', 'email': 'ali@example.com', 'first_name': 'Ali', 'last_name': 'Khan'},
            'shipping_address': {'city': 'Karachi', 'country_code': 'pk'},
            'items': [headphones_item(2, 2500)],
            'metadata': {'source': 'storefront'},
        },
        {
            'id': 'order_2',
            'display_id': 1002,
            'email': 'sara@example.com',
            'status': 'pending',
            'payment_status': 'awaiting',
            'fulfillment_status': 'not_fulfilled',
            'total': 2000,
            'subtotal': 2000,
            'created_at': _iso(timedelta(days=3)),
            'customer_id': 'cus_2',
            'shipping_address': {'city': 'lahore cantt'},
            'items': [tshirt_item(2, 1000)],
        },
        {
            'id': 'order_3',
            'display_id': 1003,
            'email': 'guest@example.com',
            'status': 'completed',
            'payment_status': 'not_paid',
            'total': 1500,
            'subtotal': 1500,
            'created_at': _iso(timedelta(days=10)),
            'shipping_address': {'city': '  KARACHI  saddar'},
            'items': [headphones_item(1, 1500)],
        },
        {
            'id': 'order_4',
            'display_id': 1004,
            'email': 'ali@example.com',
            'status': 'canceled',
            'payment_status': 'requires_action',
            'total': 3000,
            'created_at': _iso(timedelta(days=40)),
            'customer_id': 'cus_1',
            'items': [],
        },
    ]


def raw_products() -> list:
    return [
        {
            'id': 'prod_1',
            'title': 'Premium Wireless Headphones',
            'handle': 'wireless-headphones',
            'variants': [
                {'id': 'var_black', 'title': 'Black', 'sku': 'HEADPHONES-BLACK', 'inventory_quantity': 3},
                {'id': 'var_white', 'title': 'White', 'sku': 'HEADPHONES-WHITE', 'inventory_quantity': 0},
            ],
            'metadata': {
                'reviews': [
                    {
                        'id': 'rev_bad', 'product_id': 'prod_1', 'rating': 1,
                        'customer_name': 'Usman', 'comment': 'Stopped working',
                        'created_at': _iso(timedelta(days=2)),
                    },
                    {
                        'id': 'rev_good', 'product_id': 'prod_1', 'rating': 5,
                        'customer_name': 'Ayesha', 'comment': 'Great sound',
                        'created_at': _iso(timedelta(days=1)),
                    },
                ],
            },
        },
        {
            'id': 'prod_2',
            'title': 'Designer Cotton T-Shirt',
            'handle': 'cotton-tshirt',
            'variants': [
                {'id': 'var_s', 'title': 'S', 'sku': 'TSHIRT-S', 'inventory_quantity': 8},
                {'id': 'var_m', 'title': 'M', 'sku': 'TSHIRT-M', 'inventory_quantity': 50},
                {'id': 'var_l', 'title': 'L', 'sku': 'TSHIRT-L', 'inventory_quantity': 0,
                 'manage_inventory': False},
            ],
        },
    ]


def raw_customers() -> list:
    return [
        {'id': 'cus_1', 'email': 'ali@example.com', 'first_name': 'Ali', 'last_name': 'Khan',
         'created_at': _iso(timedelta(days=60))},
        {'id': 'cus_2', 'email': 'sara@example.com', 'first_name': 'Sara', 'last_name': 'Ahmed',
         'created_at': _iso(timedelta(hours=2))},
        {'id': 'cus_3', 'email': 'bilal@example.com', 'first_name': 'Bilal',
         'created_at': _iso(timedelta(days=1))},
    ]


def raw_carts() -> list:
    return [
        {
            'id': 'cart_recent',
            'email': 'hina@example.com',
            'updated_at': _iso(timedelta(hours=2)),
            'total': 3998,
            'items': [{'id': 'ci_1', 'title': 'Designer Cotton T-Shirt', 'quantity': 2, 'unit_price': 1999}],
            'region': {'id': 'reg_1', 'name': 'Pakistan', 'currency_code': 'pkr'},
        },
        {
            'id': 'cart_no_email',
            'updated_at': _iso(timedelta(hours=1)),
            'total': 1999,
            'items': [{'id': 'ci_2', 'title': 'Designer Cotton T-Shirt', 'quantity': 1, 'unit_price': 1999}],
        },
        {
            'id': 'cart_old',
            'email': 'old@example.com',
            'updated_at': _iso(timedelta(hours=30)),
            'total': 12999,
            'items': [{'id': 'ci_3', 'title': 'Premium Wireless Headphones', 'quantity': 1, 'unit_price': 12999}],
        },
        {
            'id': 'cart_done',
            'email': 'done@example.com',
            'updated_at': _iso(timedelta(hours=3)),
            'completed_at': _iso(timedelta(hours=3)),
            'total': 1999,
            'items': [{'id': 'ci_4', 'title': 'Designer Cotton T-Shirt', 'quantity': 1, 'unit_price': 1999}],
        },
    ]


class FakeMedusaConnector:
    """
    In-memory stand-in for MedusaConnector

    Records are kept as raw backend dicts and parsed on the way out like the
    real connector does; order lists come back newest first and honour
    `limit`. Set `fail_with` to make every call raise.
    """

    def __init__(self, orders=None, products=None, customers=None, carts=None):
        self.base_url = "http://medusa.test"
        self.orders = {o['id']: o for o in (raw_orders() if orders is None else orders)}
        self.products = {p['id']: p for p in (raw_products() if products is None else products)}
        self.customers = {c['id']: c for c in (raw_customers() if customers is None else customers)}
        self.carts = raw_carts() if carts is None else carts
        self.campaigns = {}
        self.promotions = []
        self.rejected_codes = 0
        self.fail_with = None
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _not_found(kind, record_id):
        return MedusaAPIError(f"{kind} with id: {record_id} was not found", status_code=404,
                              path=f"/admin/{kind.lower()}s/{record_id}")

    async def health(self):
        return self.fail_with is None

    # Orders

    async def list_orders(self, limit=None, created_after=None, created_before=None,
                          status=None, customer_id=None):
        self._check('list_orders')
        orders = parse_records(Order, list(self.orders.values()), 'order')
        if status:
            orders = [o for o in orders if o.status in status]
        if customer_id:
            orders = [o for o in orders if o.customer_id == customer_id]
        if created_after:
            orders = [o for o in orders if o.created_at and o.created_at >= created_after]
        if created_before:
            orders = [o for o in orders if o.created_at and o.created_at <= created_before]
        orders.sort(key=lambda o: o.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return orders[:limit or settings.ORDERS_FETCH_LIMIT]

    async def get_order(self, order_id):
        self._check('get_order')
        if order_id not in self.orders:
            raise self._not_found('Order', order_id)
        return Order.model_validate(self.orders[order_id])

    async def update_order(self, order_id, payload):
        self._check('update_order')
        if order_id not in self.orders:
            raise self._not_found('Order', order_id)
        self.orders[order_id] = {**self.orders[order_id], **copy.deepcopy(payload)}
        return Order.model_validate(self.orders[order_id])

    # Products

    async def list_products(self, limit=None, handle=None):
        self._check('list_products')
        products = parse_records(Product, list(self.products.values()), 'product')
        if handle:
            products = [p for p in products if p.handle == handle]
        return products

    async def get_product(self, product_id):
        self._check('get_product')
        if product_id not in self.products:
            raise self._not_found('Product', product_id)
        return Product.model_validate(self.products[product_id])

    async def update_product(self, product_id, payload):
        self._check('update_product')
        self.products[product_id] = {**self.products[product_id], **copy.deepcopy(payload)}
        return Product.model_validate(self.products[product_id])

    # Customers & carts

    async def list_customers(self, limit=None):
        self._check('list_customers')
        return parse_records(Customer, list(self.customers.values()), 'customer')

    async def get_customer(self, customer_id):
        self._check('get_customer')
        if customer_id not in self.customers:
            raise self._not_found('Customer', customer_id)
        return Customer.model_validate(self.customers[customer_id])

    async def update_customer(self, customer_id, payload):
        self._check('update_customer')
        self.customers[customer_id] = {**self.customers[customer_id], **copy.deepcopy(payload)}
        return Customer.model_validate(self.customers[customer_id])

    async def list_carts(self, updated_after=None, limit=50):
        self._check('list_carts')
        return parse_records(Cart, self.carts, 'cart')

    # Campaigns & promotions

    async def list_campaigns(self):
        self._check('list_campaigns')
        return [copy.deepcopy(c) for c in self.campaigns.values()]

    async def get_campaign(self, campaign_id):
        self._check('get_campaign')
        if campaign_id not in self.campaigns:
            raise self._not_found('Campaign', campaign_id)
        return copy.deepcopy(self.campaigns[campaign_id])

    async def create_campaign(self, payload):
        self._check('create_campaign')
        campaign_id = f"camp_{len(self.campaigns) + 1}"
        self.campaigns[campaign_id] = {'id': campaign_id, 'promotions': [], 'budget': None, **payload}
        return copy.deepcopy(self.campaigns[campaign_id])

    async def create_promotion(self, payload):
        self._check('create_promotion')
        if self.rejected_codes:
            self.rejected_codes -= 1
            raise MedusaAPIError("Promotion with code already exists", status_code=400,
                                 path="/admin/promotions")
        promotion = {'id': f"promo_{len(self.promotions) + 1}", **copy.deepcopy(payload)}
        self.promotions.append(promotion)
        campaign = self.campaigns.get(payload.get('campaign_id'))
        if campaign is not None:
            campaign['promotions'].append(promotion)
        return promotion


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def orders():
    return [Order.model_validate(o) for o in raw_orders()]


@pytest.fixture
def products():
    return [Product.model_validate(p) for p in raw_products()]


@pytest.fixture
def customers():
    return [Customer.model_validate(c) for c in raw_customers()]


@pytest.fixture
def carts():
    return [Cart.model_validate(c) for c in raw_carts()]


@pytest.fixture
def fake_connector():
    return FakeMedusaConnector()


@pytest.fixture
def connector_factory():
    """Build a fake connector with custom records (None keeps the samples)"""
    return FakeMedusaConnector
