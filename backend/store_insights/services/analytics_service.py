"""
Analytics Service
Builds the admin dashboard payloads from backend records

Each dashboard has a pure `build_*` function. Called with empty inputs it
yields the zeroed payload that routes return when the backend is unreachable,
so the empty state and the degraded state always have the same shape.

Author: Store Insights
Date: 2026-01-19
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.core.config import settings
from store_insights.domain.customer import Cart, Customer
from store_insights.domain.order import Order
from store_insights.domain.product import Product
from store_insights.services import order_stats
from store_insights.services.date_ranges import (
    DEFAULT_FINANCIAL_RANGE,
    FINANCIAL_RANGES,
    financial_window,
)
from store_insights.services.formatting import local_time_label, to_local, utc_now

logger = logging.getLogger(__name__)


# ============================================================================
# PAYLOAD BUILDERS
# ============================================================================

def build_dashboard(orders: Sequence[Order], products: Sequence[Product],
                    customers: Sequence[Customer], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Today's numbers, recent activity, low stock and a 7-day revenue chart"""
    now = now or utc_now()
    today = to_local(now).date()
    completed = [o for o in orders if o.status == 'completed']
    today_orders = [o for o in completed if o.created_at and to_local(o.created_at).date() == today]

    recent_orders = order_stats.sort_newest(orders)[:10]
    recent_customers = order_stats.sort_newest(customers)[:10]

    return {
        'today': {
            'revenue': order_stats.total_revenue(today_orders),
            'orders': len(today_orders),
        },
        'recent_orders': [order_stats.order_summary(o) for o in recent_orders],
        'low_stock': order_stats.stock_alerts(products, orders)['low_stock'],
        'top_products': order_stats.top_products(orders, limit=5, sort_by='quantity_sold'),
        'revenue_chart': order_stats.daily_revenue(completed, days=7, today=now),
        'recent_customers': [
            {'id': c.id, 'email': c.email, 'created_at': c.created_at}
            for c in recent_customers
        ],
        'is_empty': not orders and not products and not customers,
    }


def build_overview(orders: Sequence[Order]) -> Dict[str, Any]:
    return order_stats.store_overview(orders)


def build_pakistan_metrics(orders: Sequence[Order], now: Optional[datetime] = None) -> Dict[str, Any]:
    """COD vs online, orders by city, Ramadan/Eid trends and local time"""
    return {
        'cod_vs_online': order_stats.payment_split(orders),
        'orders_by_city': order_stats.orders_by_city(orders),
        'seasonal_trends': order_stats.seasonal_trends(orders),
        'total_revenue': order_stats.total_revenue(orders),
        'total_orders': len(orders),
        'current_time': local_time_label(now),
        'timezone': settings.STORE_TIMEZONE,
        'is_empty': not orders,
    }


def build_financials(orders: Sequence[Order], range_name: Optional[str] = None,
                     now: Optional[datetime] = None) -> Dict[str, Any]:
    range_name = range_name if range_name in FINANCIAL_RANGES else DEFAULT_FINANCIAL_RANGE
    window = financial_window(range_name, now)
    in_range = [o for o in orders if window.contains(o.created_at)]

    payload = order_stats.financial_breakdown(in_range)
    payload.update({
        'range': range_name,
        'start_date': window.start,
        'end_date': window.end,
    })
    return payload


def build_top_performers(orders: Sequence[Order], now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        'top_products': order_stats.top_products(orders),
        'top_customers': order_stats.top_customers(orders),
        'top_categories': order_stats.top_categories(orders),
        'top_variants': order_stats.top_variants(orders),
        'trending_products': order_stats.trending_products(orders, now),
        'is_empty': not orders,
    }


def build_charts(orders: Sequence[Order], now: Optional[datetime] = None) -> Dict[str, Any]:
    daily = order_stats.daily_revenue(orders, days=30, today=now)
    payment_methods = order_stats.financial_breakdown(orders)['payment_methods']
    return {
        'revenue_line_chart': daily,
        'cumulative_sales': order_stats.cumulative_revenue(daily),
        'category_pie_chart': order_stats.pie_slices(order_stats.top_categories(orders)),
        'product_pie_chart': order_stats.pie_slices(order_stats.top_products(orders)),
        'payment_methods_pie': order_stats.pie_slices(payment_methods, value_key='count'),
        'month_comparison': order_stats.month_comparison(orders, now),
        'heatmap_data': order_stats.order_heatmap(orders),
        'is_empty': not orders,
    }


def build_alerts(orders: Sequence[Order], products: Sequence[Product],
                 now: Optional[datetime] = None) -> Dict[str, Any]:
    stock = order_stats.stock_alerts(products, orders)
    payload = {
        'low_stock_products': stock['low_stock'],
        'out_of_stock_products': stock['out_of_stock'],
        'pending_orders': order_stats.pending_orders(orders, now),
        'failed_payments': order_stats.failed_payments(orders),
        'negative_reviews': order_stats.negative_reviews(products),
    }
    payload['total_alerts'] = sum(len(rows) for rows in payload.values())
    payload['is_empty'] = payload['total_alerts'] == 0
    return payload


def build_customer_overview(customers: Sequence[Customer], orders: Sequence[Order],
                            now: Optional[datetime] = None) -> Dict[str, Any]:
    return order_stats.customer_insights(customers, orders, now)


def build_customer_ltv(customers: Sequence[Customer], orders: Sequence[Order],
                       segment: Optional[str] = 'all') -> Dict[str, Any]:
    rows = order_stats.customer_lifetime_values(customers, orders, segment)
    return {
        'customers': rows,
        'count': len(rows),
        'segment': segment or 'all',
        'is_empty': not rows,
    }


def build_abandoned_carts(carts: Sequence[Cart], now: Optional[datetime] = None) -> Dict[str, Any]:
    rows = order_stats.abandoned_carts(carts, now)
    return {
        'carts': rows,
        'count': len(rows),
        'potential_revenue': sum(r['total'] for r in rows),
        'is_empty': not rows,
    }


# ============================================================================
# SERVICE
# ============================================================================

class AnalyticsService:
    """
    Fetches records from the commerce backend and builds dashboard payloads

    Independent fetches run concurrently. Backend failures propagate as
    MedusaAPIError; the API layer turns them into degraded responses.
    """

    def __init__(self, connector: MedusaConnector):
        self.connector = connector

    async def _orders(self) -> List[Order]:
        orders = await self.connector.list_orders()
        logger.debug(f"Fetched {len(orders)} orders")
        return orders

    async def dashboard(self) -> Dict[str, Any]:
        orders, products, customers = await asyncio.gather(
            self._orders(),
            self.connector.list_products(limit=100),
            self.connector.list_customers(),
        )
        return build_dashboard(orders, products, customers)

    async def overview(self) -> Dict[str, Any]:
        return build_overview(await self._orders())

    async def pakistan_metrics(self) -> Dict[str, Any]:
        return build_pakistan_metrics(await self._orders())

    async def financials(self, range_name: Optional[str] = None) -> Dict[str, Any]:
        return build_financials(await self._orders(), range_name)

    async def top_performers(self) -> Dict[str, Any]:
        return build_top_performers(await self._orders())

    async def charts(self) -> Dict[str, Any]:
        return build_charts(await self._orders())

    async def alerts(self) -> Dict[str, Any]:
        orders, products = await asyncio.gather(
            self._orders(),
            self.connector.list_products(),
        )
        return build_alerts(orders, products)

    async def customer_overview(self) -> Dict[str, Any]:
        customers, orders = await asyncio.gather(
            self.connector.list_customers(),
            self._orders(),
        )
        return build_customer_overview(customers, orders)

    async def customer_lifetime_values(self, segment: Optional[str] = 'all') -> Dict[str, Any]:
        customers, orders = await asyncio.gather(
            self.connector.list_customers(),
            self.connector.list_orders(status=['completed']),
        )
        return build_customer_ltv(customers, orders, segment)

    async def abandoned_carts(self) -> Dict[str, Any]:
        since = utc_now() - timedelta(hours=24)
        carts = await self.connector.list_carts(updated_after=since)
        return build_abandoned_carts(carts)
