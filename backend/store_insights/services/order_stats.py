"""
Order Statistics
Pure aggregation functions over parsed orders, products, customers and carts.

Every dashboard, report and export computes its numbers here so that totals,
payment splits and city breakdowns agree across screens. Functions never
raise on partially populated records: missing amounts count as 0, missing
cities as "Unknown" and orders without a timestamp are left out of
time-based series.

Author: Store Insights
Date: 2026-01-18
"""
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from store_insights.core.config import settings
from store_insights.domain.customer import Cart, Customer
from store_insights.domain.engagement import REVIEWS_METADATA_KEY
from store_insights.domain.order import Order, OrderItem
from store_insights.domain.product import Product
from store_insights.services.formatting import (
    chart_color,
    ensure_aware,
    round_half_up,
    time_ago,
    to_local,
    utc_now,
)

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

COD_STATUSES = ('awaiting', 'not_paid')
ONLINE_STATUSES = ('captured', 'authorized')
FAILED_PAYMENT_STATUSES = ('not_paid', 'requires_action')

# Checked in this order; the first substring match wins
PAKISTAN_CITIES = [
    'Karachi', 'Lahore', 'Islamabad', 'Rawalpindi', 'Faisalabad',
    'Multan', 'Peshawar', 'Quetta', 'Sialkot', 'Gujranwala',
]
UNKNOWN_CITY = 'Unknown'

# Approximate, Islamic calendar months shift every year
RAMADAN_MONTHS = {'2024-03', '2024-04', '2025-03', '2026-02', '2026-03'}
EID_MONTHS = {'2024-04', '2024-06', '2025-03', '2025-06', '2026-03', '2026-06'}

WEEKDAYS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']

PAYMENT_METHOD_LABELS = {
    'cod': 'Cash on Delivery (COD)',
    'online': 'Credit/Debit Card',
    'requires_action': 'Pending Payment',
}

VIP_MIN_ORDERS = 3
VIP_MIN_SPEND = 50000
LTV_SEGMENTS = [('vip', 50000), ('high', 20000), ('medium', 5000)]

SUGGESTED_RESTOCK = 20


# ============================================================================
# AMOUNTS & RATIOS
# ============================================================================

def to_amount(value: Any) -> float:
    """Convert a backend amount to whole currency units"""
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return number / (settings.AMOUNT_DIVISOR or 1)


def order_amount(order: Order) -> float:
    return to_amount(order.total)


def line_revenue(item: OrderItem) -> float:
    return to_amount((item.unit_price or 0) * (item.quantity or 0))


def total_revenue(orders: Iterable[Order]) -> float:
    return sum(order_amount(o) for o in orders)


def average_order_value(orders: Sequence[Order]) -> float:
    if not orders:
        return 0.0
    return total_revenue(orders) / len(orders)


def percentage(value: float, total: float) -> int:
    """Whole-number share of `total` (halves round up), 0 when total is 0"""
    if not total:
        return 0
    return int(round_half_up(value / total * 100))


def growth_rate(current: float, previous: float, new_is_full_growth: bool = False) -> float:
    """
    Period-over-period change in percent

    With no previous value the rate is 0, or 100 when `new_is_full_growth`
    is set and there is current activity (used for trending products).
    """
    if previous > 0:
        return (current - previous) / previous * 100
    if new_is_full_growth and current > 0:
        return 100.0
    return 0.0


# ============================================================================
# PAYMENTS
# ============================================================================

def classify_payment(status: Optional[str]) -> str:
    """'cod' for unpaid/awaiting, 'online' for captured/authorized, else 'other'"""
    if status in COD_STATUSES:
        return 'cod'
    if status in ONLINE_STATUSES:
        return 'online'
    return 'other'


def payment_split(orders: Sequence[Order]) -> Dict[str, Any]:
    """
    COD vs online breakdown

    Percentages are taken over COD + online orders only and always sum to
    100 when that base is non-empty.
    """
    split = {
        'cod_orders': 0, 'cod_amount': 0.0,
        'online_orders': 0, 'online_amount': 0.0,
        'other_orders': 0, 'other_amount': 0.0,
    }
    for order in orders:
        kind = classify_payment(order.payment_status)
        split[f'{kind}_orders'] += 1
        split[f'{kind}_amount'] += order_amount(order)

    base = split['cod_orders'] + split['online_orders']
    cod_percentage = percentage(split['cod_orders'], base)
    split['total_orders'] = len(orders)
    split['cod_percentage'] = cod_percentage
    split['online_percentage'] = 100 - cod_percentage if base else 0
    return split


def _payment_method_label(status: Optional[str]) -> str:
    kind = classify_payment(status)
    if kind == 'other':
        kind = status
    return PAYMENT_METHOD_LABELS.get(kind, 'Unknown')


def financial_breakdown(orders: Sequence[Order]) -> Dict[str, Any]:
    """
    Revenue, deductions and profit for a set of orders

    Net profit = revenue - discounts - shipping - taxes - cost of goods, where
    cost of goods uses the variant's `cost_price` metadata.
    """
    revenue = total_revenue(orders)
    discounts = sum(to_amount(o.discount_total) for o in orders)
    shipping = sum(to_amount(o.shipping_total) for o in orders)
    taxes = sum(to_amount(o.tax_total) for o in orders)
    product_sales = sum(to_amount(o.subtotal) for o in orders)

    cost_of_goods = 0.0
    for order in orders:
        for item in order.items:
            if item.variant:
                cost_of_goods += to_amount(item.variant.cost_price * item.quantity)

    outstanding = sum(
        order_amount(o) for o in orders if classify_payment(o.payment_status) == 'cod'
    )

    methods: Dict[str, Dict[str, float]] = {}
    for order in orders:
        label = _payment_method_label(order.payment_status)
        entry = methods.setdefault(label, {'count': 0, 'amount': 0.0})
        entry['count'] += 1
        entry['amount'] += order_amount(order)

    methods_total = sum(m['amount'] for m in methods.values())
    payment_methods = [
        {
            'method': label,
            'count': data['count'],
            'amount': data['amount'],
            'percentage': percentage(data['amount'], methods_total),
        }
        for label, data in methods.items()
    ]

    return {
        'total_revenue': revenue,
        'discounts_given': discounts,
        'shipping_costs': shipping,
        'taxes_collected': taxes,
        'cost_of_goods': cost_of_goods,
        'net_profit': revenue - discounts - shipping - taxes - cost_of_goods,
        'outstanding_payments': outstanding,
        'payment_methods': payment_methods,
        'revenue_breakdown': {
            'product_sales': product_sales,
            'shipping_revenue': shipping,
            'tax_revenue': taxes,
        },
        'order_count': len(orders),
        'is_empty': not orders,
    }


# ============================================================================
# GEOGRAPHY & TIME BUCKETS
# ============================================================================

def normalize_city(raw: Optional[str]) -> str:
    """Map free-text city input to a canonical Pakistani city name"""
    city = (raw or '').strip()
    if not city:
        return UNKNOWN_CITY
    lowered = city.lower()
    for name in PAKISTAN_CITIES:
        if name.lower() in lowered:
            return name
    return city


def orders_by_city(orders: Sequence[Order], limit: int = 10) -> List[Dict[str, Any]]:
    buckets: Dict[str, Dict[str, float]] = {}
    for order in orders:
        entry = buckets.setdefault(normalize_city(order.city), {'orders': 0, 'revenue': 0.0})
        entry['orders'] += 1
        entry['revenue'] += order_amount(order)

    rows = [
        {
            'city': city,
            'orders': data['orders'],
            'revenue': data['revenue'],
            'percentage': percentage(data['orders'], len(orders)),
        }
        for city, data in buckets.items()
    ]
    rows.sort(key=lambda r: r['orders'], reverse=True)
    return rows[:limit]


def _local_created(order: Order) -> Optional[datetime]:
    return to_local(order.created_at) if order.created_at else None


def orders_by_month(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    """Chronological YYYY-MM buckets in store-local time"""
    buckets: Dict[str, Dict[str, float]] = defaultdict(lambda: {'revenue': 0.0, 'orders': 0})
    for order in orders:
        created = _local_created(order)
        if created is None:
            continue
        key = created.strftime('%Y-%m')
        buckets[key]['revenue'] += order_amount(order)
        buckets[key]['orders'] += 1
    return [
        {'month': key, 'revenue': buckets[key]['revenue'], 'orders': buckets[key]['orders']}
        for key in sorted(buckets)
    ]


def seasonal_trends(orders: Iterable[Order], last: int = 12) -> List[Dict[str, Any]]:
    """Most recent `last` months, flagged for Ramadan and Eid"""
    trends = []
    for bucket in orders_by_month(orders)[-last:]:
        key = bucket['month']
        trends.append({
            'month': datetime.strptime(key, '%Y-%m').strftime('%b %Y'),
            'month_key': key,
            'revenue': bucket['revenue'],
            'orders': bucket['orders'],
            'is_ramadan': key in RAMADAN_MONTHS,
            'is_eid': key in EID_MONTHS,
        })
    return trends


def daily_revenue(orders: Iterable[Order], days: int = 7, today: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """One row per local calendar day, oldest first, ending today"""
    end = to_local(today or utc_now()).date()
    series: Dict[date, Dict[str, Any]] = {}
    for offset in range(days - 1, -1, -1):
        day = end - timedelta(days=offset)
        series[day] = {
            'date': day.isoformat(),
            'label': f"{day.strftime('%b')} {day.day}",
            'revenue': 0.0,
            'orders': 0,
        }

    for order in orders:
        created = _local_created(order)
        if created is None or created.date() not in series:
            continue
        row = series[created.date()]
        row['revenue'] += order_amount(order)
        row['orders'] += 1

    return list(series.values())


def cumulative_revenue(daily: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    running = 0.0
    rows = []
    for row in daily:
        running += row['revenue']
        rows.append({'date': row['date'], 'label': row.get('label'), 'cumulative': running})
    return rows


def month_comparison(orders: Iterable[Order], now: Optional[datetime] = None) -> Dict[str, float]:
    """Revenue this calendar month vs last calendar month"""
    current = to_local(now or utc_now())
    this_key = current.strftime('%Y-%m')
    last_key = (current.replace(day=1) - timedelta(days=1)).strftime('%Y-%m')

    this_month = last_month = 0.0
    for order in orders:
        created = _local_created(order)
        if created is None:
            continue
        key = created.strftime('%Y-%m')
        if key == this_key:
            this_month += order_amount(order)
        elif key == last_key:
            last_month += order_amount(order)

    return {
        'this_month': this_month,
        'last_month': last_month,
        'growth': growth_rate(this_month, last_month),
    }


def order_heatmap(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    """7 x 24 grid of order counts by local weekday and hour (Mon first)"""
    grid = [[0] * 24 for _ in WEEKDAYS]
    for order in orders:
        created = _local_created(order)
        if created is not None:
            grid[created.weekday()][created.hour] += 1
    return [
        {'day': day, 'hour': hour, 'orders': grid[index][hour]}
        for index, day in enumerate(WEEKDAYS)
        for hour in range(24)
    ]


def pie_slices(rows: Iterable[Dict[str, Any]], value_key: str = 'revenue') -> List[Dict[str, Any]]:
    """Copy rows adding each one's share of the total and a palette colour"""
    rows = list(rows)
    total = sum(r.get(value_key) or 0 for r in rows)
    return [
        {**row, 'percentage': percentage(row.get(value_key) or 0, total), 'color': chart_color(i)}
        for i, row in enumerate(rows)
    ]


# ============================================================================
# TOP PERFORMERS
# ============================================================================

def _product_key(item: OrderItem) -> str:
    return item.resolved_product_id or item.product_title


def top_products(orders: Iterable[Order], limit: int = 5, sort_by: str = 'revenue') -> List[Dict[str, Any]]:
    """Products ranked by line revenue (or 'quantity_sold')"""
    stats: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        for item in order.items:
            key = _product_key(item)
            entry = stats.setdefault(key, {
                'id': key,
                'name': item.product_title,
                'quantity_sold': 0,
                'revenue': 0.0,
                'image': item.image,
            })
            entry['quantity_sold'] += item.quantity
            entry['revenue'] += line_revenue(item)
            if not entry['image']:
                entry['image'] = item.image

    return sorted(stats.values(), key=lambda s: s[sort_by], reverse=True)[:limit]


def top_customers(orders: Iterable[Order], limit: int = 5) -> List[Dict[str, Any]]:
    """Registered customers ranked by total spend (guest orders are skipped)"""
    stats: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        if not order.customer_id:
            continue
        entry = stats.setdefault(order.customer_id, {
            'id': order.customer_id,
            'name': order.customer_label,
            'email': order.email or 'Guest',
            'total_spend': 0.0,
            'order_count': 0,
        })
        entry['total_spend'] += order_amount(order)
        entry['order_count'] += 1

    return sorted(stats.values(), key=lambda s: s['total_spend'], reverse=True)[:limit]


def top_categories(orders: Iterable[Order], limit: int = 5) -> List[Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        for item in order.items:
            entry = stats.setdefault(item.category_name, {'revenue': 0.0, 'products': set()})
            entry['revenue'] += line_revenue(item)
            if item.resolved_product_id:
                entry['products'].add(item.resolved_product_id)

    rows = [
        {'name': name, 'revenue': data['revenue'], 'product_count': len(data['products'])}
        for name, data in stats.items()
    ]
    rows.sort(key=lambda r: r['revenue'], reverse=True)
    return rows[:limit]


def top_variants(orders: Iterable[Order], limit: int = 5) -> List[Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        for item in order.items:
            if not item.variant_id:
                continue
            product_name = item.product_title
            entry = stats.setdefault(item.variant_id, {
                'variant_id': item.variant_id,
                'variant_name': (item.variant.title if item.variant else None) or 'Default',
                'product_name': 'Unknown' if product_name == 'Unknown Product' else product_name,
                'quantity_sold': 0,
                'revenue': 0.0,
            })
            entry['quantity_sold'] += item.quantity
            entry['revenue'] += line_revenue(item)

    return sorted(stats.values(), key=lambda s: s['revenue'], reverse=True)[:limit]


def trending_products(orders: Iterable[Order], now: Optional[datetime] = None,
                      limit: int = 5) -> List[Dict[str, Any]]:
    """Units sold in the last 7 days vs the 7 days before; growing products only"""
    now = ensure_aware(now or utc_now())
    current_start = now - timedelta(days=7)
    previous_start = now - timedelta(days=14)

    current: Dict[str, Dict[str, Any]] = {}
    previous: Dict[str, int] = defaultdict(int)
    for order in orders:
        if order.created_at is None:
            continue
        created = ensure_aware(order.created_at)
        for item in order.items:
            key = _product_key(item)
            if created >= current_start:
                entry = current.setdefault(key, {'name': item.product_title, 'sales': 0})
                entry['sales'] += item.quantity
            elif created >= previous_start:
                previous[key] += item.quantity

    rows = []
    for key, data in current.items():
        previous_sales = previous.get(key, 0)
        rate = growth_rate(data['sales'], previous_sales, new_is_full_growth=True)
        if rate > 0:
            rows.append({
                'id': key,
                'name': data['name'],
                'current_sales': data['sales'],
                'previous_sales': previous_sales,
                'growth_rate': rate,
            })
    rows.sort(key=lambda r: r['growth_rate'], reverse=True)
    return rows[:limit]


# ============================================================================
# CUSTOMERS
# ============================================================================

def _latest(values: Iterable[Optional[datetime]]) -> Optional[datetime]:
    present = [ensure_aware(v) for v in values if v is not None]
    return max(present) if present else None


def sort_newest(records: Iterable[Any]) -> List[Any]:
    """Newest first by created_at; records without a timestamp go last"""
    records = list(records)
    dated = [r for r in records if r.created_at is not None]
    undated = [r for r in records if r.created_at is None]
    dated.sort(key=lambda r: ensure_aware(r.created_at), reverse=True)
    return dated + undated


def customer_insights(customers: Sequence[Customer], orders: Sequence[Order],
                      now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Customer overview: signups, returning rate, segments, activity feed,
    geographic spread and top spenders
    """
    now_local = to_local(now or utc_now())
    today = now_local.date()
    week_ago = datetime.combine(today - timedelta(days=7), datetime.min.time(), tzinfo=now_local.tzinfo)

    new_today = sum(1 for c in customers if c.created_at and to_local(c.created_at).date() == today)
    new_this_week = sum(1 for c in customers if c.created_at and to_local(c.created_at) >= week_ago)

    by_id = {c.id: c for c in customers}
    spending: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        if not order.customer_id:
            continue
        if order.customer_id not in spending:
            customer = by_id.get(order.customer_id)
            spending[order.customer_id] = {
                'orders': 0,
                'spend': 0.0,
                'email': order.email or (customer.email if customer else None) or 'Unknown',
                'name': customer.full_name if customer else 'Unknown',
            }
        spending[order.customer_id]['orders'] += 1
        spending[order.customer_id]['spend'] += order_amount(order)

    returning = sum(1 for s in spending.values() if s['orders'] > 1)

    vip = [s for s in spending.values() if s['orders'] > VIP_MIN_ORDERS or s['spend'] > VIP_MIN_SPEND]
    regular = [s for s in spending.values() if 1 <= s['orders'] <= VIP_MIN_ORDERS and s['spend'] <= VIP_MIN_SPEND]
    without_orders = [c for c in customers if c.id not in spending]

    activity = []
    for customer in sort_newest(customers)[:10]:
        activity.append({
            'id': customer.id,
            'type': 'signup',
            'customer': customer.full_name or 'Customer',
            'email': customer.email,
            'amount': None,
            'timestamp': customer.created_at,
        })
    for order in sort_newest(orders)[:10]:
        activity.append({
            'id': order.id,
            'type': 'order',
            'customer': order.customer_label,
            'email': order.email or 'N/A',
            'amount': order_amount(order),
            'timestamp': order.created_at,
        })
    activity = _sort_newest_dicts(activity)[:15]
    for row in activity:
        row['time_ago'] = time_ago(row['timestamp'], now) if row['timestamp'] else None

    city_counts: Dict[str, int] = defaultdict(int)
    for order in orders:
        city_counts[order.city or UNKNOWN_CITY] += 1
    geographic = [
        {'city': city, 'count': count, 'percentage': percentage(count, len(orders))}
        for city, count in city_counts.items()
    ]
    geographic.sort(key=lambda r: r['count'], reverse=True)

    top_spenders = [
        {
            'id': customer_id,
            'name': data['name'] or data['email'],
            'email': data['email'],
            'total_spend': data['spend'],
            'order_count': data['orders'],
        }
        for customer_id, data in spending.items()
    ]
    top_spenders.sort(key=lambda r: r['total_spend'], reverse=True)

    return {
        'new_customers_today': new_today,
        'new_customers_this_week': new_this_week,
        'returning_customers_percent': percentage(returning, len(spending)),
        'total_customers': len(customers),
        'customer_segmentation': {
            'vip': {'count': len(vip), 'total_spend': sum(s['spend'] for s in vip)},
            'regular': {'count': len(regular), 'total_spend': sum(s['spend'] for s in regular)},
            'new': {'count': len(without_orders), 'total_spend': 0.0},
        },
        'recent_activity': activity,
        'geographic_distribution': geographic[:10],
        'top_spenders': top_spenders[:5],
        'is_empty': not customers and not orders,
    }


def _sort_newest_dicts(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    dated = [r for r in rows if r['timestamp'] is not None]
    undated = [r for r in rows if r['timestamp'] is None]
    dated.sort(key=lambda r: ensure_aware(r['timestamp']), reverse=True)
    return dated + undated


def ltv_segment(lifetime_value: float) -> str:
    for name, floor in LTV_SEGMENTS:
        if lifetime_value >= floor:
            return name
    return 'low'


def customer_lifetime_values(customers: Iterable[Customer], orders: Iterable[Order],
                             segment: Optional[str] = 'all') -> List[Dict[str, Any]]:
    """
    Lifetime value per customer over completed orders, highest first

    Args:
        segment: 'vip', 'high', 'medium', 'low' or 'all'
    """
    completed: Dict[str, List[Order]] = defaultdict(list)
    for order in orders:
        if order.status == 'completed' and order.customer_id:
            completed[order.customer_id].append(order)

    rows = []
    for customer in customers:
        customer_orders = completed.get(customer.id, [])
        value = total_revenue(customer_orders)
        count = len(customer_orders)
        last_order = _latest(o.created_at for o in customer_orders)
        rows.append({
            'id': customer.id,
            'email': customer.email,
            'name': customer.full_name or customer.email,
            'lifetime_value': value,
            'order_count': count,
            'average_order_value': value / count if count else 0.0,
            'last_order_date': last_order or customer.created_at,
            'segment': ltv_segment(value),
        })

    if segment and segment != 'all':
        rows = [r for r in rows if r['segment'] == segment]
    rows.sort(key=lambda r: r['lifetime_value'], reverse=True)
    return rows


# ============================================================================
# ALERTS
# ============================================================================

def stock_alerts(products: Iterable[Product], orders: Iterable[Order] = (),
                 threshold: int = None, critical: int = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    Variant-level stock warnings

    Low stock: 0 < stock <= threshold (critical at or below `critical`), max 10.
    Out of stock: stock == 0, max 5. Variants that do not manage inventory
    are skipped.
    """
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    critical = settings.CRITICAL_STOCK_THRESHOLD if critical is None else critical

    last_sold: Dict[str, datetime] = {}
    for order in orders:
        if order.created_at is None:
            continue
        created = ensure_aware(order.created_at)
        for item in order.items:
            product_id = item.resolved_product_id
            if product_id and (product_id not in last_sold or created > last_sold[product_id]):
                last_sold[product_id] = created

    low_stock, out_of_stock = [], []
    for product in products:
        for variant in product.variants:
            if not variant.manage_inventory:
                continue
            stock = variant.inventory_quantity
            if stock <= 0:
                out_of_stock.append({
                    'id': product.id,
                    'name': product.title,
                    'variant': variant.title,
                    'sku': variant.sku,
                    'last_sold_at': last_sold.get(product.id),
                    'suggested_restock': SUGGESTED_RESTOCK,
                })
            elif stock <= threshold:
                low_stock.append({
                    'id': product.id,
                    'name': product.title,
                    'variant': variant.title,
                    'sku': variant.sku,
                    'current_stock': stock,
                    'threshold': threshold,
                    'status': 'critical' if stock <= critical else 'warning',
                })

    return {'low_stock': low_stock[:10], 'out_of_stock': out_of_stock[:5]}


def negative_reviews(products: Iterable[Product], max_rating: int = 2, limit: int = 5) -> List[Dict[str, Any]]:
    """Reviews rated `max_rating` or lower, newest first"""
    rows = []
    for product in products:
        reviews = product.metadata.get(REVIEWS_METADATA_KEY) or []
        if not isinstance(reviews, list):
            continue
        for review in reviews:
            if not isinstance(review, dict):
                continue
            try:
                rating = int(review.get('rating') or 0)
            except (TypeError, ValueError):
                continue
            if 0 < rating <= max_rating:
                rows.append({
                    'id': review.get('id'),
                    'product_id': product.id,
                    'product': product.title,
                    'customer': review.get('customer_name') or 'Anonymous',
                    'rating': rating,
                    'comment': review.get('comment') or '',
                    'date': review.get('created_at'),
                })
    rows.sort(key=lambda r: str(r['date'] or ''), reverse=True)
    return rows[:limit]


def order_summary(order: Order) -> Dict[str, Any]:
    """Compact order row for lists and alerts"""
    return {
        'id': order.id,
        'display_id': order.display_id,
        'order_number': order.order_number,
        'email': order.email,
        'customer': order.customer_label,
        'total': order_amount(order),
        'status': order.status,
        'payment_status': order.payment_status,
        'fulfillment_status': order.fulfillment_status,
        'created_at': order.created_at,
    }


def pending_orders(orders: Iterable[Order], now: Optional[datetime] = None,
                   limit: int = 10) -> List[Dict[str, Any]]:
    """Orders still pending or not yet fulfilled, with whole days waiting"""
    now = ensure_aware(now or utc_now())
    rows = []
    for order in orders:
        if order.status != 'pending' and order.fulfillment_status != 'not_fulfilled':
            continue
        waiting = (now - ensure_aware(order.created_at)).days if order.created_at else 0
        rows.append({
            'id': order.id,
            'order_number': order.order_number,
            'customer': order.email or 'Guest',
            'amount': order_amount(order),
            'days_waiting': max(waiting, 0),
        })
        if len(rows) >= limit:
            break
    return rows


def failed_payments(orders: Iterable[Order], limit: int = 5) -> List[Dict[str, Any]]:
    rows = []
    for order in orders:
        if order.payment_status not in FAILED_PAYMENT_STATUSES:
            continue
        rows.append({
            'id': order.id,
            'order_number': order.order_number,
            'customer': order.email or 'Guest',
            'amount': order_amount(order),
            'reason': 'Requires Action' if order.payment_status == 'requires_action' else 'Payment Failed',
        })
        if len(rows) >= limit:
            break
    return rows


# ============================================================================
# OVERVIEW & CARTS
# ============================================================================

def store_overview(orders: Sequence[Order]) -> Dict[str, Any]:
    return {
        'total_revenue': total_revenue(orders),
        'total_orders': len(orders),
        'average_order_value': average_order_value(orders),
        'pending_orders': sum(1 for o in orders if o.status == 'pending'),
        'is_empty': not orders,
    }


def recovery_url(cart_id: str) -> str:
    """Storefront checkout link that restores the cart"""
    return f"{settings.STOREFRONT_URL.rstrip('/')}/checkout?cart_id={cart_id}"


def abandoned_carts(carts: Iterable[Cart], now: Optional[datetime] = None,
                    hours: int = 24, limit: int = 50) -> List[Dict[str, Any]]:
    """
    Carts touched in the last `hours` that were never completed and can be
    followed up (have an email and at least one item), most recent first
    """
    cutoff = ensure_aware(now or utc_now()) - timedelta(hours=hours)
    candidates = []
    for cart in carts:
        touched = cart.updated_at or cart.created_at
        if cart.completed_at or not cart.email or not cart.items or touched is None:
            continue
        touched = ensure_aware(touched)
        if touched <= cutoff:
            continue
        candidates.append((touched, cart))

    candidates.sort(key=lambda pair: pair[0], reverse=True)
    rows = []
    for touched, cart in candidates[:limit]:
        rows.append({
            'id': cart.id,
            'email': cart.email,
            'updated_at': touched,
            'items_count': sum(i.quantity for i in cart.items),
            'total': to_amount(cart.total),
            'region': cart.region.name if cart.region else None,
            'recovery_url': recovery_url(cart.id),
            'currency_code': cart.region.currency_code if cart.region else settings.CURRENCY_CODE,
            'items': [
                {'title': i.title, 'quantity': i.quantity, 'unit_price': to_amount(i.unit_price)}
                for i in cart.items
            ],
        })
    return rows
