"""
Display formatting helpers shared by dashboards, reports and exports

Author: Store Insights
Date: 2026-01-17
"""
import math
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
from zoneinfo import ZoneInfo

from store_insights.core.config import settings

Number = Union[int, float, Decimal]

CHART_COLORS = [
    '#667eea', '#764ba2', '#f093fb', '#4facfe',
    '#43e97b', '#fa709a', '#fee140', '#30cfd0',
    '#a8edea', '#fed6e3', '#c471f5', '#12c2e9',
]

TIME_AGO_INTERVALS = [
    ('year', 31536000),
    ('month', 2592000),
    ('week', 604800),
    ('day', 86400),
    ('hour', 3600),
    ('minute', 60),
    ('second', 1),
]


def round_half_up(value: Number, digits: int = 0) -> float:
    """Round halves away from zero (Python's round() rounds halves to even)"""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_currency(amount: Optional[Number], currency: str = "PKR") -> str:
    """
    Format an amount as whole currency units with thousands separators

    Examples:
        >>> format_currency(0)
        'PKR 0'
        >>> format_currency(1234.5)
        'PKR 1,235'
    """
    if amount is None or (isinstance(amount, float) and math.isnan(amount)):
        amount = 0
    whole = int(Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return f"{currency} {whole:,}"


def chart_color(index: int) -> str:
    return CHART_COLORS[index % len(CHART_COLORS)]


def store_timezone() -> ZoneInfo:
    return ZoneInfo(settings.STORE_TIMEZONE)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps from the backend as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_local(value: datetime) -> datetime:
    return ensure_aware(value).astimezone(store_timezone())


def local_time_label(now: Optional[datetime] = None) -> str:
    """Store-local wall clock, e.g. '19 Oct 2026, 3:05 PM'"""
    local = to_local(now or utc_now())
    hour = local.hour % 12 or 12
    return f"{local.day} {local.strftime('%b %Y')}, {hour}:{local.minute:02d} {local.strftime('%p')}"


def time_ago(value: datetime, now: Optional[datetime] = None) -> str:
    """Relative time string ('3 hours ago', 'just now')"""
    now = ensure_aware(now or utc_now())
    seconds = int((now - ensure_aware(value)).total_seconds())
    for unit, unit_seconds in TIME_AGO_INTERVALS:
        count = seconds // unit_seconds
        if count >= 1:
            return f"{count} {unit}{'s' if count > 1 else ''} ago"
    return "just now"
