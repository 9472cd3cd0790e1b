"""
Report Export Service
Sales report with period-over-period growth, and CSV / text exports

Author: Store Insights
Date: 2026-01-20
"""
import asyncio
import csv
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.domain.order import Order
from store_insights.services import order_stats
from store_insights.services.date_ranges import (
    DateWindow,
    normalize_period,
    previous_window,
    report_window,
)
from store_insights.services.formatting import format_currency, to_local

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['Order ID', 'Date', 'Customer Email', 'Total', 'Status']
EXPORT_TYPES = ('sales',)
EXPORT_FORMATS = ('csv', 'pdf')


class ExportError(ValueError):
    """Unsupported report type or format"""


def build_sales_report(current: Sequence[Order], previous: Sequence[Order], period: str,
                       window: Optional[DateWindow] = None) -> Dict[str, Any]:
    revenue = order_stats.total_revenue(current)
    previous_revenue = order_stats.total_revenue(previous)
    report = {
        'period': period,
        'revenue': revenue,
        'orders': len(current),
        'average_order_value': order_stats.average_order_value(current),
        'growth': order_stats.growth_rate(revenue, previous_revenue),
        'previous_revenue': previous_revenue,
        'previous_orders': len(previous),
        'is_empty': not current,
    }
    if window:
        report['start_date'] = window.start
        report['end_date'] = window.end
    return report


def orders_to_frame(orders: Sequence[Order]) -> pd.DataFrame:
    rows = [
        {
            'Order ID': order.display_id if order.display_id is not None else order.id,
            'Date': to_local(order.created_at).date().isoformat() if order.created_at else '',
            'Customer Email': order.email or 'Guest',
            'Total': order_stats.order_amount(order),
            'Status': order.status or 'unknown',
        }
        for order in orders
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def render_csv(orders: Sequence[Order]) -> str:
    """All cells quoted, one order per line"""
    return orders_to_frame(orders).to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')


def render_text_report(orders: Sequence[Order], period: str) -> str:
    lines = [
        f"Sales Report - {period}",
        "",
        f"Total Orders: {len(orders)}",
        f"Total Revenue: {format_currency(order_stats.total_revenue(orders))}",
        "",
    ]
    for order in orders:
        lines.append(
            f"{order.order_number} - {order.email or 'Guest'} - {format_currency(order_stats.order_amount(order))}"
        )
    return "\n".join(lines) + "\n"


class ReportExportService:
    """Sales reports over completed orders"""

    def __init__(self, connector: MedusaConnector):
        self.connector = connector

    async def _completed_orders(self, window: DateWindow) -> List[Order]:
        return await self.connector.list_orders(
            created_after=window.start,
            created_before=window.end,
            status=['completed'],
        )

    async def sales_report(self, period: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Revenue, order count, AOV and growth vs the previous equal-length window

        Args:
            period: '7d', '30d', '90d' or '1y' (anything else means '7d')
        """
        period = normalize_period(period)
        window = report_window(period, now)
        earlier = previous_window(window)

        # One bounded fetch per window
        current, previous = await asyncio.gather(
            self._completed_orders(window),
            self._completed_orders(earlier),
        )

        logger.info(f"Sales report {period}: {len(current)} orders (previous window: {len(previous)})")
        return build_sales_report(current, previous, period, window)

    async def export(self, report_type: str = 'sales', period: Optional[str] = None,
                     export_format: str = 'csv', now: Optional[datetime] = None) -> Tuple[str, str, str]:
        """
        Render an export

        Returns:
            (content, media_type, filename)

        Raises:
            ExportError for unsupported types or formats
        """
        if report_type not in EXPORT_TYPES:
            raise ExportError(f"Unsupported report type: {report_type}")
        if export_format not in EXPORT_FORMATS:
            raise ExportError(f"Unsupported export format: {export_format}")

        period = normalize_period(period)
        orders = await self._completed_orders(report_window(period, now))
        filename = f"{report_type}-report-{period}.{export_format}"

        if export_format == 'csv':
            return render_csv(orders), 'text/csv', filename
        return render_text_report(orders, period), 'text/plain; charset=utf-8', filename
