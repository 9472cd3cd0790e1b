"""
Named date windows used by the financial breakdown and the sales reports

All boundaries are computed in the store's local timezone and returned as
timezone-aware datetimes.

Author: Store Insights
Date: 2026-01-17
"""
from datetime import datetime, time, timedelta
from typing import NamedTuple, Optional

from store_insights.services.formatting import to_local, utc_now

FINANCIAL_RANGES = ('today', 'yesterday', 'last7days', 'last30days', 'thismonth', 'lastmonth', 'thisyear')
DEFAULT_FINANCIAL_RANGE = 'last30days'

REPORT_PERIODS = {'7d': 7, '30d': 30, '90d': 90, '1y': 365}
DEFAULT_REPORT_PERIOD = '7d'


class DateWindow(NamedTuple):
    start: datetime
    end: datetime

    def contains(self, value: Optional[datetime]) -> bool:
        if value is None:
            return False
        local = to_local(value)
        return self.start <= local <= self.end


def _start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def _end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max, tzinfo=value.tzinfo)


def financial_window(range_name: Optional[str], now: Optional[datetime] = None) -> DateWindow:
    """
    Resolve a named range ('today', 'last7days', 'lastmonth', ...)

    Unknown names fall back to the last 30 days. Open-ended ranges end now.
    """
    now = to_local(now or utc_now())
    today = _start_of_day(now)

    if range_name == 'today':
        return DateWindow(today, _end_of_day(now))
    if range_name == 'yesterday':
        yesterday = today - timedelta(days=1)
        return DateWindow(yesterday, _end_of_day(yesterday))
    if range_name == 'last7days':
        return DateWindow(today - timedelta(days=7), now)
    if range_name == 'thismonth':
        return DateWindow(today.replace(day=1), now)
    if range_name == 'lastmonth':
        first_this_month = today.replace(day=1)
        last_month_end = first_this_month - timedelta(days=1)
        return DateWindow(last_month_end.replace(day=1), _end_of_day(last_month_end))
    if range_name == 'thisyear':
        return DateWindow(today.replace(month=1, day=1), now)
    return DateWindow(today - timedelta(days=30), now)


def report_window(period: Optional[str], now: Optional[datetime] = None) -> DateWindow:
    """Window for a report period ('7d', '30d', '90d', '1y'; default '7d')"""
    now = to_local(now or utc_now())
    today = _start_of_day(now)

    if period == '1y':
        try:
            start = today.replace(year=today.year - 1)
        except ValueError:
            # Feb 29
            start = today.replace(year=today.year - 1, day=28)
    else:
        start = today - timedelta(days=REPORT_PERIODS.get(period, REPORT_PERIODS[DEFAULT_REPORT_PERIOD]))

    return DateWindow(start, _end_of_day(now))


def previous_window(window: DateWindow) -> DateWindow:
    """
    Equally long window immediately before `window`

    The day count is the whole number of days spanned by the window; the
    previous window starts that many days plus one before the current start
    and ends just before it.
    """
    days = (window.end - window.start).days
    return DateWindow(
        window.start - timedelta(days=days + 1),
        window.start - timedelta(microseconds=1),
    )


def normalize_period(period: Optional[str]) -> str:
    return period if period in REPORT_PERIODS else DEFAULT_REPORT_PERIOD
