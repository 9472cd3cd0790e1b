"""
Analytics API Endpoints
Admin dashboards computed from live backend orders, products and customers

Every endpoint answers 200: when the backend is unreachable the payload is
zeroed and status is "degraded" so the admin UI can still render.

Author: Store Insights
Date: 2026-01-23
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from store_insights.api.deps import get_analytics_service
from store_insights.api.responses import with_fallback
from store_insights.core.auth import verify_admin_key
from store_insights.services.analytics_service import (
    AnalyticsService,
    build_abandoned_carts,
    build_alerts,
    build_charts,
    build_customer_ltv,
    build_customer_overview,
    build_dashboard,
    build_financials,
    build_overview,
    build_pakistan_metrics,
    build_top_performers,
)
from store_insights.services.date_ranges import DEFAULT_FINANCIAL_RANGE

router = APIRouter(prefix="/admin/custom", tags=["Analytics"], dependencies=[Depends(verify_admin_key)])


@router.get("/analytics")
async def get_dashboard(service: AnalyticsService = Depends(get_analytics_service)):
    """
    Main dashboard

    Returns:
    - Today's revenue and orders
    - Recent orders and customers (10 each)
    - Low stock variants
    - Top 5 products by quantity
    - 7-day revenue chart
    """
    return await with_fallback("dashboard", service.dashboard(), lambda: build_dashboard([], [], []))


@router.get("/overview")
async def get_overview(service: AnalyticsService = Depends(get_analytics_service)):
    """Store overview cards"""
    return await with_fallback("overview", service.overview(), lambda: build_overview([]))


@router.get("/pakistan-metrics")
async def get_pakistan_metrics(service: AnalyticsService = Depends(get_analytics_service)):
    """COD vs online payments, orders by city and Ramadan/Eid trends"""
    return await with_fallback(
        "Pakistan metrics", service.pakistan_metrics(), lambda: build_pakistan_metrics([])
    )


@router.get("/financials")
async def get_financials(
    range_name: Optional[str] = Query(
        DEFAULT_FINANCIAL_RANGE,
        alias="range",
        description="today, yesterday, last7days, last30days, thismonth, lastmonth, thisyear",
    ),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Revenue, discounts, shipping, taxes and payment methods for a date range"""
    return await with_fallback(
        "financials", service.financials(range_name), lambda: build_financials([], range_name)
    )


@router.get("/top-performers")
async def get_top_performers(service: AnalyticsService = Depends(get_analytics_service)):
    return await with_fallback(
        "top performers", service.top_performers(), lambda: build_top_performers([])
    )


@router.get("/charts")
async def get_charts(service: AnalyticsService = Depends(get_analytics_service)):
    """Line, pie, comparison and heatmap chart data"""
    return await with_fallback("charts", service.charts(), lambda: build_charts([]))


@router.get("/alerts")
async def get_alerts(service: AnalyticsService = Depends(get_analytics_service)):
    """Stock alerts, pending orders, failed payments and negative reviews"""
    return await with_fallback("alerts", service.alerts(), lambda: build_alerts([], []))


# ============================================================================
# Customers
# ============================================================================

@router.get("/customers/insights")
async def get_customer_insights(
    segment: Optional[str] = Query("all", description="all, vip, high, medium or low"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Lifetime value per customer, optionally filtered by segment"""
    return await with_fallback(
        "customer insights",
        service.customer_lifetime_values(segment),
        lambda: build_customer_ltv([], [], segment),
    )


@router.get("/customers/overview")
async def get_customer_overview(service: AnalyticsService = Depends(get_analytics_service)):
    return await with_fallback(
        "customer overview", service.customer_overview(), lambda: build_customer_overview([], [])
    )


@router.get("/abandoned-carts")
async def get_abandoned_carts(service: AnalyticsService = Depends(get_analytics_service)):
    """Carts with an email, updated in the last 24 hours and never completed"""
    return await with_fallback(
        "abandoned carts", service.abandoned_carts(), lambda: build_abandoned_carts([])
    )
