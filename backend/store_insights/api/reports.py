"""
Reports API Endpoints
Sales report over completed orders and CSV / text exports

Author: Store Insights
Date: 2026-01-24
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from store_insights.api.deps import get_report_service
from store_insights.api.responses import http_error, with_fallback
from store_insights.core.auth import verify_admin_key
from store_insights.services.date_ranges import DEFAULT_REPORT_PERIOD, normalize_period, report_window
from store_insights.services.report_export_service import ReportExportService, build_sales_report

router = APIRouter(
    prefix="/admin/custom/reports",
    tags=["Reports"],
    dependencies=[Depends(verify_admin_key)],
)


@router.get("/sales")
async def get_sales_report(
    period: Optional[str] = Query(DEFAULT_REPORT_PERIOD, description="7d, 30d, 90d or 1y"),
    service: ReportExportService = Depends(get_report_service),
):
    """Revenue, orders, average order value and growth vs the previous period"""
    period = normalize_period(period)
    return await with_fallback(
        "sales report",
        service.sales_report(period),
        lambda: build_sales_report([], [], period, report_window(period)),
    )


@router.post("/export")
async def export_report(
    report_type: str = Query("sales", alias="type"),
    period: Optional[str] = Query(DEFAULT_REPORT_PERIOD),
    export_format: str = Query("csv", alias="format", description="csv or pdf"),
    service: ReportExportService = Depends(get_report_service),
):
    """Download a report as an attachment"""
    try:
        content, media_type, filename = await service.export(report_type, period, export_format)
    except Exception as e:
        raise http_error("exporting report", e)

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
