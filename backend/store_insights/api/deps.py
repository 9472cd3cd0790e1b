"""
Shared route dependencies

Routes receive the backend connector through get_connector so tests can
swap it via app.dependency_overrides.
"""
from fastapi import Depends

from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.services.analytics_service import AnalyticsService
from store_insights.services.marketing_service import MarketingService
from store_insights.services.order_service import OrderService
from store_insights.services.report_export_service import ReportExportService
from store_insights.services.storefront_service import StorefrontService


def get_connector() -> MedusaConnector:
    return MedusaConnector()


def get_analytics_service(connector: MedusaConnector = Depends(get_connector)) -> AnalyticsService:
    return AnalyticsService(connector)


def get_marketing_service(connector: MedusaConnector = Depends(get_connector)) -> MarketingService:
    return MarketingService(connector)


def get_order_service(connector: MedusaConnector = Depends(get_connector)) -> OrderService:
    return OrderService(connector)


def get_report_service(connector: MedusaConnector = Depends(get_connector)) -> ReportExportService:
    return ReportExportService(connector)


def get_storefront_service(connector: MedusaConnector = Depends(get_connector)) -> StorefrontService:
    return StorefrontService(connector)
