"""
API tests for the admin routes

The commerce backend is replaced with the in-memory connector through
FastAPI dependency overrides.

Author: Store Insights
Date: 2026-01-25
"""
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from store_insights.api.deps import get_connector
from store_insights.connectors.medusa_connector import MedusaAPIError, MedusaConnector
from store_insights.core.config import settings
from store_insights.main import app
from store_insights.services.formatting import utc_now


@pytest.fixture
def client(fake_connector, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", "")
    monkeypatch.setattr(settings, "STORE_PUBLISHABLE_KEY", "")
    app.dependency_overrides[get_connector] = lambda: fake_connector
    yield TestClient(app)
    app.dependency_overrides.clear()


ANALYTICS_ROUTES = [
    "/admin/custom/analytics",
    "/admin/custom/overview",
    "/admin/custom/pakistan-metrics",
    "/admin/custom/financials?range=thismonth",
    "/admin/custom/top-performers",
    "/admin/custom/charts",
    "/admin/custom/alerts",
    "/admin/custom/customers/insights?segment=vip",
    "/admin/custom/customers/overview",
    "/admin/custom/abandoned-carts",
    "/admin/custom/reports/sales?period=30d",
]


class TestService:

    def test_root(self, client):
        """Test the root endpoint reports the service online"""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "online"

    def test_health(self, client):
        """Test health check reports a connected backend"""
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["backend"]["status"] == "connected"

    def test_health_backend_down(self, client, fake_connector):
        """Health is degraded, not an error, when the backend is unreachable"""
        fake_connector.fail_with = MedusaAPIError("down")
        data = client.get("/health").json()
        assert data["status"] == "degraded"


class TestAnalyticsRoutes:

    @pytest.mark.parametrize("path", ANALYTICS_ROUTES)
    def test_success_envelope(self, client, path):
        """Test every analytics route answers with the success envelope"""
        response = client.get(path)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert "is_empty" in body["data"]

    @pytest.mark.parametrize("path", ANALYTICS_ROUTES)
    def test_degraded_when_backend_fails(self, client, fake_connector, path):
        """Backend failures give a degraded envelope with an empty payload"""
        fake_connector.fail_with = MedusaAPIError("Connection refused", path="/admin/orders")
        response = client.get(path)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert "Connection refused" in body["message"]
        assert body["data"]["is_empty"] is True

    def test_pakistan_metrics_payload(self, client):
        """Test COD split, city ranking and timezone in the Pakistan metrics"""
        data = client.get("/admin/custom/pakistan-metrics").json()["data"]

        split = data["cod_vs_online"]
        assert split["cod_percentage"] + split["online_percentage"] == 100
        assert data["orders_by_city"][0]["city"] == "Karachi"
        assert data["timezone"] == "Asia/Karachi"

    def test_financials_range_echoed(self, client):
        """The requested range is echoed back"""
        data = client.get("/admin/custom/financials?range=yesterday").json()["data"]
        assert data["range"] == "yesterday"

    def test_unexpected_errors_are_500(self, client, fake_connector):
        """Errors that are not backend errors surface as 500"""
        fake_connector.fail_with = RuntimeError("boom")
        response = client.get("/admin/custom/overview")
        assert response.status_code == 500
        assert "boom" in response.json()["detail"]

    def test_malformed_order_does_not_break_dashboard(self, client):
        """An order with unreadable total and date is counted with defaults"""
        def handler(request):
            return httpx.Response(200, json={'orders': [
                {'id': 'order_1', 'status': 'completed', 'payment_status': 'captured', 'total': 5000,
                 'created_at': '2026-01-20T11:00:00Z', 'shipping_address': {'city': 'Karachi'}},
                {'id': 'order_2', 'total': 'N/A', 'created_at': 'not-a-date'},
            ]})

        connector = MedusaConnector(base_url="http://medusa.test", admin_token="sk_test",
                                    transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_connector] = lambda: connector

        response = client.get("/admin/custom/pakistan-metrics")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["total_orders"] == 2
        assert body["data"]["total_revenue"] == 5000


class TestAdminAuth:

    def test_admin_key_required_when_configured(self, client, monkeypatch):
        """Test X-Admin-Key is enforced once a key is configured"""
        monkeypatch.setattr(settings, "ADMIN_API_KEY", "secret")

        assert client.get("/admin/custom/overview").status_code == 401
        assert client.get("/admin/custom/overview", headers={"X-Admin-Key": "wrong"}).status_code == 401
        assert client.get("/admin/custom/overview", headers={"X-Admin-Key": "secret"}).status_code == 200

    def test_store_routes_do_not_need_admin_key(self, client, monkeypatch):
        """Storefront routes ignore the admin key"""
        monkeypatch.setattr(settings, "ADMIN_API_KEY", "secret")
        assert client.get("/store/reviews/prod_1").status_code == 200


class TestMarketingRoutes:

    def campaign_body(self, **overrides):
        now = utc_now()
        body = {
            "name": "Summer Sale",
            "type": "percentage",
            "discount": 15,
            "start_date": (now - timedelta(days=1)).isoformat(),
            "end_date": (now + timedelta(days=30)).isoformat(),
        }
        body.update(overrides)
        return body

    def test_create_and_list(self, client):
        """Test a created campaign is active and shows up in the listing"""
        response = client.post("/admin/custom/marketing/campaigns", json=self.campaign_body())

        assert response.status_code == 201
        campaign = response.json()["data"]
        assert campaign["status"] == "active"
        assert len(campaign["codes"]) == 1

        listed = client.get("/admin/custom/marketing/campaigns").json()
        assert listed["status"] == "success"
        assert listed["data"][0]["id"] == campaign["id"]

    def test_invalid_campaign(self, client):
        """A zero discount is rejected"""
        response = client.post("/admin/custom/marketing/campaigns", json=self.campaign_body(discount=0))
        assert response.status_code == 422

    def test_generate_coupon(self, client):
        """Test generated codes are 8 uppercase alphanumerics"""
        campaign = client.post("/admin/custom/marketing/campaigns", json=self.campaign_body()).json()["data"]
        response = client.post(f"/admin/custom/marketing/coupons/generate?campaign_id={campaign['id']}")

        assert response.status_code == 201
        code = response.json()["data"]["code"]
        assert len(code) == 8
        assert code.isalnum() and code.upper() == code

    def test_generate_coupon_unknown_campaign(self, client):
        """Unknown campaign is a 404"""
        response = client.post("/admin/custom/marketing/coupons/generate?campaign_id=camp_missing")
        assert response.status_code == 404

    def test_generate_coupon_requires_campaign_id(self, client):
        """campaign_id is a required query parameter"""
        assert client.post("/admin/custom/marketing/coupons/generate").status_code == 422

    def test_campaign_without_discount(self, client, fake_connector):
        """A campaign with no promotion to copy from is a 400"""
        fake_connector.campaigns["camp_empty"] = {"id": "camp_empty", "promotions": []}
        response = client.post("/admin/custom/marketing/coupons/generate?campaign_id=camp_empty")
        assert response.status_code == 400

    def test_backend_failure_on_write_is_502(self, client, fake_connector):
        """Test backend errors on writes map to 502"""
        fake_connector.fail_with = MedusaAPIError("Service unavailable", status_code=503)
        response = client.post("/admin/custom/marketing/campaigns", json=self.campaign_body())
        assert response.status_code == 502


class TestOrderRoutes:

    def test_notes(self, client):
        """Test adding a note and reading it back"""
        created = client.post("/admin/custom/orders/order_1/notes", json={"note": "Leave at the gate"})
        assert created.status_code == 201
        assert created.json()["data"]["created_by"] == "Admin User"

        listed = client.get("/admin/custom/orders/order_1/notes").json()
        assert listed["count"] == 1
        assert listed["data"][0]["note"] == "Leave at the gate"

    @pytest.mark.parametrize("note", ["", "   "])
    def test_empty_note_rejected(self, client, fake_connector, note):
        """Blank notes are a 422 and nothing is written to the order"""
        assert client.post("/admin/custom/orders/order_1/notes", json={"note": note}).status_code == 422
        assert "notes" not in fake_connector.orders["order_1"]["metadata"]

    def test_notes_unknown_order(self, client):
        """Unknown order is a 404"""
        assert client.get("/admin/custom/orders/order_missing/notes").status_code == 404

    def test_complete_order(self, client, fake_connector):
        """Test completion is recorded in the order metadata"""
        response = client.post("/admin/orders/order_2/complete")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["completed_by"] == "admin"
        assert fake_connector.orders["order_2"]["metadata"]["admin_completed"] is True


class TestReportRoutes:

    def test_sales_report_default_period(self, client):
        """Period defaults to 7d"""
        data = client.get("/admin/custom/reports/sales").json()["data"]
        assert data["period"] == "7d"

    def test_export_csv(self, client):
        """Test CSV export headers and column row"""
        response = client.post("/admin/custom/reports/export?type=sales&period=30d&format=csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == 'attachment; filename="sales-report-30d.csv"'
        assert response.text.splitlines()[0] == '"Order ID","Date","Customer Email","Total","Status"'

    def test_export_pdf(self, client):
        """PDF export falls back to the plain text report"""
        response = client.post("/admin/custom/reports/export?format=pdf")
        assert response.status_code == 200
        assert 'sales-report-7d.pdf' in response.headers["content-disposition"]
        assert response.text.startswith("Sales Report - 7d")

    def test_export_unsupported_format(self, client):
        """Unknown export format is a 400"""
        response = client.post("/admin/custom/reports/export?format=xlsx")
        assert response.status_code == 400
