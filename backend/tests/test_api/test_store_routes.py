"""
API tests for the storefront routes (reviews and wishlist)

Author: Store Insights
Date: 2026-01-25
"""
import pytest
from fastapi.testclient import TestClient

from store_insights.api.deps import get_connector
from store_insights.core.config import settings
from store_insights.main import app


@pytest.fixture
def client(fake_connector, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", "")
    monkeypatch.setattr(settings, "STORE_PUBLISHABLE_KEY", "")
    app.dependency_overrides[get_connector] = lambda: fake_connector
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestReviews:

    def test_get_reviews(self, client):
        """Test review summary for a product with reviews"""
        response = client.get("/store/reviews/prod_1")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_reviews"] == 2
        assert data["average_rating"] == 3.0

    def test_unknown_product(self, client):
        """Unknown product is a 404"""
        assert client.get("/store/reviews/prod_missing").status_code == 404

    def test_submit_review(self, client):
        """Test a review from a buyer is stored as verified"""
        response = client.post("/store/reviews", json={
            "product_id": "prod_1",
            "rating": 5,
            "comment": "Excellent",
            "customer_id": "cus_1",
        })

        assert response.status_code == 201
        assert response.json()["data"]["verified_purchase"] is True
        assert client.get("/store/reviews/prod_1").json()["data"]["total_reviews"] == 3

    @pytest.mark.parametrize("body", [
        {"product_id": "prod_1", "rating": 6, "comment": "x"},
        {"product_id": "prod_1", "rating": 0, "comment": "x"},
        {"product_id": "prod_1", "rating": 3},
    ])
    def test_invalid_review(self, client, body):
        """Out of range ratings and missing comments are a 422"""
        assert client.post("/store/reviews", json=body).status_code == 422


class TestWishlist:

    def test_add_get_remove(self, client):
        """Test the wishlist add, list and remove cycle"""
        added = client.post("/store/wishlist", json={"customer_id": "cus_2", "product_id": "prod_1"})
        assert added.status_code == 201
        item_id = added.json()["data"]["id"]

        wishlist = client.get("/store/wishlist/cus_2").json()["data"]
        assert wishlist["total_items"] == 1

        removed = client.delete(f"/store/wishlist/cus_2/{item_id}")
        assert removed.status_code == 200
        assert client.get("/store/wishlist/cus_2").json()["data"]["total_items"] == 0

    def test_remove_unknown_item(self, client):
        """Removing an item that is not there is a 404"""
        assert client.delete("/store/wishlist/cus_2/wish_missing").status_code == 404

    def test_unknown_customer(self, client):
        """Unknown customer is a 404"""
        assert client.get("/store/wishlist/cus_missing").status_code == 404


class TestPublishableKey:

    def test_key_required_when_configured(self, client, monkeypatch):
        """Test the publishable key header once a key is configured"""
        monkeypatch.setattr(settings, "STORE_PUBLISHABLE_KEY", "pk_live")

        assert client.get("/store/reviews/prod_1").status_code == 400
        ok = client.get("/store/reviews/prod_1", headers={"x-publishable-api-key": "pk_live"})
        assert ok.status_code == 200
