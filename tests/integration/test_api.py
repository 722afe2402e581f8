"""
Integration tests for the HTTP API.

Routes run through the real FastAPI app; only the database dependency is
replaced by the in-memory fake.
"""
import sys

import pytest
from fastapi.testclient import TestClient

from core.config import AppConfig, MongoConfig
from core.database import MISSING_CONFIG_MESSAGE
from core.repositories.base import (
    EXECUTION_ALERTS,
    RETAIL_EXECUTION_PRIORITY,
    EVENT_PROMOTION_PERFORMANCE,
    ORDER_FULFILLMENT_SUMMARY,
    PO_FULFILLMENT_SUMMARY,
)
from fakes import FakeCollection

METRIC_PATHS = [
    "/api/kpis",
    "/api/feature-execution-by-category",
    "/api/day-one-ready",
    "/api/incremental-impact",
    "/api/hierarchy-performance",
    "/api/osa/kpis",
    "/api/osa/by-category",
    "/api/osa/regional",
    "/api/supply/kpis",
    "/api/supply/delivery-by-category",
    "/api/supply/trends",
    "/api/supply/suppliers",
    "/api/wallet/kpis",
    "/api/wallet/by-category",
    "/api/wallet/regions",
    "/api/summary/monthly",
    "/api/summary/regions",
    "/api/summary/categories",
    "/api/summary/top-issues",
]

LIST_PATHS = [path for path in METRIC_PATHS if not path.endswith("kpis")]


class TestHealth:

    def test_health_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_health_without_database(self, app, monkeypatch):
        """Health never touches MongoDB, even when it is not configured."""
        monkeypatch.setattr("core.database.config", AppConfig(mongo=MongoConfig(uri="", database="")))
        response = TestClient(app).get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_lifespan_starts_and_closes_client(self, app, monkeypatch):
        """Startup only warns on missing settings; shutdown closes the client."""
        closed = []

        async def fake_close():
            closed.append(True)

        monkeypatch.setattr(sys.modules["core.config"], "config", AppConfig(mongo=MongoConfig(uri="", database="")))
        monkeypatch.setattr("web.main.close_client", fake_close)

        with TestClient(app) as lifespan_client:
            assert lifespan_client.get("/api/health").status_code == 200

        assert closed == [True]

    def test_metrics_endpoint(self, client):
        client.get("/api/wallet/competitors")
        data = client.get("/api/metrics").json()

        assert data["uptime_seconds"] >= 0
        assert data["requests"]["GET /api/wallet/competitors"] == 1


class TestEmptyDatabase:

    @pytest.mark.parametrize("path", LIST_PATHS)
    def test_lists_are_empty(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json() == []

    def test_competitors_always_empty(self, client):
        response = client.get("/api/wallet/competitors", params={"region": "WM Region"})
        assert response.status_code == 200
        assert response.json() == []

    def test_kpis_fall_back_to_placeholders(self, client):
        data = client.get("/api/kpis").json()
        assert data["featureExecution"] == 82.5
        assert data["featureExpectedLocation"] == 78.3
        assert data["dayOneReady"] == 89.7
        assert data["performanceScore"] == 8.2
        assert data["storeCount"] == 0

    def test_supply_kpis_shape(self, client):
        assert client.get("/api/supply/kpis").json() == {
            "onTimeDelivery": 92.5,
            "inventoryAccuracy": 95.5,
            "orderFulfillment": 94.8,
            "supplierPerformance": 89.2,
        }

    def test_wallet_kpis_shape(self, client):
        data = client.get("/api/wallet/kpis").json()
        assert data == {
            "totalWalletShare": 23.5,
            "walletGrowth": 12.5,
            "customerPenetration": 67.8,
            "avgWalletSize": 0.0,
        }


class TestRateLimits:

    @pytest.fixture
    def limited_client(self, client):
        from web.routes.api._deps import limiter

        limiter.enabled = True
        limiter.reset()
        yield client
        limiter.reset()

    def test_competitors_never_limited(self, limited_client):
        statuses = {limited_client.get("/api/wallet/competitors").status_code for _ in range(40)}
        assert statuses == {200}

    def test_health_never_limited(self, limited_client):
        statuses = {limited_client.get("/api/health").status_code for _ in range(40)}
        assert statuses == {200}

    def test_metric_routes_answer_while_enabled(self, limited_client):
        for _ in range(35):
            response = limited_client.get("/api/summary/regions")
        assert response.status_code == 200


class TestFilters:

    def test_osa_kpis_region_filter_and_pace_fallback(self, client, fake_db):
        fake_db.collections[RETAIL_EXECUTION_PRIORITY] = FakeCollection(
            rows=[{"_id": None, "overallOSA": 0, "outOfStockRate": 0, "totalRecords": 5, "avgPace": 80}],
            sample={"Rgn Nm": "WM Region", "Pace Pct": 80},
        )
        response = client.get("/api/osa/kpis", params={"region": "WM Region"})

        assert response.status_code == 200
        data = response.json()
        assert data["overallOSA"] == 88.0
        assert data["replenishmentSpeed"] == 24
        assert fake_db[RETAIL_EXECUTION_PRIORITY].last_match == {"Rgn Nm": "WM Region"}

    def test_all_values_are_not_filtered(self, client, fake_db):
        client.get("/api/summary/top-issues", params={
            "region": "All", "area": "All", "store": "All",
            "category": "All", "event": "All", "month": "All",
        })
        assert fake_db[EXECUTION_ALERTS].last_match == {}

    def test_supply_region_uses_sales_management_field(self, client, fake_db):
        client.get("/api/supply/trends", params={"region": "WM Region", "month": "March"})
        assert fake_db[ORDER_FULFILLMENT_SUMMARY].last_match == {
            "Sales Mgmt B Nm": "WM Region",
            "Month Nm": "March",
        }

    def test_retail_filters_on_promotion_collection(self, client, fake_db):
        client.get("/api/incremental-impact", params={"event": "Spring Reset", "store": "Store 7"})
        assert fake_db[EVENT_PROMOTION_PERFORMANCE].last_match == {
            "Event Nm": "Spring Reset",
            "Store Name": "Store 7",
        }

    def test_unknown_parameters_ignored(self, client, fake_db):
        response = client.get("/api/supply/suppliers", params={"brand": "Acme"})
        assert response.status_code == 200
        assert fake_db[PO_FULFILLMENT_SUMMARY].last_match == {}


class TestOrdering:

    def test_summary_categories_sorted_and_limited(self, client, fake_db):
        fake_db.collections[ORDER_FULFILLMENT_SUMMARY] = FakeCollection(rows=[
            {"_id": f"Cat {i}", "value": 50 + i, "totalOrders": 1, "totalQuantity": 1, "shippedQuantity": 1}
            for i in range(15)
        ])
        data = client.get("/api/summary/categories").json()

        assert len(data) == 10
        assert [row["value"] for row in data] == [float(64 - i) for i in range(10)]
        assert data[0]["name"] == "Cat 14"
        assert data[0]["color"] == "#14B8A6"

    def test_trends_chronological(self, client, fake_db):
        fake_db.collections[ORDER_FULFILLMENT_SUMMARY] = FakeCollection(rows=[
            {"_id": "2024-03-02", "onTime": 80, "accuracy": 90, "issues": 1, "totalOrders": 5, "totalQuantity": 10},
            {"_id": "2024-02-24", "onTime": 85, "accuracy": 91, "issues": 0, "totalOrders": 6, "totalQuantity": 12},
        ])
        data = client.get("/api/supply/trends").json()
        assert [row["week"] for row in data] == ["2024-02-24", "2024-03-02"]

    def test_trends_with_mixed_week_types(self, client, fake_db):
        fake_db.collections[ORDER_FULFILLMENT_SUMMARY] = FakeCollection(rows=[
            {"_id": "2024-02-24", "onTime": 85, "accuracy": 91, "issues": 0, "totalOrders": 6, "totalQuantity": 12},
            {"_id": 202410, "onTime": 80, "accuracy": 90, "issues": 1, "totalOrders": 5, "totalQuantity": 10},
        ])
        response = client.get("/api/supply/trends")

        assert response.status_code == 200
        assert [row["week"] for row in response.json()] == [202410, "2024-02-24"]


class TestErrors:

    def test_query_failure_returns_500(self, client, fake_db):
        fake_db.collections[ORDER_FULFILLMENT_SUMMARY] = FakeCollection(
            error=RuntimeError("connection reset by peer")
        )
        response = client.get("/api/wallet/kpis")

        assert response.status_code == 500
        assert response.json() == {"error": "connection reset by peer"}

    def test_failure_is_counted(self, client, fake_db):
        fake_db.collections[EXECUTION_ALERTS] = FakeCollection(error=RuntimeError("boom"))
        client.get("/api/summary/top-issues")

        errors = client.get("/api/metrics").json()["errors"]
        assert errors["RuntimeError"] == 1
        assert errors["HTTP_500"] == 1

    def test_missing_configuration_returns_500(self, app, monkeypatch):
        monkeypatch.setattr("core.database.config", AppConfig(mongo=MongoConfig(uri="", database="")))
        response = TestClient(app, raise_server_exceptions=False).get("/api/osa/kpis")

        assert response.status_code == 500
        assert response.json() == {"error": MISSING_CONFIG_MESSAGE}

    def test_unknown_route_404(self, client):
        assert client.get("/api/does-not-exist").status_code == 404


class TestSchemaEndpoints:

    def test_schema(self, client, fake_db):
        fake_db.collections[PO_FULFILLMENT_SUMMARY] = FakeCollection(
            sample={"Customer": "Acme", "Po Order Qty": 10}, count=3
        )
        data = client.get("/api/schema").json()
        assert data == {
            PO_FULFILLMENT_SUMMARY: {
                "fields": ["Customer", "Po Order Qty"],
                "sample": {"Customer": "Acme", "Po Order Qty": 10},
                "count": 3,
            }
        }

    def test_debug_osa_fields(self, client, fake_db):
        fake_db.collections[RETAIL_EXECUTION_PRIORITY] = FakeCollection(
            sample={"Daily Instock POD *": 0, "Pace Pct": 75}
        )
        data = client.get("/api/debug/osa-fields").json()
        assert data["osaFields"] == ["Daily Instock POD *"]
        assert data["recommendations"]["primaryField"] == "Daily Instock POD *"
        assert data["aggregationResults"] is None
