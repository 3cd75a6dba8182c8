"""
Tests for dashboard aggregation
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.repositories.reports import ReportRepository
from app.routers import public
from app.services.dashboard import build_dashboard


@pytest.fixture
def reports(seeded_kv):
    repo = ReportRepository(seeded_kv)
    repo.create({"ip_address": "127.0.0.1", "pollution_type": "air", "sector": 2,
                 "timestamp": "2024-03-05T08:15:00.000Z"})
    repo.create({"ip_address": "127.0.0.1", "pollution_type": "air_pollution", "sector": 2,
                 "timestamp": "2024-03-05T08:45:00.000Z"})
    repo.create({"ip_address": "127.0.0.1", "pollution_type": "smell", "sector": 1,
                 "timestamp": "2024-03-20T23:00:00.000Z", "status": "submitted"})
    repo.create({"ip_address": "127.0.0.1", "pollution_type": "retired_code", "sector": 9,
                 "timestamp": "2023-12-31T10:00:00.000Z"})
    return repo


class TestBuildDashboard:
    def test_summary(self, seeded_kv, reports):
        data = build_dashboard(seeded_kv, 2024, 3, 5, today=date(2024, 3, 20))
        assert data["summary"] == {"total": 4, "today": 1, "thisMonth": 3, "pending": 3}
        assert data["selectedDate"] == "2024-03-05"

    def test_monthly_covers_whole_year(self, seeded_kv, reports):
        data = build_dashboard(seeded_kv, 2024, 3, 5, today=date(2024, 3, 20))
        assert len(data["monthly"]) == 366
        assert data["monthly"]["2024-03-05"] == 2
        assert data["monthly"]["2024-03-20"] == 1
        assert "2023-12-31" not in data["monthly"]

    def test_hourly_for_selected_day(self, seeded_kv, reports):
        hourly = build_dashboard(seeded_kv, 2024, 3, 5, today=date(2024, 3, 20))["daily"]["hourly"]
        assert hourly["08"] == 2
        assert sum(hourly.values()) == 2

    def test_types_and_sectors_use_display_names(self, seeded_kv, reports):
        data = build_dashboard(seeded_kv, 2024, 3, 5, today=date(2024, 3, 20))
        assert data["types"]["Air Pollution"] == 2
        assert data["types"]["Bad Smell / Odor"] == 1
        # unknown codes count as Other
        assert data["types"]["Other"] == 1
        assert data["sectors"]["Sector 2"] == 2
        assert data["sectors"]["Sector 1"] == 2

    def test_invalid_date(self, seeded_kv):
        with pytest.raises(ValueError):
            build_dashboard(seeded_kv, 2023, 2, 30)

    @pytest.mark.parametrize(
        "today,month,expected",
        [(date(2024, 3, 31), 2, "2024-02-29"), (date(2023, 1, 31), 4, "2023-04-30"), (date(2024, 3, 15), 2, "2024-02-15")],
    )
    def test_default_day_clamped_to_month_length(self, seeded_kv, today, month, expected):
        data = build_dashboard(seeded_kv, today.year, month, today=today)
        assert data["selectedDate"] == expected


class TestDashboardRoute:
    def test_dashboard(self, client, reports):
        response = client.get("/api/dashboard?year=2024&month=3&day=5")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["summary"]["total"] == 4

    def test_invalid_date_is_400(self, client):
        response = client.get("/api/dashboard?year=2023&month=2&day=30")
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid date"}

    def test_out_of_range_month(self, client):
        assert client.get("/api/dashboard?month=13").status_code == 400

    def test_month_without_day(self, client):
        response = client.get("/api/dashboard?year=2024&month=2")
        assert response.status_code == 200
        assert response.json()["data"]["selectedDate"].startswith("2024-02-")

    def test_unexpected_error_uses_envelope(self, client, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(public, "build_dashboard", boom)
        response = TestClient(app, raise_server_exceptions=False).get("/api/dashboard")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}
