"""
Tests for the SISPAA client
"""

import pytest
import requests

from app.repositories.base import now_iso
from app.schemas.report import Location, Report
from app.services.sispaa import NOT_CONFIGURED, SispaaClient, build_payload, incident_type
from conftest import FakeHttp, FakeResponse


def make_report(**overrides):
    now = now_iso()
    data = {
        "report_id": "0192f3a0-0000-7000-8000-000000000001",
        "timestamp": now,
        "ip_address": "203.0.113.5",
        "location": Location(city="Johor Bahru", lat=1.46, lon=103.76),
        "device_id": "server_abc",
        "pollution_type": "air",
        "sector": 2,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return Report(**data)


def client(http, api_key="k"):
    return SispaaClient(base_url="https://sispaa.test/", api_key=api_key, timeout=1, http=http)


class TestPayload:
    def test_incident_type_mapping(self):
        assert incident_type("air") == "air_pollution"
        assert incident_type("bad_smell__odor") == "odor_pollution"
        assert incident_type("something_new") == "environmental_other"

    def test_payload_shape(self):
        payload = build_payload(make_report())
        assert payload["incident_type"] == "air_pollution"
        assert payload["location"]["coordinates"] == {"latitude": 1.46, "longitude": 103.76}
        assert payload["location"]["area_code"] == "2"
        assert payload["reporter"]["type"] == "anonymous"
        assert payload["incident_details"]["description"] == "air pollution reported in sector 2"

    def test_payload_without_location(self):
        payload = build_payload(make_report(location=None, user_id="u1"))
        assert payload["location"]["coordinates"] is None
        assert payload["location"]["description"] == "Unknown Location"
        assert payload["reporter"]["type"] == "registered"


class TestSubmit:
    def test_not_configured_makes_no_call(self):
        http = FakeHttp()
        result = client(http, api_key="").submit_report(make_report())
        assert result.success is False
        assert result.error == NOT_CONFIGURED
        assert http.calls == []

    def test_success(self):
        http = FakeHttp([FakeResponse(payload={"reference_id": "SP-1"})])
        result = client(http).submit_report(make_report())
        assert result.success is True
        assert result.reference_id == "SP-1"
        method, url, payload, headers = http.calls[0]
        assert (method, url) == ("POST", "https://sispaa.test/reports")
        assert headers["Authorization"] == "Bearer k"
        assert payload["source_system"]["report_id"] == make_report().report_id

    def test_http_error(self):
        http = FakeHttp([FakeResponse(status_code=502, text="bad gateway")])
        result = client(http).submit_report(make_report())
        assert result.success is False
        assert result.error == "SISPAA API error: 502"

    def test_timeout(self):
        result = client(FakeHttp(exc=requests.Timeout())).submit_report(make_report())
        assert result.error == "SISPAA request timed out"

    def test_network_error(self):
        result = client(FakeHttp(exc=requests.ConnectionError())).submit_report(make_report())
        assert result.error == "Network error communicating with SISPAA"


class TestStatusAndHealth:
    def test_status(self):
        http = FakeHttp([FakeResponse(payload={"status": "received"})])
        assert client(http).get_submission_status("SP-1")["status"] == "received"
        assert http.calls[0][1] == "https://sispaa.test/reports/SP-1/status"

    def test_health_not_configured(self):
        assert client(FakeHttp(), api_key="").test_connection()["success"] is False

    def test_health_ok(self):
        result = client(FakeHttp([FakeResponse()])).test_connection()
        assert result["success"] is True
        assert "latency" in result

    @pytest.mark.parametrize("body", [None, ["x"], "ok"])
    def test_success_with_non_object_body(self, body):
        result = client(FakeHttp([FakeResponse(payload=body)])).submit_report(make_report())
        assert result.success is True
        assert result.reference_id is None

    def test_status_with_non_object_body(self):
        status = client(FakeHttp([FakeResponse(payload=None)])).get_submission_status("SP-1")
        assert status["status"] == "unknown"
