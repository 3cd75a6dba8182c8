#app/services/sispaa.py
"""Client for SISPAA, the government complaint system reports are forwarded to.

Only the result contract matters to the rest of the app: ``submit_report``
never raises for transport problems, it returns ``SispaaResult(success=False)``.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

import requests

from app.core.config import settings
from app.core.legacy import LEGACY_MAPPING_VERSION, LEGACY_TYPE_NAMES, slugify
from app.schemas.report import Report

logger = logging.getLogger(__name__)

USER_AGENT = "Lapor-Pollution-Reporter/1.0"
SOURCE_SYSTEM = "Neighbourhood Pollution Reporting System"
NOT_CONFIGURED = "SISPAA integration not configured"

INCIDENT_TYPES = {
    "smell": "odor_pollution",
    "smoke": "air_pollution_smoke",
    "noise": "noise_pollution",
    "water": "water_pollution",
    "air": "air_pollution",
    "waste": "waste_management",
    "chemical": "chemical_pollution",
    "other": "environmental_other",
}

@dataclass
class SispaaResult:
    success: bool
    reference_id: Optional[str] = None
    error: Optional[str] = None


def incident_type(pollution_type: str) -> str:
    """Accepts legacy short codes ("air") and slugs of the default type names ("air_pollution")."""
    if pollution_type in INCIDENT_TYPES:
        return INCIDENT_TYPES[pollution_type]
    for code, name in LEGACY_TYPE_NAMES[LEGACY_MAPPING_VERSION].items():
        if slugify(name) == pollution_type:
            return INCIDENT_TYPES[code]
    return "environmental_other"


def build_payload(report: Report) -> dict:
    loc = report.location
    return {
        "report_type": "pollution",
        "incident_type": incident_type(report.pollution_type),
        "location": {
            "coordinates": {"latitude": loc.lat, "longitude": loc.lon} if loc else None,
            "area_code": str(report.sector),
            "description": loc.city if loc else "Unknown Location",
        },
        "reporter": {
            "type": "registered" if report.user_id else "anonymous",
            "ip_address": report.ip_address,
            "device_fingerprint": report.device_id,
        },
        "incident_details": {
            "timestamp": report.timestamp,
            "description": report.description
            or f"{report.pollution_type} pollution reported in sector {report.sector}",
            "severity": "normal",
        },
        "source_system": {"name": SOURCE_SYSTEM, "report_id": report.report_id},
    }


class SispaaClient:
    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None, http=requests):
        self.base_url = (base_url or settings.sispaa_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.sispaa_api_key
        self.timeout = timeout if timeout is not None else settings.sispaa_timeout_seconds
        self.http = http

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _request(self, method: str, endpoint: str, payload: Optional[dict] = None):
        return self.http.request(
            method,
            f"{self.base_url}{endpoint}",
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
                "User-Agent": USER_AGENT,
            },
            timeout=self.timeout,
        )

    def submit_report(self, report: Report) -> SispaaResult:
        if not self.enabled:
            logger.info("SISPAA integration not configured - skipping submission")
            return SispaaResult(success=False, error=NOT_CONFIGURED)
        try:
            r = self._request("POST", "/reports", build_payload(report))
        except requests.Timeout:
            logger.error(f"SISPAA submission timed out after {self.timeout}s for report {report.report_id}")
            return SispaaResult(success=False, error="SISPAA request timed out")
        except requests.RequestException as e:
            logger.error(f"SISPAA submission error: {e}")
            return SispaaResult(success=False, error="Network error communicating with SISPAA")
        if not r.ok:
            logger.error(f"SISPAA submission failed: {r.status_code} {r.text[:500]}")
            return SispaaResult(success=False, error=f"SISPAA API error: {r.status_code}")
        try:
            body = r.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        ref = body.get("reference_id") or body.get("id")
        return SispaaResult(success=True, reference_id=str(ref) if ref is not None else None)

    def get_submission_status(self, reference_id: str) -> dict:
        if not self.enabled:
            return {"status": "unknown", "details": NOT_CONFIGURED}
        try:
            r = self._request("GET", f"/reports/{reference_id}/status")
            if r.ok:
                body = r.json()
                if not isinstance(body, dict):
                    return {"status": "unknown", "details": "Unexpected response from SISPAA"}
                return {"status": body.get("status") or "unknown", "details": body.get("details")}
            return {"status": "unknown", "details": "Failed to get status from SISPAA"}
        except (requests.RequestException, ValueError) as e:
            logger.error(f"SISPAA status check error: {e}")
            return {"status": "unknown", "details": "Error checking SISPAA status"}

    def test_connection(self) -> dict:
        if not self.enabled:
            return {"success": False, "message": "SISPAA API key not configured"}
        started = time.monotonic()
        try:
            r = self._request("GET", "/health")
        except requests.RequestException as e:
            latency = int((time.monotonic() - started) * 1000)
            return {"success": False, "message": f"SISPAA connection error: {e}", "latency": latency}
        latency = int((time.monotonic() - started) * 1000)
        if r.ok:
            return {"success": True, "message": "SISPAA connection successful", "latency": latency}
        return {"success": False, "message": f"SISPAA connection failed: HTTP {r.status_code}", "latency": latency}
