#app/services/location.py
import ipaddress
import logging
from typing import Mapping, Optional

import requests

from app.core.config import settings
from app.schemas.report import Location

logger = logging.getLogger(__name__)

DEV_LOCATION = Location(city="Local Development", lat=1.4927, lon=103.7414)
DEFAULT_IP = "127.0.0.1"

PRIVATE_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

def client_ip(headers: Mapping[str, str]) -> str:
    """Submitter address from proxy headers. Trusted as-is; not checked against the peer."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return DEFAULT_IP

def is_private_ip(ip: str) -> bool:
    if ip == "localhost":
        return True
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return any(addr.version == net.version and addr in net for net in PRIVATE_NETWORKS)


class LocationResolver:
    """Best-effort IP geolocation: private short-circuit, primary provider, fallback provider."""

    def __init__(self, http=requests, primary_url: Optional[str] = None,
                 fallback_url: Optional[str] = None, timeout: Optional[float] = None):
        self.http = http
        self.primary_url = primary_url or settings.geo_primary_url
        self.fallback_url = fallback_url or settings.geo_fallback_url
        self.timeout = timeout if timeout is not None else settings.geo_timeout_seconds

    def resolve(self, ip: str) -> Optional[Location]:
        if is_private_ip(ip):
            return DEV_LOCATION
        location = self._from_primary(ip)
        if location is None:
            logger.info("Primary location service failed, trying backup...")
            location = self._from_fallback(ip)
        return location

    def _fetch(self, url: str) -> dict:
        r = self.http.get(url, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        if not isinstance(data, dict):
            raise ValueError(f"unexpected location payload: {type(data).__name__}")
        return data

    def _from_primary(self, ip: str) -> Optional[Location]:
        # ipapi.co shape: {"city", "latitude", "longitude"} or {"error": true, "reason"}
        try:
            data = self._fetch(self.primary_url.format(ip=ip))
            if data.get("error"):
                logger.warning(f"IP location error for {ip}: {data.get('reason')}")
                return None
            return Location(
                city=data.get("city") or "Unknown",
                lat=_to_float(data.get("latitude")),
                lon=_to_float(data.get("longitude")),
            )
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to get location from IP: {e}")
            return None

    def _from_fallback(self, ip: str) -> Optional[Location]:
        # ip-api.com shape: {"status": "success"|"fail", "message", "city", "lat", "lon"}
        try:
            data = self._fetch(self.fallback_url.format(ip=ip))
            if data.get("status") == "fail":
                logger.warning(f"IP location error for {ip}: {data.get('message')}")
                return None
            return Location(
                city=data.get("city") or "Unknown",
                lat=_to_float(data.get("lat")),
                lon=_to_float(data.get("lon")),
            )
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to get location from backup IP service: {e}")
            return None

def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
