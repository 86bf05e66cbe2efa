from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional

import requests

from waymaps.config import GEO_LOOKUP_URL, GEO_TIMEOUT_S, GEO_USER_AGENT, IP_LOOKUP_URL
from waymaps.errors import InitializationError
from waymaps.geometry import LatLon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    ip: str
    latitude: float
    longitude: float
    city: Optional[str] = None
    country: Optional[str] = None

    def to_latlon(self) -> LatLon:
        return LatLon(self.latitude, self.longitude)


@dataclass
class Locator:
    """Approximate the user's position from the public IP address."""

    ip_url: str = IP_LOOKUP_URL
    geo_url: str = GEO_LOOKUP_URL
    timeout_s: float = GEO_TIMEOUT_S
    user_agent: str = GEO_USER_AGENT

    def __post_init__(self) -> None:
        self.s = requests.Session()
        self.s.headers.update({"User-Agent": self.user_agent, "Accept": "application/json"})

    def _get_json(self, url: str) -> Dict[str, Any]:
        try:
            r = self.s.get(url, timeout=self.timeout_s)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise InitializationError(f"Lookup failed: {url}") from exc
        if not isinstance(data, dict):
            raise InitializationError(f"Unexpected reply from {url}: {type(data).__name__}")
        return data

    def get_ip(self) -> str:
        data = self._get_json(self.ip_url)
        ip = data.get("ip")
        if not ip:
            raise InitializationError("IP lookup returned no address.")
        return str(ip)

    def get_ip_location(self, ip: str) -> Location:
        data = self._get_json(self.geo_url.format(ip=ip))
        if data.get("status", "success") != "success":
            raise InitializationError(f"Location lookup failed for {ip}: {data.get('message', 'unknown')}")
        try:
            lat = float(data["lat"])
            lon = float(data["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InitializationError(f"Location lookup returned no coordinates for {ip}.") from exc
        return Location(ip=ip, latitude=lat, longitude=lon, city=data.get("city"), country=data.get("country"))

    def resolve_local_position(self) -> LatLon:
        location = self.get_ip_location(self.get_ip())
        logger.info("Located %s near %s, %s", location.ip, location.city or "?", location.country or "?")
        return location.to_latlon()
