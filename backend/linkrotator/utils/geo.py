import ipaddress
import logging
from functools import lru_cache
from typing import NamedTuple, Optional

import httpx

logger = logging.getLogger(__name__)

GEO_LOOKUP_URL = "http://ip-api.com/json/{ip}"
GEO_LOOKUP_FIELDS = "status,country,countryCode,city"


class GeoData(NamedTuple):
    country_code: Optional[str] = None
    country_name: Optional[str] = None
    city: Optional[str] = None


def is_private_ip(ip: str) -> bool:
    """True for anything that is not a routable public address"""
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        # "unknown", "testclient" and other non-addresses
        return True
    return not address.is_global


@lru_cache(maxsize=10000)
def _lookup(ip: str, timeout: float) -> GeoData:
    """Query ip-api.com (free tier, 45 req/min); failures yield empty GeoData"""
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(GEO_LOOKUP_URL.format(ip=ip), params={"fields": GEO_LOOKUP_FIELDS})
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Geo lookup failed for {ip}: {e}")
        return GeoData()

    if data.get("status") != "success":
        logger.debug(f"Geo lookup returned no match for {ip}")
        return GeoData()

    return GeoData(data.get("countryCode"), data.get("country"), data.get("city"))


def get_geo_data(ip: str, enabled: bool = True, timeout: float = 2.0) -> GeoData:
    """Country and city for a visitor IP; private addresses are never looked up"""
    if not enabled or is_private_ip(ip):
        return GeoData()
    return _lookup(ip, timeout)
