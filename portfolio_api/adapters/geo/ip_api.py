"""Best-effort IP geolocation via ip-api.com.

ip-api.com's free tier needs no key but is rate limited and plain HTTP only.
Lookups never fail the caller: any transport or decoding problem is logged
and reported as an ``unknown`` location.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from portfolio_api.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)

GEO_FIELDS = "status,country,regionName,city,zip,lat,lon,query,isp"


@dataclass(frozen=True)
class GeoInfo:
    """Location resolved for a visitor IP."""

    status: str = "unknown"
    query: str | None = None
    country: str | None = None
    region_name: str | None = None
    city: str | None = None
    zip: str | None = None
    lat: float | None = None
    lon: float | None = None
    isp: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "GeoInfo":
        return cls(
            status=str(payload.get("status") or "unknown"),
            query=payload.get("query"),
            country=payload.get("country"),
            region_name=payload.get("regionName"),
            city=payload.get("city"),
            zip=payload.get("zip"),
            lat=payload.get("lat"),
            lon=payload.get("lon"),
            isp=payload.get("isp"),
        )


UNKNOWN_GEO = GeoInfo()


class IpApiGeoLocator:
    """Resolve IP addresses with the ip-api.com JSON endpoint."""

    def __init__(
        self,
        base_url: str = "http://ip-api.com/json",
        timeout_seconds: float = 3.0,
        cache: SimpleTTLCache[GeoInfo] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._cache = cache
        self._transport = transport

    def build_url(self, ip: str) -> str:
        return f"{self._base_url}/{quote(ip, safe='')}"

    async def lookup(self, ip: str) -> GeoInfo:
        """Look up ``ip``; returns ``UNKNOWN_GEO`` on any failure.

        Only successful lookups are cached.
        """
        if self._cache is not None:
            cached = self._cache.get(ip)
            if cached is not None:
                return cached

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(self.build_url(ip), params={"fields": GEO_FIELDS})
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "geo.lookup_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            return UNKNOWN_GEO

        if not isinstance(payload, dict):
            logger.warning("geo.lookup_failed", extra={"error_type": "unexpected_payload"})
            return UNKNOWN_GEO

        geo = GeoInfo.from_payload(payload)
        if geo.succeeded and self._cache is not None:
            self._cache.set(ip, geo)
        logger.debug("geo.lookup", extra={"geo_status": geo.status, "country": geo.country})
        return geo
