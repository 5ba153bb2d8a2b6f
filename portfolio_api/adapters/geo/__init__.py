"""IP geolocation adapters."""

from portfolio_api.adapters.geo.ip_api import UNKNOWN_GEO, GeoInfo, IpApiGeoLocator

__all__ = ["GeoInfo", "IpApiGeoLocator", "UNKNOWN_GEO"]
