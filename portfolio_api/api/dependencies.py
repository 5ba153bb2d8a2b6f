"""FastAPI dependency providers for route services.

Providers only assemble objects; nothing here touches the network or raises
for missing configuration, so request validation and rate limiting always run
first. Tests swap these out through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from portfolio_api.adapters.geo.ip_api import IpApiGeoLocator
from portfolio_api.adapters.storage.base import AbstractVisitStore
from portfolio_api.adapters.storage.factory import create_visit_store
from portfolio_api.core.config import settings
from portfolio_api.services.contact_service import ContactService
from portfolio_api.services.visit_service import VisitService
from portfolio_api.utils.simple_cache import SimpleTTLCache


@lru_cache(maxsize=1)
def _geo_cache() -> SimpleTTLCache:
    return SimpleTTLCache(
        ttl_seconds=settings.geo.cache_ttl_seconds,
        max_entries=settings.geo.cache_max_entries,
    )


@lru_cache(maxsize=1)
def _visit_store() -> AbstractVisitStore | None:
    # Shared so the schema bootstrap runs once per warm process
    return create_visit_store(settings.database)


def get_contact_service() -> ContactService:
    return ContactService(email_settings=settings.email)


def get_visit_service() -> VisitService:
    geo_locator = (
        IpApiGeoLocator(
            base_url=settings.geo.base_url,
            timeout_seconds=settings.geo.timeout_seconds,
            cache=_geo_cache(),
        )
        if settings.geo.enabled
        else None
    )
    return VisitService(
        geo_locator=geo_locator,
        store=_visit_store(),
        email_settings=settings.email,
    )
