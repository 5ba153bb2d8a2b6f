"""Factory for the optional visit store."""

from portfolio_api.adapters.storage.base import AbstractVisitStore
from portfolio_api.adapters.storage.postgres import PostgresVisitStore
from portfolio_api.core.config import DatabaseSettings, settings


def create_visit_store(db_settings: DatabaseSettings | None = None) -> AbstractVisitStore | None:
    """Build the Postgres visit store, or None when no database is configured."""
    cfg = db_settings or settings.database
    if not cfg.url:
        return None
    return PostgresVisitStore(cfg.url, connect_timeout=cfg.connect_timeout_seconds)
