"""Visit persistence adapters."""

from portfolio_api.adapters.storage.base import AbstractVisitStore, VisitRecord, VisitStoreError
from portfolio_api.adapters.storage.factory import create_visit_store
from portfolio_api.adapters.storage.postgres import PostgresVisitStore

__all__ = [
    "AbstractVisitStore",
    "PostgresVisitStore",
    "VisitRecord",
    "VisitStoreError",
    "create_visit_store",
]
