"""Visit persistence interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class VisitRecord:
    """One page view as stored in the ``visits`` table."""

    slug: str
    title: str
    ip: str
    city: str | None = None
    region: str | None = None
    country: str | None = None
    lat: float | None = None
    lon: float | None = None
    isp: str | None = None
    user_agent: str | None = None
    referrer: str | None = None


class VisitStoreError(RuntimeError):
    """Raised when a visit cannot be persisted."""


class AbstractVisitStore(ABC):
    """Interface for visit stores."""

    @abstractmethod
    async def record_visit(self, visit: VisitRecord) -> int | None:
        """Persist ``visit`` and bump the page's view counter.

        Returns:
            Total views recorded for ``visit.slug`` including this one, or
            None when the store cannot tell.

        Raises:
            VisitStoreError: If the backing store is unreachable or rejects the write.
        """
        raise NotImplementedError
