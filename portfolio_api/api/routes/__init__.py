from __future__ import annotations

from portfolio_api.api.routes.contact import router as contact_router
from portfolio_api.api.routes.health import router as health_router
from portfolio_api.api.routes.visits import router as visits_router

__all__ = ["contact_router", "health_router", "visits_router"]
