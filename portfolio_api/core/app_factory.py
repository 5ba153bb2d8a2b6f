"""Application factory for the portfolio API.

Builds the FastAPI app (metadata, middleware, handlers, routers) in one place
so tests and the ASGI entrypoint share the same wiring.
"""

from __future__ import annotations

from fastapi import FastAPI

from portfolio_api.api.routes import contact_router, health_router, visits_router
from portfolio_api.core.config import settings
from portfolio_api.core.exception_handlers import setup_exception_handlers
from portfolio_api.core.logging import configure_logging
from portfolio_api.core.middleware import request_id_middleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Portfolio API",
        description=(
            "Backend for a static portfolio site: relays contact-form messages "
            "to the site owner by email (rate limited per client IP) and records "
            "organic page views with best-effort geolocation."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(contact_router, prefix="/v1")
    app.include_router(visits_router, prefix="/v1")
    app.include_router(health_router)

    return app
