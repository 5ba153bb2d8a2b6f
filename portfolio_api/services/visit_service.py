"""Page-view tracking service.

For each organic page view this service:
- resolves the visitor's location (best effort)
- persists the visit and bumps the page counter when a database is configured
- emails the site owner a short notification

Geolocation and persistence never fail a request; only the notification
email is required to succeed.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from portfolio_api.adapters.email.base import AbstractEmailSender, OutgoingEmail
from portfolio_api.adapters.email.factory import create_email_sender
from portfolio_api.adapters.geo.ip_api import UNKNOWN_GEO, GeoInfo, IpApiGeoLocator
from portfolio_api.adapters.storage.base import AbstractVisitStore, VisitRecord, VisitStoreError
from portfolio_api.core.config import EmailSettings, settings
from portfolio_api.core.errors import ValidationAppError
from portfolio_api.schemas.visit import VisitRequest
from portfolio_api.utils.slug import slugify

logger = logging.getLogger(__name__)

DEFAULT_SENDER_NAME = "Portfolio Notification"


@dataclass(frozen=True)
class VisitContext:
    """Request-derived facts about a visit, resolved before notification."""

    ip: str
    user_agent: str | None
    geo: GeoInfo = UNKNOWN_GEO
    total_views: int | None = None

    @property
    def visitor_ip(self) -> str:
        return self.geo.query or self.ip


def ensure_trackable(payload: VisitRequest) -> None:
    """Reject pings that name neither a page nor a case study.

    Raises:
        ValidationAppError: With code ``missing_page``.
    """
    if not payload.page and not payload.case_study:
        raise ValidationAppError(code="missing_page", message="Missing page or caseStudy")


def build_notification_text(
    payload: VisitRequest,
    context: VisitContext,
    now: datetime | None = None,
) -> str:
    """Render the plain-text body of the visit notification."""
    geo = context.geo
    lines = [f"Page: {payload.page or 'unknown'}"]
    if payload.case_study:
        lines.append(f"Case Study: {payload.case_study}")
    lines.append(f"Visitor IP: {context.visitor_ip}")
    if geo.succeeded:
        lines.append(
            f"Location: {geo.city or '-'}, {geo.region_name or '-'}, {geo.country or '-'} "
            f"({geo.lat or '-'}, {geo.lon or '-'})"
        )
        lines.append(f"ISP: {geo.isp or '-'} | ZIP: {geo.zip or '-'}")
    lines.append(f"Referrer: {payload.referrer or 'direct / none'}")
    lines.append(f"User Agent: {context.user_agent or 'unknown'}")
    visitor_count = payload.visitor_count if payload.visitor_count is not None else "unknown"
    lines.append(f"Visitor view count (this browser): {visitor_count}")
    if context.total_views is not None:
        lines.append(f"Total views (all visitors): {context.total_views}")
    lines.append("---")
    lines.append(f"Timestamp: {(now or datetime.now(timezone.utc)).isoformat()}")
    return "\n".join(lines)


def build_notification_subject(payload: VisitRequest) -> str:
    if payload.case_study:
        return f"Portfolio Visit — {payload.case_study}"
    return "Portfolio Visit"


class VisitService:
    """Records page views and notifies the site owner.

    Attributes:
        geo_locator: Resolves visitor IPs; None disables geolocation.
        store: Optional visit store; None skips persistence.
        sender_factory: Builds the email sender on demand.
        email_settings: Sender/recipient configuration.
    """

    def __init__(
        self,
        geo_locator: IpApiGeoLocator | None,
        store: AbstractVisitStore | None = None,
        sender_factory: Callable[[], AbstractEmailSender] = create_email_sender,
        email_settings: EmailSettings | None = None,
    ) -> None:
        self.geo_locator = geo_locator
        self.store = store
        self.sender_factory = sender_factory
        self.email_settings = email_settings or settings.email

    async def _locate(self, ip: str) -> GeoInfo:
        if self.geo_locator is None:
            return UNKNOWN_GEO
        return await self.geo_locator.lookup(ip)

    async def _persist(
        self,
        payload: VisitRequest,
        ip: str,
        user_agent: str | None,
        geo: GeoInfo,
    ) -> int | None:
        """Store the visit; returns total page views or None when skipped/failed."""
        if self.store is None:
            return None

        visit = VisitRecord(
            slug=slugify(payload.case_study or payload.page),
            title=payload.title,
            ip=geo.query or ip,
            city=geo.city,
            region=geo.region_name,
            country=geo.country,
            lat=geo.lat,
            lon=geo.lon,
            isp=geo.isp,
            user_agent=user_agent,
            referrer=payload.referrer,
        )
        try:
            return await self.store.record_visit(visit)
        except VisitStoreError as exc:
            logger.warning(
                "visit.persist_failed",
                extra={"slug": visit.slug, "error_msg": str(exc)},
            )
            return None

    async def track(self, payload: VisitRequest, ip: str, user_agent: str | None) -> VisitContext:
        """Locate, persist and announce a page view.

        Args:
            payload: Validated visit ping.
            ip: Client address (already resolved from headers/body).
            user_agent: Visitor user agent, if known.

        Returns:
            VisitContext with everything that went into the notification.

        Raises:
            ValidationAppError: If neither page nor case study is given.
            ConfigurationAppError: If no email provider is configured.
            EmailDeliveryAppError: If the notification could not be sent.
        """
        ensure_trackable(payload)
        geo = await self._locate(ip)
        total_views = await self._persist(payload, ip, user_agent, geo)
        context = VisitContext(ip=ip, user_agent=user_agent, geo=geo, total_views=total_views)

        sender = self.sender_factory()
        await sender.send(
            OutgoingEmail(
                sender_name=self.email_settings.from_name or DEFAULT_SENDER_NAME,
                sender_email=self.email_settings.from_email,
                to_email=self.email_settings.to_email,
                subject=build_notification_subject(payload),
                text_content=build_notification_text(payload, context),
            )
        )
        logger.info(
            "visit.tracked",
            extra={
                "slug": slugify(payload.case_study or payload.page),
                "geo_status": geo.status,
                "persisted": total_views is not None,
            },
        )
        return context
