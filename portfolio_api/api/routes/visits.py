import logging

from fastapi import APIRouter, Depends, Request, Response, status

from portfolio_api.api.dependencies import get_visit_service
from portfolio_api.core.rate_limit import UNKNOWN_CLIENT, client_key_from_headers
from portfolio_api.schemas.contact import OkResponse
from portfolio_api.schemas.visit import VisitRequest
from portfolio_api.services.visit_service import VisitService, ensure_trackable
from portfolio_api.utils.user_agents import has_campaign_params, is_bot_user_agent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Visits"])


@router.post(
    "/visits",
    response_model=OkResponse,
    responses={
        204: {"description": "Ignored: crawler or campaign traffic"},
        400: {"description": "Body is not valid JSON"},
        422: {"description": "Neither page nor caseStudy given"},
        500: {"description": "Email provider not configured"},
        502: {"description": "Notification email failed"},
    },
)
async def track_visit(
    payload: VisitRequest,
    request: Request,
    service: VisitService = Depends(get_visit_service),
):
    """Record an organic page view and notify the site owner.

    Crawlers (by user agent) and campaign traffic (``utm_*`` query
    parameters) are acknowledged with 204 and otherwise ignored.
    """
    ensure_trackable(payload)

    # Header fallback is stored lowercased; a body-supplied agent is kept as sent
    user_agent = payload.user_agent or request.headers.get("user-agent", "").lower() or None

    if is_bot_user_agent(user_agent):
        logger.info("visit.ignored", extra={"reason": "bot"})
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    if has_campaign_params(request.query_params.keys()):
        logger.info("visit.ignored", extra={"reason": "utm"})
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    ip = client_key_from_headers(request.headers) or payload.ip or UNKNOWN_CLIENT
    await service.track(payload, ip=ip, user_agent=user_agent)
    return OkResponse()
