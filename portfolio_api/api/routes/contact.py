from fastapi import APIRouter, Depends, Request

from portfolio_api.api.dependencies import get_contact_service
from portfolio_api.core.rate_limit import enforce_rate_limit
from portfolio_api.schemas.contact import ContactRequest, OkResponse
from portfolio_api.services.contact_service import ContactService

router = APIRouter(tags=["Contact"])


@router.post(
    "/contact",
    response_model=OkResponse,
    responses={
        400: {"description": "Body is not valid JSON"},
        422: {"description": "Missing, blank, oversized or malformed fields"},
        429: {"description": "Too many submissions from this client"},
        500: {"description": "Email provider not configured"},
        502: {"description": "Email provider rejected the message"},
    },
)
async def send_contact(
    payload: ContactRequest,
    request: Request,
    service: ContactService = Depends(get_contact_service),
) -> OkResponse:
    """Relay a contact form submission to the site owner by email.

    The body is validated before the client's quota is touched, so malformed
    submissions never count against the rate limit.

    Args:
        payload: Contact submission (name, email, subject, message).
        request: Incoming request; forwarded-address headers identify the client.
        service: Contact relay service.

    Returns:
        OkResponse: ``{"ok": true}`` once the provider accepted the message.
    """
    enforce_rate_limit(request)
    await service.send(payload)
    return OkResponse()
