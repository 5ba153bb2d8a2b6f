"""Brevo (Sendinblue) transactional email adapter."""

import json
import logging
from typing import Any

import httpx

from portfolio_api.adapters.email.base import AbstractEmailSender, OutgoingEmail
from portfolio_api.core.errors import EmailDeliveryAppError

logger = logging.getLogger(__name__)


def build_brevo_payload(email: OutgoingEmail) -> dict[str, Any]:
    """Translate an OutgoingEmail into a Brevo ``/v3/smtp/email`` body.

    Template sends carry ``templateId`` + ``params`` and let Brevo render the
    HTML; everything else goes out as plain text so no raw HTML is built here.
    """
    sender = {"name": email.sender_name, "email": email.sender_email}
    to = [{"email": email.to_email}]

    if email.template_id is not None:
        payload: dict[str, Any] = {
            "templateId": int(email.template_id),
            "to": to,
            "params": dict(email.params),
            "sender": sender,
        }
    else:
        payload = {
            "sender": sender,
            "to": to,
            "subject": email.subject,
            "textContent": email.text_content,
        }

    if email.reply_to:
        payload["replyTo"] = {"email": email.reply_to}
    return payload


def _parse_provider_body(response: httpx.Response) -> Any:
    text = response.text
    try:
        return json.loads(text)
    except ValueError:
        return text or None


class BrevoEmailSender(AbstractEmailSender):
    """Send emails through the Brevo SMTP API using httpx."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.brevo.com/v3/smtp/email",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the sender.

        Args:
            api_key: Brevo API key, sent as the ``api-key`` header.
            api_url: Endpoint for transactional sends.
            timeout_seconds: Timeout for the HTTP request.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout_seconds
        self._transport = transport

    async def send(self, email: OutgoingEmail) -> None:
        """POST the email to Brevo.

        Raises:
            EmailDeliveryAppError: On a non-2xx response or transport failure.
        """
        payload = build_brevo_payload(email)
        headers = {
            "Content-Type": "application/json",
            "api-key": self._api_key,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error(
                "email.request_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            raise EmailDeliveryAppError(
                code="email_delivery_failed",
                message="Failed to send email",
                details={"detail": str(exc) or type(exc).__name__},
            ) from exc

        if response.is_success:
            logger.info(
                "email.sent",
                extra={
                    "provider": "brevo",
                    "provider_status": response.status_code,
                    "templated": email.template_id is not None,
                },
            )
            return

        provider_body = _parse_provider_body(response)
        logger.error(
            "email.provider_error",
            extra={
                "provider": "brevo",
                "provider_status": response.status_code,
                "provider_body": provider_body,
            },
        )
        raise EmailDeliveryAppError(
            code="email_delivery_failed",
            message="Failed to send email",
            details={
                "provider_status": response.status_code,
                "provider_body": provider_body,
            },
        )
