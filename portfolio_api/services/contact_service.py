"""Contact form relay service.

Turns a validated contact submission into a transactional email addressed to
the site owner, with the visitor's address as reply-to so the owner can answer
directly from their mailbox.
"""

import logging
from typing import Callable

from portfolio_api.adapters.email.base import AbstractEmailSender, OutgoingEmail
from portfolio_api.adapters.email.factory import create_email_sender
from portfolio_api.core.config import EmailSettings, settings
from portfolio_api.schemas.contact import ContactRequest

logger = logging.getLogger(__name__)

DEFAULT_SENDER_NAME = "Portfolio Contact"
SUBJECT_PREFIX = "[Portfolio Contact]"


def build_contact_email(payload: ContactRequest, email_settings: EmailSettings) -> OutgoingEmail:
    """Build the owner-facing email for a contact submission.

    Uses the configured Brevo template when one is set, otherwise a
    plain-text message.

    Args:
        payload: Validated, trimmed contact submission.
        email_settings: Sender/recipient configuration.

    Returns:
        OutgoingEmail ready for an email sender.
    """
    sender_name = email_settings.from_name or DEFAULT_SENDER_NAME

    if email_settings.template_id is not None:
        return OutgoingEmail(
            sender_name=sender_name,
            sender_email=email_settings.from_email,
            to_email=email_settings.to_email,
            reply_to=payload.email,
            template_id=email_settings.template_id,
            params={
                "name": payload.name,
                "email": payload.email,
                "subject": payload.subject,
                "message": payload.message,
            },
        )

    return OutgoingEmail(
        sender_name=sender_name,
        sender_email=email_settings.from_email,
        to_email=email_settings.to_email,
        reply_to=payload.email,
        subject=f"{SUBJECT_PREFIX} {payload.subject}",
        text_content=f"Name: {payload.name}\nEmail: {payload.email}\n\n{payload.message}",
    )


class ContactService:
    """Relays contact submissions through the configured email provider.

    Attributes:
        sender_factory: Builds the email sender on demand; raises
            ConfigurationAppError when the provider is not configured.
        email_settings: Sender/recipient configuration.
    """

    def __init__(
        self,
        sender_factory: Callable[[], AbstractEmailSender] = create_email_sender,
        email_settings: EmailSettings | None = None,
    ) -> None:
        self.sender_factory = sender_factory
        self.email_settings = email_settings or settings.email

    async def send(self, payload: ContactRequest) -> None:
        """Send the contact submission to the site owner.

        Raises:
            ConfigurationAppError: If no email provider is configured.
            EmailDeliveryAppError: If the provider rejects the message.
        """
        sender = self.sender_factory()
        email = build_contact_email(payload, self.email_settings)
        await sender.send(email)
        logger.info(
            "contact.relayed",
            extra={
                "templated": email.template_id is not None,
                "subject_chars": len(payload.subject),
                "message_chars": len(payload.message),
            },
        )
