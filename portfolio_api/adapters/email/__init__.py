"""Email adapter layer - abstracts over transactional email providers."""

from portfolio_api.adapters.email.base import AbstractEmailSender, OutgoingEmail
from portfolio_api.adapters.email.brevo_client import BrevoEmailSender, build_brevo_payload
from portfolio_api.adapters.email.factory import create_email_sender

__all__ = [
    "AbstractEmailSender",
    "BrevoEmailSender",
    "OutgoingEmail",
    "build_brevo_payload",
    "create_email_sender",
]
