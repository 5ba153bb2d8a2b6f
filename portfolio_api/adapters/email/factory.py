"""Factory for the configured email sender."""

from portfolio_api.adapters.email.base import AbstractEmailSender
from portfolio_api.adapters.email.brevo_client import BrevoEmailSender
from portfolio_api.core.config import EmailSettings, settings
from portfolio_api.core.errors import ConfigurationAppError


def create_email_sender(email_settings: EmailSettings | None = None) -> AbstractEmailSender:
    """Instantiate the email sender from settings.

    Built per request rather than at import time so a missing key surfaces as
    a 500 on the email endpoints instead of a startup crash.

    Returns:
        AbstractEmailSender: Configured Brevo sender.

    Raises:
        ConfigurationAppError: If BREVO_API_KEY is not set.
    """
    cfg = email_settings or settings.email

    if not cfg.api_key:
        raise ConfigurationAppError(
            code="email_not_configured",
            message="Server not configured",
            details={"hint": "Set BREVO_API_KEY"},
        )

    return BrevoEmailSender(
        api_key=cfg.api_key,
        api_url=cfg.api_url,
        timeout_seconds=cfg.timeout_seconds,
    )
