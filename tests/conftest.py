"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``portfolio_api`` import so the
module-level ``settings`` object is built from test values.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("BREVO_API_KEY", "test-brevo-key")
os.environ.setdefault("FROM_EMAIL", "noreply@example.com")
os.environ.setdefault("TO_EMAIL", "owner@example.com")
os.environ.setdefault("GEO_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.pop("NEON_DATABASE_URL", None)
os.environ.pop("DATABASE_URL", None)

import pytest  # noqa: E402

from portfolio_api.core.rate_limit import reset_rate_limiter  # noqa: E402

from tests.fakes import FakeEmailSender  # noqa: E402


@pytest.fixture
def fake_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture(autouse=True)
def _fresh_rate_limiter():
    """Every test starts with an empty limiter store."""
    reset_rate_limiter()
    yield
    reset_rate_limiter()
