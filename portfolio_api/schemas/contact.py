"""Pydantic schemas for the contact form endpoint."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_NAME_CHARS = 100
MAX_SUBJECT_CHARS = 150
MAX_MESSAGE_CHARS = 5000


def is_valid_email(value: str) -> bool:
    """Loose shape check: something@something.tld with no whitespace."""
    return bool(EMAIL_PATTERN.match(value.lower()))


def _check_length(value: str, label: str, max_chars: int) -> str:
    if len(value) > max_chars:
        raise PydanticCustomError(
            "string_too_long",
            "{label} too long (max {max_chars} chars)",
            {"label": label, "max_chars": max_chars},
        )
    return value


class ContactRequest(BaseModel):
    """Contact form submission. All fields are trimmed before validation."""

    model_config = ConfigDict(str_strip_whitespace=True, coerce_numbers_to_str=True)

    # Declaration order sets error order: length limits report before the email format
    name: str = Field(..., min_length=1, description="Sender's name (max 100 chars).")
    subject: str = Field(..., min_length=1, description="Message subject (max 150 chars).")
    message: str = Field(..., min_length=1, description="Message body (max 5000 chars).")
    email: str = Field(..., min_length=1, description="Sender's reply-to address.")

    @field_validator("name")
    @classmethod
    def _name_length(cls, value: str) -> str:
        return _check_length(value, "Name", MAX_NAME_CHARS)

    @field_validator("subject")
    @classmethod
    def _subject_length(cls, value: str) -> str:
        return _check_length(value, "Subject", MAX_SUBJECT_CHARS)

    @field_validator("message")
    @classmethod
    def _message_length(cls, value: str) -> str:
        return _check_length(value, "Message", MAX_MESSAGE_CHARS)

    @field_validator("email")
    @classmethod
    def _email_format(cls, value: str) -> str:
        if not is_valid_email(value):
            raise PydanticCustomError("invalid_email", "Invalid email address")
        return value


class OkResponse(BaseModel):
    """Acknowledgement returned by the email-backed endpoints."""

    ok: bool = Field(True, description="Always true on success.")
