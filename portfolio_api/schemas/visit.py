"""Pydantic schemas for page-view tracking."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class VisitRequest(BaseModel):
    """Page-view ping sent by the site's client script.

    Field names follow the camelCase keys the browser sends.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    case_study: str | None = Field(
        default=None,
        alias="caseStudy",
        description="Title of the case study being viewed, if any.",
    )
    page: str | None = Field(default=None, description="Page path or title.")
    referrer: str | None = Field(default=None, description="document.referrer")
    user_agent: str | None = Field(
        default=None,
        alias="userAgent",
        description="navigator.userAgent; falls back to the User-Agent header.",
    )
    visitor_count: int | str | None = Field(
        default=None,
        alias="visitorCount",
        description="Per-browser view counter kept by the client.",
    )
    ip: str | None = Field(
        default=None,
        description="Client-reported IP, used only when no proxy header is present.",
    )

    @property
    def title(self) -> str:
        return self.case_study or self.page or "page"
