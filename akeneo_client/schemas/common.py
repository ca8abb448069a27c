from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    href: str = ""


class Links(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    self_link: Link | None = Field(default=None, alias="self")
    first: Link | None = None
    previous: Link | None = None
    next: Link | None = None
    download: Link | None = None

    def has_next(self) -> bool:
        return self.next is not None and bool(self.next.href)

    def next_options(self) -> dict[str, list[str]]:
        """Query of the ``next`` href, ready to be passed back as request options."""
        if not self.has_next():
            return {}
        return parse_qs(urlparse(self.next.href).query, keep_blank_values=True)

    def download_href(self) -> str:
        return self.download.href if self.download is not None else ""

    def self_href(self) -> str:
        return self.self_link.href if self.self_link is not None else ""


class Violation(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    attribute: str | None = None
    property: str | None = None
    message: str = ""
    locale: str | None = None
    scope: str | None = None

    def describe(self) -> str:
        return f"Attribute '{self.attribute or ''}', property '{self.property or ''}': {self.message}"


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int | None = None
    message: str = ""
    errors: list[Violation] = []


class Page(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    links: Links = Field(default_factory=Links, alias="_links")
    current_page: int | None = None
    items_count: int | None = None
    items: list[dict[str, Any]] = []

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Page":
        embedded = payload.get("_embedded") or {}
        return cls.model_validate(
            {
                "_links": payload.get("_links") or {},
                "current_page": payload.get("current_page"),
                "items_count": payload.get("items_count"),
                "items": embedded.get("items") or [],
            }
        )


class MediaFile(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    code: str = ""
    original_filename: str = ""
    mime_type: str = ""
    size: int = 0
    extension: str = ""
    links: Links | None = Field(default=None, alias="_links")

    def download_url(self) -> str:
        return self.links.download_href() if self.links is not None else ""
