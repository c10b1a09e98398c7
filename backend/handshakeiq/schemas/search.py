# backend/handshakeiq/schemas/search.py
from typing import Literal

from pydantic import ConfigDict, field_validator

from .common import CamelModel

MAX_PERSON_NAME_LEN = 200
MAX_COMPANY_NAME_LEN = 200
MAX_DESIGNATION_LEN = 200

Platform = Literal["linkedin", "twitter", "facebook", "instagram", "github", "other"]


class RawSearchResult(CamelModel):
    """One ranked hit from the web-search API; immutable."""

    title: str = ""
    link: str
    snippet: str = ""
    thumbnail_url: str | None = None

    model_config = ConfigDict(frozen=True)


class ExtractedInfo(CamelModel):
    name: str
    title: str
    company: str
    photo_url: str


class SocialLink(CamelModel):
    platform: Platform
    url: str

    model_config = ConfigDict(frozen=True)


class SourceBuckets(CamelModel):
    """Non-social source links, bucketed by the kind of page they look like."""

    blogs: list[str] = []
    news: list[str] = []
    other: list[str] = []


class CandidatePerson(CamelModel):
    id: str
    name: str
    title: str | None = None
    company: str | None = None
    photo_url: str | None = None
    linked_in_url: str | None = None
    source_links: list[RawSearchResult]
    social_links: list[SocialLink] = []
    sources: SourceBuckets = SourceBuckets()
    all_links: list[str] = []

    model_config = ConfigDict(frozen=True)


class PersonSearchParams(CamelModel):
    name: str
    company: str | None = None
    designation: str | None = None

    @field_validator("company", "designation", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            stripped = v.strip()
            return stripped or None
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        if len(v) > MAX_PERSON_NAME_LEN:
            raise ValueError(f"name must be at most {MAX_PERSON_NAME_LEN} characters")
        return v

    @field_validator("company")
    @classmethod
    def validate_company(cls, v: str | None) -> str | None:
        if v is not None and len(v) > MAX_COMPANY_NAME_LEN:
            raise ValueError(f"company must be at most {MAX_COMPANY_NAME_LEN} characters")
        return v

    @field_validator("designation")
    @classmethod
    def validate_designation(cls, v: str | None) -> str | None:
        if v is not None and len(v) > MAX_DESIGNATION_LEN:
            raise ValueError(f"designation must be at most {MAX_DESIGNATION_LEN} characters")
        return v
