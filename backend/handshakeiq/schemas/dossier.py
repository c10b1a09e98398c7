# backend/handshakeiq/schemas/dossier.py
from datetime import datetime

from pydantic import ConfigDict, constr, field_validator

from .common import CamelModel
from .report import GroundingSource
from .search import SocialLink

MAX_NOTE_LEN = 20000


class UserContext(CamelModel):
    """Identity of the caller, resolved once per request and passed explicitly."""

    user_id: str

    model_config = ConfigDict(frozen=True)


class UserOut(CamelModel):
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserUpsert(CamelModel):
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    google_access_token: str | None = None
    google_refresh_token: str | None = None


class DossierCreate(CamelModel):
    person_name: constr(min_length=1, max_length=200)
    person_title: str | None = None
    person_company: str | None = None
    person_email: str | None = None
    person_photo_url: str | None = None
    intelligence_report: dict | None = None
    sources: list[GroundingSource] | None = None
    social_media_links: list[SocialLink] | None = None
    search_query: str | None = None

    @field_validator("person_name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("personName must not be empty")
        return v


class DossierUpdate(CamelModel):
    person_title: str | None = None
    person_company: str | None = None
    person_email: str | None = None
    person_photo_url: str | None = None
    intelligence_report: dict | None = None
    sources: list[GroundingSource] | None = None
    social_media_links: list[SocialLink] | None = None
    search_query: str | None = None


class DossierOut(CamelModel):
    id: str
    user_id: str
    person_name: str
    person_title: str | None = None
    person_company: str | None = None
    person_email: str | None = None
    person_photo_url: str | None = None
    intelligence_report: dict | None = None
    sources: list[dict] | None = None
    social_media_links: list[dict] | None = None
    search_query: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class NoteCreate(CamelModel):
    content: constr(min_length=1, max_length=MAX_NOTE_LEN)


class NoteOut(CamelModel):
    id: str
    dossier_id: str
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
