# backend/handshakeiq/schemas/report.py
import math

from pydantic import ConfigDict, Field, field_validator

from .common import CamelModel

MAX_PERSON_NAME_LEN = 200
MAX_COMPANY_NAME_LEN = 200
MAX_KNOWN_LINKS = 100

# Section key (wire name) -> canonical category title, in display order.
SECTION_TITLES: dict[str, str] = {
    "professionalBackground": "Professional Background",
    "recentActivities": "Recent Activities & Online Presence",
    "personalInterests": "Personal Interests & Hobbies",
    "discussionPoints": "Potential Discussion Points",
}
SECTION_KEYS = tuple(SECTION_TITLES)


def clamp_confidence(value: float) -> int:
    return max(0, min(100, int(round(value))))


class GroundingSource(CamelModel):
    uri: str
    title: str | None = None

    model_config = ConfigDict(frozen=True)


class InsightPoint(CamelModel):
    text: str
    confidence: int
    source_indices: list[int] = []

    model_config = ConfigDict(frozen=True)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v):
        # Opaque model-supplied score; out-of-range values are clamped, not rejected
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("confidence must be a number")
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("confidence must be finite")
        return clamp_confidence(v)

    @field_validator("source_indices", mode="before")
    @classmethod
    def _null_indices(cls, v):
        return [] if v is None else v


class Insight(CamelModel):
    category: str
    points: list[InsightPoint] = []

    model_config = ConfigDict(frozen=True)


class IntelligenceReport(CamelModel):
    """
    Structured dossier content for one person.

    `sections` always carries the four keys of SECTION_TITLES, in order.
    """

    summary: str
    sections: dict[str, Insight]
    raw_text: str | None = None

    model_config = ConfigDict(frozen=True)

    def section(self, key: str) -> Insight:
        return self.sections[key]

    def to_payload(self) -> dict:
        """Flatten into the `{summary, professionalBackground, ..., rawText}` wire shape."""
        payload: dict = {"summary": self.summary}
        for key in SECTION_KEYS:
            payload[key] = self.sections[key].model_dump(by_alias=True)
        if self.raw_text is not None:
            payload["rawText"] = self.raw_text
        return payload


class ResolvedPerson(CamelModel):
    """The candidate the user picked, flattened for one report request."""

    name: str = Field(alias="personName")
    company: str
    all_links: list[str] = []

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("name", "company")
    @classmethod
    def _required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        if len(v) > MAX_PERSON_NAME_LEN:
            raise ValueError(f"must be at most {MAX_PERSON_NAME_LEN} characters")
        return v

    @field_validator("all_links", mode="before")
    @classmethod
    def _clean_links(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        seen: set[str] = set()
        cleaned: list[str] = []
        for link in v:
            if not isinstance(link, str):
                continue
            link = link.strip()
            if link and link not in seen:
                seen.add(link)
                cleaned.append(link)
        if len(cleaned) > MAX_KNOWN_LINKS:
            raise ValueError(f"at most {MAX_KNOWN_LINKS} links are accepted")
        return cleaned


class ReportResponse(CamelModel):
    summary: str
    professional_background: Insight
    recent_activities: Insight
    personal_interests: Insight
    discussion_points: Insight
    raw_text: str | None = None
    sources: list[GroundingSource] = []

    @classmethod
    def from_report(cls, report: IntelligenceReport, sources: list[GroundingSource]) -> "ReportResponse":
        return cls.model_validate({**report.to_payload(), "sources": sources})


class CardScanRequest(CamelModel):
    base64_image: str = Field(min_length=1)


class CardScanResult(CamelModel):
    name: str = ""
    company: str = ""
