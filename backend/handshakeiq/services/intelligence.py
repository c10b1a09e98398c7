# backend/handshakeiq/services/intelligence.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ..schemas.report import GroundingSource, IntelligenceReport, ResolvedPerson
from .connectors.openai_web import ReportRequester
from .errors import ModelUnavailable
from .report_parser import degraded_report, parse

logger = logging.getLogger(__name__)

MODEL_UNAVAILABLE_SUMMARY = (
    "A critical error occurred while communicating with the intelligence network. The "
    "connection may be unstable or the API key may be invalid. Please try again."
)


@dataclass(frozen=True)
class ReportResult:
    report: IntelligenceReport
    sources: List[GroundingSource] = field(default_factory=list)


async def generate_report(
    person: ResolvedPerson,
    requester: ReportRequester,
    request_id: str | None = None,
) -> ReportResult:
    """
    Request and parse a report for the resolved person.

    Every failure resolves to a displayable report: an unavailable model
    yields the error report (empty sections, error text as raw text, no
    sources) and unparsable output yields the parser's degraded report.
    """
    try:
        raw = await requester.request_report(person.name, person.company, person.all_links)
    except ModelUnavailable as e:
        logger.warning(
            "Report model unavailable: %s",
            e,
            extra={"request_id": request_id, "step": "report_request"},
        )
        return ReportResult(report=degraded_report(MODEL_UNAVAILABLE_SUMMARY, str(e)), sources=[])

    report = parse(raw.raw_response_text, raw.sources)
    return ReportResult(report=report, sources=list(raw.sources))
