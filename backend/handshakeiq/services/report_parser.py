# backend/handshakeiq/services/report_parser.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Sequence

from pydantic import ValidationError

from ..schemas.report import (
    SECTION_KEYS,
    SECTION_TITLES,
    GroundingSource,
    Insight,
    InsightPoint,
    IntelligenceReport,
)
from .errors import UnparsableReport

logger = logging.getLogger(__name__)

UNPARSABLE_SUMMARY = (
    "The model's response could not be parsed as structured data. The raw, unformatted "
    "output is provided below for manual review. This may indicate a temporary issue "
    "with the intelligence generation service."
)


def empty_sections() -> Dict[str, Insight]:
    return {key: Insight(category=SECTION_TITLES[key], points=[]) for key in SECTION_KEYS}


def degraded_report(summary: str, raw_text: str | None) -> IntelligenceReport:
    return IntelligenceReport(summary=summary, sections=empty_sections(), raw_text=raw_text)


def _valid_indices(indices: Sequence[int], source_count: int) -> List[int]:
    """In-range citation indices, first occurrence order, duplicates removed."""
    kept: List[int] = []
    for idx in indices:
        if 0 <= idx < source_count and idx not in kept:
            kept.append(idx)
    return kept


def _parse_section(key: str, data: Any, source_count: int) -> Insight:
    if not isinstance(data, dict):
        raise UnparsableReport(f"section '{key}' is not an object")
    if "points" not in data or not isinstance(data["points"], list):
        raise UnparsableReport(f"section '{key}' has no points list")

    category = data.get("category")
    if not isinstance(category, str) or not category.strip():
        category = SECTION_TITLES[key]

    points: List[InsightPoint] = []
    for raw_point in data["points"]:
        try:
            point = InsightPoint.model_validate(raw_point)
        except ValidationError as e:
            raise UnparsableReport(f"section '{key}' has an invalid point: {e}") from e
        points.append(
            point.model_copy(
                update={"source_indices": _valid_indices(point.source_indices, source_count)}
            )
        )

    return Insight(category=category, points=points)


def parse_strict(raw_text: str, sources: Sequence[GroundingSource]) -> IntelligenceReport:
    """
    Parse the model output as exactly one JSON object of the report schema.

    Raises:
        UnparsableReport: malformed JSON, a non-object, or missing/invalid fields.
    """
    try:
        data = json.loads(raw_text)
    except (TypeError, ValueError) as e:
        raise UnparsableReport(f"response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise UnparsableReport("response is not a JSON object")

    summary = data.get("summary")
    if not isinstance(summary, str):
        raise UnparsableReport("summary is missing")

    sections: Dict[str, Insight] = {}
    for key in SECTION_KEYS:
        if key not in data:
            raise UnparsableReport(f"section '{key}' is missing")
        sections[key] = _parse_section(key, data[key], len(sources))

    return IntelligenceReport(summary=summary, sections=sections, raw_text=raw_text)


def parse(raw_text: str, sources: Sequence[GroundingSource]) -> IntelligenceReport:
    """
    Turn model output into an IntelligenceReport; never raises.

    Any deviation from the schema yields the degraded report: a fixed
    notice as summary, four empty sections and the untouched raw text.
    There is no partial recovery and no second, more lenient attempt.
    """
    try:
        return parse_strict(raw_text, sources)
    except UnparsableReport as e:
        logger.warning(
            "Failed to parse report JSON from model: %s",
            e,
            extra={"step": "report_parse"},
        )
        return degraded_report(UNPARSABLE_SUMMARY, raw_text)
