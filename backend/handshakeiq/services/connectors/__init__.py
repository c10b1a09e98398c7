from __future__ import annotations

from .base import BaseConnector
from .google_search import GoogleSearchClient
from .openai_web import ReportRequester, ReportResponseRaw


def get_search_client() -> GoogleSearchClient:
    return GoogleSearchClient()


def get_report_requester() -> ReportRequester:
    return ReportRequester()


__all__ = [
    "BaseConnector",
    "GoogleSearchClient",
    "ReportRequester",
    "ReportResponseRaw",
    "get_search_client",
    "get_report_requester",
]
