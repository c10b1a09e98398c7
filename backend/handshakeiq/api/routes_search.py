from uuid import uuid4
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..schemas.dossier import UserContext
from ..schemas.report import CardScanRequest, CardScanResult, ReportResponse, ResolvedPerson
from ..schemas.search import CandidatePerson, PersonSearchParams
from ..services.card_scanner import extract_card
from ..services.connectors import (
    GoogleSearchClient,
    ReportRequester,
    get_report_requester,
    get_search_client,
)
from ..services.errors import NoCandidatesFound, SearchUnavailable
from ..services.intelligence import generate_report
from ..services.person_search import search_people
from .deps import get_user_context

router = APIRouter(tags=["search"])

logger = logging.getLogger(__name__)


@router.get("/search/person", response_model=list[CandidatePerson])
async def search_person(
    name: str = Query(..., min_length=1, max_length=200),
    company: str | None = Query(default=None, max_length=200),
    designation: str | None = Query(default=None, max_length=200),
    ctx: UserContext = Depends(get_user_context),
    client: GoogleSearchClient = Depends(get_search_client),
):
    try:
        params = PersonSearchParams(name=name, company=company, designation=designation)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    request_id = str(uuid4())
    logger.info(
        "Person search requested",
        extra={"request_id": request_id, "user_id": ctx.user_id, "step": "search_person"},
    )

    try:
        return await search_people(
            params.name,
            params.company,
            params.designation,
            client=client,
        )
    except NoCandidatesFound:
        logger.info(
            "No candidates found",
            extra={"request_id": request_id, "user_id": ctx.user_id, "step": "search_person"},
        )
        return []
    except SearchUnavailable as e:
        logger.warning(
            "Person search failed: %s", e,
            extra={"request_id": request_id, "user_id": ctx.user_id, "step": "search_person"},
        )
        raise HTTPException(
            status_code=502,
            detail="Search is temporarily unavailable. Please try again.",
        )


@router.post("/intelligence-report", response_model=ReportResponse)
async def create_intelligence_report(
    payload: ResolvedPerson,
    ctx: UserContext = Depends(get_user_context),
    requester: ReportRequester = Depends(get_report_requester),
):
    request_id = str(uuid4())
    logger.info(
        "Intelligence report requested",
        extra={"request_id": request_id, "user_id": ctx.user_id, "step": "intelligence_report"},
    )
    result = await generate_report(payload, requester, request_id=request_id)
    return ReportResponse.from_report(result.report, result.sources)


@router.post("/extract-card", response_model=CardScanResult)
async def extract_card_text(
    payload: CardScanRequest,
    _: UserContext = Depends(get_user_context),
):
    return await extract_card(payload.base64_image)
