from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status as http_status

from recruit_tracker.models.requests import CandidateCreate, CandidateFilters, StatusUpdate
from recruit_tracker.models.response import CandidateCreateResponse, CandidateView
from recruit_tracker.models.schemas import CandidateStatus, SessionContext
from recruit_tracker.services import candidates as candidate_service
from recruit_tracker.services.job_lookup import JobRequirementLookup, get_job_lookup
from recruit_tracker.services.session_manager import get_session_context
from recruit_tracker.utils.logging_config import get_logger, log_api_call, PerformanceMonitor

router = APIRouter()
logger = get_logger(__name__)


@router.post("/", response_model=CandidateCreateResponse, status_code=http_status.HTTP_201_CREATED)
@log_api_call("create_candidate")
async def create_candidate(
    payload: CandidateCreate,
    ctx: SessionContext = Depends(get_session_context),
    lookup: JobRequirementLookup = Depends(get_job_lookup),
):
    """Add a candidate and store its matching score against the applied position"""
    return await candidate_service.create_candidate(ctx, payload, lookup)


@router.get("/", response_model=List[CandidateView])
async def list_candidates(
    request: Request,
    search: Optional[str] = Query(None, description="Matches full name or applied position"),
    position: Optional[str] = Query(None, description="Applied position contains"),
    status: Optional[CandidateStatus] = Query(None),
    date_from: Optional[date] = Query(None, description="Created on or after (UTC date)"),
    date_to: Optional[date] = Query(None, description="Created on or before (UTC date)"),
    ctx: SessionContext = Depends(get_session_context),
):
    """List the caller's candidates, newest first"""
    request_id = getattr(request.state, 'request_id', 'unknown')
    filters = CandidateFilters(search=search, position=position, status=status, date_from=date_from, date_to=date_to)

    with PerformanceMonitor("list_candidates", logger):
        candidates = await candidate_service.list_candidates(ctx, filters)

    logger.info(f"Returning {len(candidates)} candidates", extra={"request_id": request_id})
    return [CandidateView.from_candidate(c) for c in candidates]


@router.get("/{candidate_id}", response_model=CandidateView)
async def get_candidate(candidate_id: str, ctx: SessionContext = Depends(get_session_context)):
    return CandidateView.from_candidate(await candidate_service.get_candidate(ctx, candidate_id))


@router.patch("/{candidate_id}/status", response_model=CandidateView)
@log_api_call("update_candidate_status")
async def update_candidate_status(
    candidate_id: str,
    body: StatusUpdate,
    ctx: SessionContext = Depends(get_session_context),
):
    candidate = await candidate_service.update_status(ctx, candidate_id, body.status)
    return CandidateView.from_candidate(candidate)


@router.delete("/{candidate_id}", status_code=http_status.HTTP_204_NO_CONTENT)
@log_api_call("delete_candidate")
async def delete_candidate(candidate_id: str, ctx: SessionContext = Depends(get_session_context)):
    await candidate_service.delete_candidate(ctx, candidate_id)
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)
