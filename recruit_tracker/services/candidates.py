"""
Candidate Service: creation with initial matching score, listing/filtering,
status transitions, deletion and recommendations.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from recruit_tracker.models.requests import (
    CandidateCreate,
    CandidateFilters,
    RecommendationRequest,
)
from recruit_tracker.models.response import (
    CandidateCreateResponse,
    CandidateView,
    JobRequirementRef,
    JobRequirementSummary,
    MatchingInfo,
    RecommendationResponse,
    RecommendationStatistics,
)
from recruit_tracker.models.schemas import CandidateModel, CandidateStatus, SessionContext
from recruit_tracker.models.scoring_settings import ScoringSettings
from recruit_tracker.services.db import candidates_coll, to_dict
from recruit_tracker.services.job_lookup import JobRequirementLookup
from recruit_tracker.services.matching import match_skills, round_half_up
from recruit_tracker.services.scoring import initial_matching_score, rank_candidates
from recruit_tracker.utils.exceptions import (
    BusinessLogicError,
    ConflictError,
    ExceptionContext,
    NotFoundError,
    ValidationError,
)
from recruit_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_resume_url(resume_url: Optional[str]) -> str:
    resume_url = (resume_url or "").strip()
    if not resume_url:
        raise ValidationError("resume_url is required and must be a string", field="resume_url")
    try:
        _HTTP_URL.validate_python(resume_url)
    except PydanticValidationError as e:
        raise ValidationError("resume_url must be a valid URL", field="resume_url", value=resume_url, cause=e) from e
    return resume_url


def validate_status(status: Optional[str]) -> CandidateStatus:
    if not status:
        return CandidateStatus.NEW
    try:
        return CandidateStatus(status)
    except ValueError as e:
        allowed = ", ".join(s.value for s in CandidateStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}", field="status", value=status) from e


async def compute_matching_info(
    applied_position: Optional[str],
    skills: Sequence[str],
    lookup: JobRequirementLookup,
) -> MatchingInfo:
    """Creation-time score. Never raises: any lookup problem leaves the score at 0."""
    if not applied_position or not skills:
        return MatchingInfo(score=0)

    try:
        job = await lookup.find_requirement_by_title(applied_position)
    except Exception as e:
        logger.error(f"Job requirement lookup failed for '{applied_position}', storing score 0: {e}", exc_info=True)
        return MatchingInfo(score=0)

    if job is None:
        logger.info(f"No job requirement found for '{applied_position}', storing score 0")
        return MatchingInfo(score=0)
    if not job.required_skills:
        logger.warning(f"Job requirement {job.job_requirement_id} has no required skills, storing score 0")
        return MatchingInfo(score=0, job_requirement_title=job.title)

    match = match_skills(skills, job.required_skills)
    return MatchingInfo(
        score=initial_matching_score(skills, job.required_skills),
        job_requirement_title=job.title,
        matched_skills=match.matched,
        missing_skills=match.missing,
    )


async def create_candidate(
    ctx: SessionContext,
    payload: CandidateCreate,
    lookup: JobRequirementLookup,
    now: datetime = None,
) -> CandidateCreateResponse:
    full_name = (payload.full_name or "").strip()
    if not full_name:
        raise ValidationError("full_name is required and must be a non-empty string", field="full_name")
    resume_url = validate_resume_url(payload.resume_url)
    status = validate_status(payload.status)

    skills = list(payload.skills or [])
    applied_position = (payload.applied_position or "").strip() or None

    matching_info = await compute_matching_info(applied_position, skills, lookup)

    candidate = CandidateModel(
        candidate_id=str(uuid.uuid4()),
        user_id=ctx.user_id,
        full_name=full_name,
        applied_position=applied_position,
        status=status,
        resume_url=resume_url,
        skills=skills or None,
        matching_score=matching_info.score,
        created_at=now or _utcnow(),
    )

    with ExceptionContext("insert_candidate", logger, user_id=ctx.user_id):
        try:
            await candidates_coll.insert_one(candidate.model_dump())
        except DuplicateKeyError as e:
            raise ConflictError(
                "Candidate with these details already exists",
                resource="candidates",
                cause=e
            ) from e

    logger.info(
        f"Created candidate {candidate.candidate_id} for user {ctx.user_id} "
        f"with matching score {candidate.matching_score}"
    )
    return CandidateCreateResponse(candidate=CandidateView.from_candidate(candidate), matching_info=matching_info)


def filter_candidates(candidates: Sequence[CandidateModel], filters: CandidateFilters) -> List[CandidateModel]:
    search = (filters.search or "").lower()
    position = (filters.position or "").lower()
    status = filters.status.value if filters.status else None

    out = []
    for c in candidates:
        applied = (c.applied_position or "").lower()
        if search and search not in c.full_name.lower() and search not in applied:
            continue
        if position and position not in applied:
            continue
        if status and c.status != status:
            continue
        created = c.created_at.astimezone(timezone.utc).date() if c.created_at.tzinfo else c.created_at.date()
        if filters.date_from and created < filters.date_from:
            continue
        if filters.date_to and created > filters.date_to:
            continue
        out.append(c)
    return out


async def fetch_candidates(user_id: str, with_skills_only: bool = False) -> List[CandidateModel]:
    query = {"user_id": user_id}
    if with_skills_only:
        query["skills"] = {"$ne": None}

    with ExceptionContext("fetch_candidates", logger, user_id=user_id):
        cursor = candidates_coll.find(query).sort("created_at", DESCENDING)
        docs = await cursor.to_list(length=None)

    return [CandidateModel(**to_dict(d)) for d in docs]


async def list_candidates(ctx: SessionContext, filters: CandidateFilters) -> List[CandidateModel]:
    candidates = await fetch_candidates(ctx.user_id)
    filtered = filter_candidates(candidates, filters)
    logger.debug(f"Listing {len(filtered)} of {len(candidates)} candidates for user {ctx.user_id}")
    return filtered


async def get_candidate(ctx: SessionContext, candidate_id: str) -> CandidateModel:
    with ExceptionContext("get_candidate", logger, candidate_id=candidate_id):
        doc = await candidates_coll.find_one({"candidate_id": candidate_id, "user_id": ctx.user_id})
    if not doc:
        raise NotFoundError("Candidate not found", resource="candidates", resource_id=candidate_id)
    return CandidateModel(**to_dict(doc))


async def update_status(ctx: SessionContext, candidate_id: str, status: CandidateStatus) -> CandidateModel:
    # only the status changes; matching_score stays as computed at creation
    with ExceptionContext("update_candidate_status", logger, candidate_id=candidate_id):
        doc = await candidates_coll.find_one_and_update(
            {"candidate_id": candidate_id, "user_id": ctx.user_id},
            {"$set": {"status": CandidateStatus(status).value}},
            return_document=ReturnDocument.AFTER,
        )
    if not doc:
        raise NotFoundError("Candidate not found", resource="candidates", resource_id=candidate_id)

    logger.info(f"Candidate {candidate_id} moved to status {CandidateStatus(status).value}")
    return CandidateModel(**to_dict(doc))


async def delete_candidate(ctx: SessionContext, candidate_id: str) -> None:
    with ExceptionContext("delete_candidate", logger, candidate_id=candidate_id):
        result = await candidates_coll.delete_one({"candidate_id": candidate_id, "user_id": ctx.user_id})
    if result.deleted_count == 0:
        raise NotFoundError("Candidate not found", resource="candidates", resource_id=candidate_id)
    logger.info(f"Deleted candidate {candidate_id}")


async def recommend(
    ctx: SessionContext,
    request: RecommendationRequest,
    lookup: JobRequirementLookup,
    settings: ScoringSettings,
    now: datetime = None,
) -> RecommendationResponse:
    position = (request.position or "").strip()
    if not position:
        raise ValidationError("Position is required", field="position")

    limit = request.limit if request.limit is not None else settings.default_limit
    if limit > settings.max_limit:
        raise ValidationError(f"Limit cannot exceed {settings.max_limit}", field="limit", value=limit)

    with ExceptionContext("find_job_requirement", logger, position=position):
        job = await lookup.find_requirement_by_title(position)
    if job is None:
        raise NotFoundError("No job requirements found for this position", resource="job_requirements")

    required_skills = job.required_skills or []
    if not required_skills:
        raise BusinessLogicError(
            "Job requirement has no required skills defined",
            rule="required_skills_not_empty",
            details={"job_requirement_id": job.job_requirement_id}
        )

    candidates = await fetch_candidates(ctx.user_id, with_skills_only=True)
    if not candidates:
        raise NotFoundError("No candidates with skills found", resource="candidates")

    # rank the whole set once; statistics cover everyone, not just the returned slice
    ranked = rank_candidates(candidates, required_skills, position, len(candidates), now or _utcnow(), settings)

    statistics = RecommendationStatistics(
        total_candidates=len(candidates),
        candidates_with_skills=sum(1 for c in candidates if c.skills),
        average_match_percentage=round_half_up(sum(s.match_percentage for s in ranked) / len(ranked)),
        job_requirements=JobRequirementSummary(
            title=job.title,
            required_skills=required_skills,
            total_required_skills=len(required_skills),
        ),
    )

    logger.info(
        f"Recommended {min(limit, len(ranked))} of {len(ranked)} candidates for '{position}' "
        f"(job requirement {job.job_requirement_id})"
    )

    return RecommendationResponse(
        recommendations=ranked[:limit],
        statistics=statistics,
        job_requirement=JobRequirementRef(
            job_requirement_id=job.job_requirement_id,
            title=job.title,
            required_skills=required_skills,
        ),
    )
