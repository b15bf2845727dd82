from fastapi import APIRouter, Depends

from recruit_tracker.models.requests import RecommendationRequest
from recruit_tracker.models.response import RecommendationResponse
from recruit_tracker.models.schemas import SessionContext
from recruit_tracker.models.scoring_settings import ScoringSettings, get_scoring_settings
from recruit_tracker.services import candidates as candidate_service
from recruit_tracker.services.job_lookup import JobRequirementLookup, get_job_lookup
from recruit_tracker.services.session_manager import get_session_context
from recruit_tracker.utils.logging_config import log_api_call

router = APIRouter()


@router.post("/", response_model=RecommendationResponse)
@log_api_call("recommend_candidates")
async def recommend_candidates(
    body: RecommendationRequest,
    ctx: SessionContext = Depends(get_session_context),
    lookup: JobRequirementLookup = Depends(get_job_lookup),
    settings: ScoringSettings = Depends(get_scoring_settings),
):
    """Rank the caller's candidates that have skills against the job matching `position`"""
    return await candidate_service.recommend(ctx, body, lookup, settings)
