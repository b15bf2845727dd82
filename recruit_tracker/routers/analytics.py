from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from recruit_tracker.models.response import AnalyticsReport
from recruit_tracker.models.schemas import SessionContext
from recruit_tracker.services.analytics import build_analytics
from recruit_tracker.services.candidates import fetch_candidates
from recruit_tracker.services.session_manager import get_session_context
from recruit_tracker.utils.logging_config import get_logger, PerformanceMonitor

router = APIRouter()
logger = get_logger(__name__)


@router.get("/", response_model=AnalyticsReport)
async def get_analytics(ctx: SessionContext = Depends(get_session_context)):
    """Status mix, top positions, weekly intake and recent candidates"""
    with PerformanceMonitor("build_analytics", logger):
        candidates = await fetch_candidates(ctx.user_id)
        return build_analytics(candidates, datetime.now(timezone.utc))
