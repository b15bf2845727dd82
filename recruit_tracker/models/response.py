# models/response.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

from recruit_tracker.models.schemas import CandidateModel, CandidateStatus


class CandidateView(BaseModel):
    """Candidate as returned to its owner; the owning user_id stays server-side"""
    model_config = ConfigDict(use_enum_values=True)

    candidate_id: str
    full_name: str
    applied_position: Optional[str] = None
    status: CandidateStatus
    resume_url: str
    skills: Optional[List[str]] = None
    matching_score: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_candidate(cls, candidate: CandidateModel) -> "CandidateView":
        return cls(**candidate.model_dump())


class MatchingInfo(BaseModel):
    score: int
    job_requirement_title: Optional[str] = None
    matched_skills: List[str] = []
    missing_skills: List[str] = []


class CandidateCreateResponse(BaseModel):
    candidate: CandidateView
    matching_info: MatchingInfo


class ScoredCandidate(CandidateView):
    """Candidate projected against one job requirement; never persisted"""
    recommendation_score: float = Field(ge=0, le=100)
    matched_skills: List[str]
    missing_skills: List[str]
    match_percentage: int = Field(ge=0, le=100)


class JobRequirementSummary(BaseModel):
    title: str
    required_skills: List[str]
    total_required_skills: int


class RecommendationStatistics(BaseModel):
    total_candidates: int
    candidates_with_skills: int
    average_match_percentage: int
    job_requirements: JobRequirementSummary


class JobRequirementRef(BaseModel):
    job_requirement_id: str
    title: str
    required_skills: List[str]


class RecommendationResponse(BaseModel):
    recommendations: List[ScoredCandidate]
    statistics: RecommendationStatistics
    job_requirement: JobRequirementRef


# -------- Analytics --------
class StatusRatio(BaseModel):
    status: str
    count: int
    ratio: float


class PositionCount(BaseModel):
    position: str
    count: int
    ratio: float


class WeeklyStat(BaseModel):
    week: str
    total: int
    statuses: Dict[str, int]


class AnalyticsSummary(BaseModel):
    new_this_week: int
    top_position: str
    dominant_status: str


class AnalyticsReport(BaseModel):
    total_count: int
    status_ratio: List[StatusRatio]
    top_positions: List[PositionCount]
    recent_candidates: List[CandidateView]
    weekly_stats: List[WeeklyStat]
    summary: AnalyticsSummary
