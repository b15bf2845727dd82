from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CandidateStatus(str, Enum):
    """Hiring pipeline stages a candidate can be in"""
    NEW = "New"
    SCREENING = "Screening"
    INTERVIEWING = "Interviewing"
    HIRED = "Hired"
    REJECTED = "Rejected"


# -------- Candidates --------
class CandidateModel(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    candidate_id: str
    user_id: str
    full_name: str
    applied_position: Optional[str] = None
    status: CandidateStatus = CandidateStatus.NEW
    resume_url: str
    skills: Optional[List[str]] = None
    # computed once at creation against the best-matching job requirement
    matching_score: Optional[int] = Field(default=None, ge=0, le=100)
    created_at: datetime = Field(default_factory=utcnow)


# -------- Job Requirements --------
class JobRequirementModel(BaseModel):
    job_requirement_id: str
    title: str
    required_skills: List[str] = []
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator('required_skills', mode='before')
    @classmethod
    def null_skills_as_empty(cls, v):
        # documents written by older clients store null instead of []
        return [] if v is None else v


# -------- Auth sessions --------
class AuthSession(BaseModel):
    """Stored bearer-token session issued by the sign-in flow"""
    access_token: str
    user_id: str
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: Optional[datetime] = None


class SessionContext(BaseModel):
    """Explicit per-request identity handed to every handler"""
    user_id: str
    access_token: str
