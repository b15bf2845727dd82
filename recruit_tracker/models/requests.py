from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date

from recruit_tracker.models.schemas import CandidateStatus

# Input schemas for the candidate and recommendation endpoints


class CandidateCreate(BaseModel):
    """Payload submitted when a recruiter adds a candidate.

    Name, URL and status are checked by the candidate service so that bad
    values come back as 400 with a readable message.
    """
    full_name: Optional[str] = None
    applied_position: Optional[str] = None
    status: Optional[str] = None
    resume_url: Optional[str] = None
    skills: Optional[List[str]] = None


class StatusUpdate(BaseModel):
    status: CandidateStatus


class RecommendationRequest(BaseModel):
    position: str = Field(..., description="Target position name")
    limit: Optional[int] = Field(default=None, ge=1, description="Number of candidates to return")


class CandidateFilters(BaseModel):
    """Filters applied to the candidate list"""
    search: Optional[str] = None  # full name or applied position
    position: Optional[str] = None
    status: Optional[CandidateStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class JobRequirementCreate(BaseModel):
    title: str = Field(..., min_length=1)
    required_skills: List[str] = Field(default_factory=list)
