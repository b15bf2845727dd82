import os

# Must be set before the app (and its logging config) is imported
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from recruit_tracker.models.schemas import CandidateModel, JobRequirementModel, SessionContext

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


class FakeJobLookup:
    """In-memory stand-in for the fuzzy job-requirement lookup"""

    def __init__(self, requirements=None, error: Exception = None):
        self.requirements = requirements or []
        self.error = error
        self.queries = []

    async def find_requirement_by_title(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        q = query.lower()
        for req in self.requirements:
            if q in req.title.lower():
                return req
        return None


def make_candidate(name="Jane Doe", skills=None, applied_position=None, status="New",
                   age_days=0.0, user_id="user-1", **kwargs) -> CandidateModel:
    return CandidateModel(
        candidate_id=kwargs.pop("candidate_id", f"cand-{name.lower().replace(' ', '-')}"),
        user_id=user_id,
        full_name=name,
        applied_position=applied_position,
        status=status,
        resume_url="https://files.example.com/resumes/cv.pdf",
        skills=skills,
        matching_score=kwargs.pop("matching_score", 0),
        created_at=NOW - timedelta(days=age_days),
        **kwargs
    )


def make_requirement(title="Backend Developer", skills=("react", "Node", "SQL")) -> JobRequirementModel:
    return JobRequirementModel(
        job_requirement_id=f"job-{title.lower().replace(' ', '-')}",
        title=title,
        required_skills=list(skills),
        created_at=NOW,
    )


def mock_cursor(docs):
    """Motor cursor supporting .sort(...).to_list(...)"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[dict(d) for d in docs])
    return cursor


@pytest.fixture
def ctx():
    return SessionContext(user_id="user-1", access_token="token-abc")


@pytest.fixture
def now():
    return NOW
