import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

from pymongo.errors import DuplicateKeyError

from conftest import NOW, FakeJobLookup, make_candidate, make_requirement, mock_cursor
from recruit_tracker.models.requests import CandidateCreate, CandidateFilters, RecommendationRequest
from recruit_tracker.models.schemas import CandidateStatus
from recruit_tracker.models.scoring_settings import ScoringSettings
from recruit_tracker.services import candidates as service
from recruit_tracker.services.job_lookup import MongoJobRequirementLookup
from recruit_tracker.utils.exceptions import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def _payload(**overrides):
    data = {
        "full_name": "  Jane Doe ",
        "applied_position": " Backend Developer ",
        "resume_url": "https://files.example.com/resumes/jane.pdf",
        "skills": ["React", "Node.js"],
    }
    data.update(overrides)
    return CandidateCreate(**data)


class TestCreateCandidate:
    """Test cases for candidate creation"""

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_stores_matching_score(self, mock_coll, ctx):
        mock_coll.insert_one = AsyncMock()
        lookup = FakeJobLookup([make_requirement()])

        result = await service.create_candidate(ctx, _payload(), lookup, now=NOW)

        assert result.candidate.full_name == "Jane Doe"
        assert result.candidate.applied_position == "Backend Developer"
        assert result.candidate.status == "New"
        assert result.candidate.matching_score == 67
        assert result.matching_info.job_requirement_title == "Backend Developer"
        assert result.matching_info.missing_skills == ["sql"]

        stored = mock_coll.insert_one.call_args[0][0]
        assert stored["user_id"] == "user-1"
        assert stored["matching_score"] == 67
        assert stored["skills"] == ["React", "Node.js"]

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_keeps_given_status(self, mock_coll, ctx):
        mock_coll.insert_one = AsyncMock()

        result = await service.create_candidate(ctx, _payload(status="Screening"), FakeJobLookup(), now=NOW)

        assert result.candidate.status == "Screening"
        assert mock_coll.insert_one.call_args[0][0]["status"] == "Screening"

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_no_skills_scores_zero_and_stores_null(self, mock_coll, ctx):
        mock_coll.insert_one = AsyncMock()
        lookup = FakeJobLookup([make_requirement()])

        result = await service.create_candidate(ctx, _payload(skills=[]), lookup)

        assert result.candidate.matching_score == 0
        assert result.candidate.skills is None
        assert lookup.queries == []

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_unknown_position_scores_zero(self, mock_coll, ctx):
        mock_coll.insert_one = AsyncMock()

        result = await service.create_candidate(ctx, _payload(applied_position="Chef"), FakeJobLookup([make_requirement()]))

        assert result.candidate.matching_score == 0
        assert result.matching_info.job_requirement_title is None

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_lookup_failure_scores_zero(self, mock_coll, ctx):
        mock_coll.insert_one = AsyncMock()
        lookup = FakeJobLookup(error=RuntimeError("connection reset"))

        result = await service.create_candidate(ctx, _payload(), lookup)

        assert result.candidate.matching_score == 0
        mock_coll.insert_one.assert_called_once()

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_requirement_without_skills_scores_zero(self, mock_coll, ctx):
        mock_coll.insert_one = AsyncMock()
        lookup = FakeJobLookup([make_requirement(skills=())])

        result = await service.create_candidate(ctx, _payload(), lookup)

        assert result.candidate.matching_score == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides,field", [
        ({"full_name": "   "}, "full_name"),
        ({"full_name": None}, "full_name"),
        ({"status": "Ghosted"}, "status"),
        ({"resume_url": None}, "resume_url"),
        ({"resume_url": ""}, "resume_url"),
        ({"resume_url": "not a url"}, "resume_url"),
        ({"resume_url": "ftp://files.example.com/cv.pdf"}, "resume_url"),
    ])
    async def test_validation(self, overrides, field, ctx):
        with pytest.raises(ValidationError) as exc_info:
            await service.create_candidate(ctx, _payload(**overrides), FakeJobLookup())

        assert exc_info.value.details["field"] == field

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_duplicate_is_conflict(self, mock_coll, ctx):
        mock_coll.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))

        with pytest.raises(ConflictError):
            await service.create_candidate(ctx, _payload(), FakeJobLookup())


class TestFilterCandidates:
    """Test cases for list filtering"""

    def _candidates(self):
        return [
            make_candidate(name="Alice Nguyen", applied_position="Backend Developer", status="New", age_days=1),
            make_candidate(name="Bob Tran", applied_position="Frontend Developer", status="Screening", age_days=10),
            make_candidate(name="Carol Le", applied_position=None, status="Hired", age_days=40),
        ]

    def test_no_filters_returns_all(self):
        assert len(service.filter_candidates(self._candidates(), CandidateFilters())) == 3

    def test_search_matches_name_or_position(self):
        by_name = service.filter_candidates(self._candidates(), CandidateFilters(search="carol"))
        by_position = service.filter_candidates(self._candidates(), CandidateFilters(search="FRONTEND"))

        assert [c.full_name for c in by_name] == ["Carol Le"]
        assert [c.full_name for c in by_position] == ["Bob Tran"]

    def test_position_and_status(self):
        result = service.filter_candidates(
            self._candidates(),
            CandidateFilters(position="developer", status=CandidateStatus.SCREENING),
        )
        assert [c.full_name for c in result] == ["Bob Tran"]

    def test_date_range_inclusive(self):
        day = (NOW - timedelta(days=10)).date()
        result = service.filter_candidates(self._candidates(), CandidateFilters(date_from=day, date_to=day))
        assert [c.full_name for c in result] == ["Bob Tran"]

    def test_open_ended_date_range(self):
        result = service.filter_candidates(self._candidates(), CandidateFilters(date_to=date(2026, 9, 30)))
        assert [c.full_name for c in result] == ["Carol Le"]


class TestStatusAndDelete:

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_update_status_only_sets_status(self, mock_coll, ctx):
        doc = make_candidate(status="Interviewing", matching_score=67).model_dump()
        mock_coll.find_one_and_update = AsyncMock(return_value=doc)

        result = await service.update_status(ctx, doc["candidate_id"], CandidateStatus.INTERVIEWING)

        assert result.status == "Interviewing"
        assert result.matching_score == 67
        query, update = mock_coll.find_one_and_update.call_args[0]
        assert query == {"candidate_id": doc["candidate_id"], "user_id": "user-1"}
        assert update == {"$set": {"status": "Interviewing"}}

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_update_missing_candidate(self, mock_coll, ctx):
        mock_coll.find_one_and_update = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await service.update_status(ctx, "nope", CandidateStatus.HIRED)

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_delete_missing_candidate(self, mock_coll, ctx):
        mock_coll.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))

        with pytest.raises(NotFoundError):
            await service.delete_candidate(ctx, "nope")

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_get_candidate_scoped_to_owner(self, mock_coll, ctx):
        mock_coll.find_one = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await service.get_candidate(ctx, "cand-1")
        mock_coll.find_one.assert_called_once_with({"candidate_id": "cand-1", "user_id": "user-1"})


class TestRecommend:
    """Test cases for the recommendation flow"""

    def _pool(self):
        return [
            make_candidate(name="Fresh Match", skills=["React", "Node.js"], applied_position="Backend Developer"),
            make_candidate(name="Old Match", skills=["React", "Node", "SQL"], age_days=90),
            make_candidate(name="Nothing", skills=["Figma"], age_days=90),
            make_candidate(name="Empty List", skills=[], age_days=90),
            make_candidate(name="Partial", skills=["PostgreSQL"], age_days=35),
        ]

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_ranks_and_reports_statistics(self, mock_coll, ctx):
        mock_coll.find = MagicMock(return_value=mock_cursor([c.model_dump() for c in self._pool()]))
        lookup = FakeJobLookup([make_requirement()])

        result = await service.recommend(ctx, RecommendationRequest(position="Backend"), lookup, ScoringSettings(), NOW)

        assert [c.full_name for c in result.recommendations] == ["Old Match", "Fresh Match", "Partial"]
        assert result.recommendations[1].recommendation_score == pytest.approx(92)
        assert result.statistics.total_candidates == 5
        assert result.statistics.candidates_with_skills == 4
        # (100 + 67 + 0 + 0 + 33) / 5 = 40
        assert result.statistics.average_match_percentage == 40
        assert result.statistics.job_requirements.total_required_skills == 3
        assert result.job_requirement.title == "Backend Developer"

        query = mock_coll.find.call_args[0][0]
        assert query == {"user_id": "user-1", "skills": {"$ne": None}}

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_explicit_limit(self, mock_coll, ctx):
        mock_coll.find = MagicMock(return_value=mock_cursor([c.model_dump() for c in self._pool()]))

        result = await service.recommend(
            ctx, RecommendationRequest(position="Backend", limit=10), FakeJobLookup([make_requirement()]), ScoringSettings(), NOW
        )

        assert len(result.recommendations) == 5

    @pytest.mark.asyncio
    async def test_limit_above_cap_rejected(self, ctx):
        with pytest.raises(ValidationError) as exc_info:
            await service.recommend(ctx, RecommendationRequest(position="Backend", limit=11), FakeJobLookup(), ScoringSettings(), NOW)
        assert "Limit cannot exceed 10" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_blank_position_rejected(self, ctx):
        with pytest.raises(ValidationError):
            await service.recommend(ctx, RecommendationRequest(position="  "), FakeJobLookup(), ScoringSettings(), NOW)

    @pytest.mark.asyncio
    async def test_no_job_requirement(self, ctx):
        with pytest.raises(NotFoundError):
            await service.recommend(ctx, RecommendationRequest(position="Chef"), FakeJobLookup([make_requirement()]), ScoringSettings(), NOW)

    @pytest.mark.asyncio
    async def test_job_without_required_skills(self, ctx):
        lookup = FakeJobLookup([make_requirement(skills=())])
        with pytest.raises(BusinessLogicError):
            await service.recommend(ctx, RecommendationRequest(position="Backend"), lookup, ScoringSettings(), NOW)

    @pytest.mark.asyncio
    async def test_stored_null_required_skills(self, ctx):
        coll = MagicMock()
        coll.find_one = AsyncMock(return_value={
            "_id": "x",
            "job_requirement_id": "job-1",
            "title": "Backend Developer",
            "required_skills": None,
        })

        with pytest.raises(BusinessLogicError) as exc_info:
            await service.recommend(
                ctx, RecommendationRequest(position="Backend"), MongoJobRequirementLookup(coll), ScoringSettings(), NOW
            )
        assert exc_info.value.message == "Job requirement has no required skills defined"

    @pytest.mark.asyncio
    @patch('recruit_tracker.services.candidates.candidates_coll')
    async def test_no_candidates_with_skills(self, mock_coll, ctx):
        mock_coll.find = MagicMock(return_value=mock_cursor([]))

        with pytest.raises(NotFoundError) as exc_info:
            await service.recommend(ctx, RecommendationRequest(position="Backend"), FakeJobLookup([make_requirement()]), ScoringSettings(), NOW)
        assert exc_info.value.message == "No candidates with skills found"
