"""
Candidate scoring and ranking against a job requirement.

Everything here is pure and synchronous: no I/O, no shared state. Callers
validate their input (positive limit, real timestamps) before calling in.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from recruit_tracker.models.response import ScoredCandidate
from recruit_tracker.models.schemas import CandidateModel
from recruit_tracker.models.scoring_settings import ScoringSettings
from recruit_tracker.services.matching import match_skills

DEFAULT_SETTINGS = ScoringSettings()

# Not applied. Kept as an extension point for status-aware ranking.
STATUS_BONUS: Dict[str, float] = {
    "New": 10,
    "Screening": 5,
    "Interviewing": 0,
    "Hired": -20,
    "Rejected": -50,
}


def _as_utc(ts: datetime) -> datetime:
    # Mongo hands back naive datetimes that are already UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def recency_bonus(created_at: datetime, now: datetime, settings: ScoringSettings = DEFAULT_SETTINGS) -> float:
    """Linear decay from ``recency_max_bonus`` to 0, one point per ``recency_days_per_point`` days."""
    age_days = (_as_utc(now) - _as_utc(created_at)).total_seconds() / 86400
    age_days = max(0.0, age_days)  # clock skew must not push the bonus above its max
    return max(0.0, settings.recency_max_bonus - age_days / settings.recency_days_per_point)


def position_bonus(applied_position: Optional[str], position_query: str,
                   settings: ScoringSettings = DEFAULT_SETTINGS) -> float:
    if applied_position and position_query.lower() in applied_position.lower():
        return settings.position_bonus
    return 0.0


def score_for_posting(
    candidate: CandidateModel,
    required_skills: Sequence[str],
    position_query: str,
    now: datetime,
    settings: ScoringSettings = DEFAULT_SETTINGS,
) -> ScoredCandidate:
    match = match_skills(candidate.skills or [], required_skills)

    total = float(match.match_percentage)
    total += recency_bonus(candidate.created_at, now, settings)
    total += position_bonus(candidate.applied_position, position_query, settings)

    return ScoredCandidate(
        **candidate.model_dump(),
        recommendation_score=clamp(total),
        matched_skills=match.matched,
        missing_skills=match.missing,
        match_percentage=match.match_percentage,
    )


def rank_candidates(
    candidates: Sequence[CandidateModel],
    required_skills: Sequence[str],
    position_query: str,
    limit: int,
    now: datetime,
    settings: ScoringSettings = DEFAULT_SETTINGS,
) -> List[ScoredCandidate]:
    """Score every candidate and return the top ``limit``, best first.

    Equal scores keep their input order.
    """
    if limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit}")
    scored = [score_for_posting(c, required_skills, position_query, now, settings) for c in candidates]
    # list.sort is stable, including with reverse=True
    scored.sort(key=lambda s: s.recommendation_score, reverse=True)
    return scored[:limit]


def initial_matching_score(skills: Optional[Sequence[str]], required_skills: Optional[Sequence[str]]) -> int:
    """Score stored on a new candidate: plain match percentage, 0 without skills or requirements."""
    if not skills or not required_skills:
        return 0
    return match_skills(skills, required_skills).match_percentage
