import math
from typing import Iterable, List, Sequence

from recruit_tracker.models.models import SkillMatch


def normalize_skill(skill: str) -> str:
    return skill.strip().lower()


def covers(candidate_skill: str, required_skill: str) -> bool:
    """Substring containment in either direction, on normalized labels.

    Deliberately loose: "react" covers "react.js", and "java" also covers
    "javascript". Rankings depend on this behaviour, so do not tighten it.
    """
    c = normalize_skill(candidate_skill)
    r = normalize_skill(required_skill)
    return r in c or c in r


def round_half_up(x: float) -> int:
    # round() is banker's rounding; percentages round .5 upward
    return int(math.floor(x + 0.5))


def match_percentage(matched_count: int, required_count: int) -> int:
    if required_count <= 0:
        return 0
    return round_half_up(matched_count / required_count * 100)


def match_skills(candidate_skills: Iterable[str], required_skills: Sequence[str]) -> SkillMatch:
    """Split the normalized required skills into matched and missing.

    Output keeps the order (and any duplicates) of ``required_skills``.
    """
    cand = [normalize_skill(s) for s in candidate_skills or []]
    matched: List[str] = []
    missing: List[str] = []
    for req in required_skills or []:
        r = normalize_skill(req)
        if any(covers(c, r) for c in cand):
            matched.append(r)
        else:
            missing.append(r)
    return SkillMatch(
        matched=matched,
        missing=missing,
        match_percentage=match_percentage(len(matched), len(matched) + len(missing)),
    )
