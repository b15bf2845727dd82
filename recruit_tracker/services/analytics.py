"""
Dashboard analytics over a recruiter's candidates.
"""
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Sequence

from recruit_tracker.models.response import (
    AnalyticsReport,
    AnalyticsSummary,
    CandidateView,
    PositionCount,
    StatusRatio,
    WeeklyStat,
)
from recruit_tracker.models.schemas import CandidateModel

RECENT_DAYS = 7
RECENT_LIMIT = 50
TOP_POSITIONS = 3
WEEKS_SHOWN = 8
UNKNOWN = "Unknown"


def _utc(ts: datetime) -> datetime:
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)


def _ratio(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


def week_number(ts: datetime) -> int:
    """Week of the year counted from Jan 1, shifted by the weekday Jan 1 falls on (Sunday = 0)."""
    ts = _utc(ts)
    jan1 = datetime(ts.year, 1, 1, tzinfo=timezone.utc)
    past_days = (ts - jan1).total_seconds() / 86400
    jan1_weekday = (jan1.weekday() + 1) % 7
    return math.ceil((past_days + jan1_weekday + 1) / 7)


def week_key(ts: datetime) -> str:
    return f"{_utc(ts).year}-W{week_number(ts):02d}"


def weekly_stats(candidates: Sequence[CandidateModel], weeks: int = WEEKS_SHOWN) -> List[WeeklyStat]:
    buckets: Dict[str, Dict] = {}
    for c in candidates:
        bucket = buckets.setdefault(week_key(c.created_at), {"total": 0, "statuses": Counter()})
        bucket["total"] += 1
        bucket["statuses"][c.status or UNKNOWN] += 1

    newest_first = sorted(buckets.items(), key=lambda kv: kv[0], reverse=True)[:weeks]
    return [WeeklyStat(week=k, total=v["total"], statuses=dict(v["statuses"])) for k, v in newest_first]


def status_ratio(candidates: Sequence[CandidateModel], total: int) -> List[StatusRatio]:
    counts = Counter(c.status or UNKNOWN for c in candidates)
    return [StatusRatio(status=s, count=n, ratio=_ratio(n, total)) for s, n in counts.items()]


def top_positions(candidates: Sequence[CandidateModel], total: int, limit: int = TOP_POSITIONS) -> List[PositionCount]:
    counts = Counter(c.applied_position for c in candidates if c.applied_position)
    # stable sort: equal counts keep first-seen order
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return [PositionCount(position=p, count=n, ratio=_ratio(n, total)) for p, n in ranked]


def dominant_status(ratios: Sequence[StatusRatio]) -> str:
    if not ratios:
        return "N/A"
    best = ratios[0]
    for r in ratios[1:]:
        # a later status wins ties
        if not best.count > r.count:
            best = r
    return best.status


def build_analytics(candidates: Sequence[CandidateModel], now: datetime) -> AnalyticsReport:
    total = len(candidates)
    cutoff = _utc(now) - timedelta(days=RECENT_DAYS)

    recent = sorted(
        (c for c in candidates if _utc(c.created_at) >= cutoff),
        key=lambda c: _utc(c.created_at),
        reverse=True,
    )[:RECENT_LIMIT]

    ratios = status_ratio(candidates, total)
    positions = top_positions(candidates, total)

    return AnalyticsReport(
        total_count=total,
        status_ratio=ratios,
        top_positions=positions,
        recent_candidates=[CandidateView.from_candidate(c) for c in recent],
        weekly_stats=weekly_stats(candidates),
        summary=AnalyticsSummary(
            new_this_week=len(recent),
            top_position=positions[0].position if positions else "N/A",
            dominant_status=dominant_status(ratios),
        ),
    )
