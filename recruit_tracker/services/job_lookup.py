"""
Job-requirement resolution by fuzzy title.
"""
import re
from typing import List, Optional, Protocol

from recruit_tracker.models.schemas import JobRequirementModel
from recruit_tracker.services.db import job_requirements_coll, to_dict
from recruit_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)


class JobRequirementLookup(Protocol):
    async def find_requirement_by_title(self, query: str) -> Optional[JobRequirementModel]:
        ...


def title_patterns(query: str) -> List[str]:
    """Regexes tried against job titles: the whole query, then its words in order with anything between."""
    words = [re.escape(w) for w in query.split()]
    if not words:
        return []
    patterns = [re.escape(query.strip())]
    joined = ".*".join(words)
    if joined not in patterns:
        patterns.append(joined)
    return patterns


class MongoJobRequirementLookup:
    """Looks up at most one job requirement whose title loosely matches the query"""

    def __init__(self, collection=None):
        self.collection = collection if collection is not None else job_requirements_coll

    async def find_requirement_by_title(self, query: str) -> Optional[JobRequirementModel]:
        patterns = title_patterns(query or "")
        if not patterns:
            return None

        doc = await self.collection.find_one(
            {"$or": [{"title": {"$regex": p, "$options": "i"}} for p in patterns]}
        )
        if not doc:
            logger.debug(f"No job requirement matched title query '{query}'")
            return None

        requirement = JobRequirementModel(**to_dict(doc))
        logger.debug(f"Resolved '{query}' to job requirement {requirement.job_requirement_id} ({requirement.title})")
        return requirement


def get_job_lookup() -> JobRequirementLookup:
    """FastAPI dependency; tests override it with in-memory fixtures."""
    return MongoJobRequirementLookup()
