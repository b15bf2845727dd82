from pydantic import BaseModel, Field
from typing import List


class SkillMatch(BaseModel):
    """Outcome of matching one candidate's skills against a required-skill list"""
    matched: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    match_percentage: int = 0
