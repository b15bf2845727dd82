"""
Scoring Settings for candidate recommendations
"""
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, ValidationInfo

from recruit_tracker.utils.exceptions import ConfigurationError

load_dotenv()


class ScoringSettings(BaseModel):
    """Recommendation scoring constants"""
    recency_max_bonus: float = Field(default=10.0, ge=0.0, le=100.0, description="Bonus for a candidate created right now")
    recency_days_per_point: float = Field(default=7.0, gt=0.0, description="Days of age that cost one bonus point")
    position_bonus: float = Field(default=15.0, ge=0.0, le=100.0, description="Flat bonus when the applied position matches the query")
    default_limit: int = Field(default=3, ge=1, description="Recommendations returned when no limit is given")
    max_limit: int = Field(default=10, ge=1, description="Hard cap on requested recommendations")

    @field_validator('max_limit')
    @classmethod
    def validate_limits(cls, v, info: ValidationInfo):
        default_limit = info.data.get('default_limit')
        if default_limit is not None and default_limit > v:
            raise ValueError('default_limit must not exceed max_limit')
        return v


_ENV_KEYS = {
    "recency_max_bonus": "RECENCY_MAX_BONUS",
    "recency_days_per_point": "RECENCY_DAYS_PER_POINT",
    "position_bonus": "POSITION_BONUS",
    "default_limit": "RECOMMENDATION_DEFAULT_LIMIT",
    "max_limit": "RECOMMENDATION_MAX_LIMIT",
}


def load_scoring_settings() -> ScoringSettings:
    """Build settings from the environment, falling back to defaults for unset keys."""
    values = {field: os.getenv(env) for field, env in _ENV_KEYS.items() if os.getenv(env)}
    try:
        return ScoringSettings(**values)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid scoring configuration: {e}",
            details={"env": {_ENV_KEYS[k]: v for k, v in values.items()}},
            cause=e
        ) from e


@lru_cache
def get_scoring_settings() -> ScoringSettings:
    """FastAPI dependency; settings are read from the environment once per process."""
    return load_scoring_settings()
