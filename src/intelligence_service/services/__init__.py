"""Business logic services."""

from intelligence_service.services.preferences import normalize_preferences
from intelligence_service.services.ranking import (
    aggregate,
    rank_candidates,
    recommend,
    score_catalog,
)
from intelligence_service.services.run_store import RunStore

__all__ = [
    "RunStore",
    "aggregate",
    "normalize_preferences",
    "rank_candidates",
    "recommend",
    "score_catalog",
]
