"""Weighted aggregation and ranking of scored candidates."""

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

import structlog

from intelligence_service.models import CatalogItem, PreferenceQuery, ScoredCandidate
from intelligence_service.services.scorers import (
    battery_match_score,
    budget_score,
    size_fit_score,
    use_case_score,
)
from shared.constants import DEFAULT_TOP_RESULTS, DIMENSION_WEIGHTS, MAX_TOP_RESULTS

logger = structlog.get_logger()

USE_CASE_WEIGHT = DIMENSION_WEIGHTS["use_case"]
BUDGET_WEIGHT = DIMENSION_WEIGHTS["budget"]
BATTERY_WEIGHT = DIMENSION_WEIGHTS["battery"]
SIZE_WEIGHT = DIMENSION_WEIGHTS["size"]


def round1(value: float) -> float:
    return round(value, 1)


def aggregate(use_case: float, budget: float, battery: float, size: float) -> float:
    """Combine the four dimension scores into the overall score."""
    return (
        USE_CASE_WEIGHT * use_case
        + BUDGET_WEIGHT * budget
        + BATTERY_WEIGHT * battery
        + SIZE_WEIGHT * size
    )


def score_candidate(item: CatalogItem, query: PreferenceQuery) -> ScoredCandidate:
    use = use_case_score(item, query)
    budget = budget_score(item, query)
    battery = battery_match_score(item, query)
    size = size_fit_score(item, query)
    return ScoredCandidate(
        item=item,
        use_case_score=round1(use),
        budget_score=round1(budget),
        battery_match_score=round1(battery),
        size_fit_score=round1(size),
        overall_score=round1(aggregate(use, budget, battery, size)),
    )


def score_catalog(
    items: Sequence[CatalogItem],
    query: PreferenceQuery,
    max_workers: int = 1,
) -> list[ScoredCandidate]:
    """Score every catalog item against the query.

    Items are independent, so with ``max_workers > 1`` they are scored on a
    thread pool; the call returns only once every item has a score.
    """
    if max_workers <= 1 or len(items) < 2:
        return [score_candidate(item, query) for item in items]

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda item: score_candidate(item, query), items))


def rank_candidates(
    candidates: Iterable[ScoredCandidate],
    limit: int = DEFAULT_TOP_RESULTS,
) -> list[ScoredCandidate]:
    """Order by overall score descending, ties by ascending item id, then truncate."""
    limit = max(1, min(MAX_TOP_RESULTS, limit))
    ordered = sorted(candidates, key=lambda c: (-c.overall_score, c.item_id))
    return ordered[:limit]


def recommend(
    items: Sequence[CatalogItem],
    query: PreferenceQuery,
    limit: int = DEFAULT_TOP_RESULTS,
    max_workers: int = 1,
) -> list[ScoredCandidate]:
    """Score the whole catalog and return the top ``limit`` candidates."""
    scored = score_catalog(items, query, max_workers=max_workers)
    top = rank_candidates(scored, limit)
    logger.debug(
        "Catalog ranked",
        intended_use=query.intended_use.value,
        candidates=len(scored),
        returned=len(top),
    )
    return top
