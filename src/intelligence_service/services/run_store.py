"""Run store: creates recommendation runs and serves them back unchanged.

A run moves from nonexistent to persisted exactly once. ``create`` scores
the current catalog snapshot and writes one row in one transaction; if the
write fails nothing is visible to ``get``. Retrying ``create`` always makes
a new, independent run.
"""

import asyncio
import hashlib
from datetime import datetime, timezone
from decimal import Decimal

import orjson
import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intelligence_service.errors import NotFoundError, StorageError
from intelligence_service.infrastructure.catalog.client import CatalogSource
from intelligence_service.infrastructure.database.connection import session_scope
from intelligence_service.infrastructure.database.models import IntelligenceRun
from intelligence_service.models import PreferenceQuery, RankedResult, Run
from intelligence_service.services.ranking import recommend
from shared.constants import ALGORITHM_VERSION, DEFAULT_TOP_RESULTS, MAX_TOP_RESULTS

logger = structlog.get_logger()

CENTS = Decimal("0.01")

# Database errors plus connection failures the async drivers raise unwrapped
STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


def query_fingerprint(query: PreferenceQuery, algorithm_version: str) -> str:
    """Stable hash of a normalized query and the formula version that scored it."""
    canonical = orjson.dumps(
        {**query.model_dump(mode="json"), "algorithm_version": algorithm_version},
        option=orjson.OPT_SORT_KEYS,
    )
    return hashlib.sha256(canonical).hexdigest()


def _to_run(row: IntelligenceRun) -> Run:
    created_at = row.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Run(
        run_id=row.id,
        created_at=created_at,
        query=PreferenceQuery(
            intended_use=row.intended_use,
            budget_usd=(Decimal(row.budget_cents) / 100).quantize(CENTS),
            battery_preference=row.battery_preference,
            size_constraint=row.size_constraint,
        ),
        algorithm_version=row.algorithm_version,
        top_results=tuple(orjson.loads(row.top_results)),
    )


class RunStore:
    """Creates and retrieves immutable recommendation runs."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        catalog: CatalogSource,
        default_limit: int = DEFAULT_TOP_RESULTS,
        max_limit: int = MAX_TOP_RESULTS,
        scoring_workers: int = 1,
        algorithm_version: str = ALGORITHM_VERSION,
    ):
        self.session_factory = session_factory
        self.catalog = catalog
        self.default_limit = default_limit
        self.max_limit = min(max_limit, MAX_TOP_RESULTS)
        self.scoring_workers = scoring_workers
        self.algorithm_version = algorithm_version

    async def create(self, query: PreferenceQuery, limit: int | None = None) -> Run:
        """Score the current catalog for ``query`` and persist the ranked result.

        Raises:
            UpstreamUnavailable: the catalog snapshot could not be loaded.
            StorageError: the run could not be written; safe to retry.
        """
        limit = max(1, min(self.max_limit, limit or self.default_limit))
        items = await self.catalog.fetch_catalog()

        if self.scoring_workers > 1:
            top = await asyncio.to_thread(
                recommend, items, query, limit, self.scoring_workers
            )
        else:
            top = recommend(items, query, limit)

        row = IntelligenceRun(
            created_at=datetime.now(timezone.utc).replace(microsecond=0),
            intended_use=query.intended_use.value,
            budget_cents=int(query.budget_usd * 100),
            battery_preference=query.battery_preference.value,
            size_constraint=query.size_constraint.value,
            algorithm_version=self.algorithm_version,
            result_limit=limit,
            query_fingerprint=query_fingerprint(query, self.algorithm_version),
            top_results=orjson.dumps(
                [RankedResult.from_candidate(c).model_dump(mode="json") for c in top]
            ).decode(),
        )

        try:
            async with session_scope(self.session_factory) as session:
                session.add(row)
                await session.flush()
        except STORAGE_ERRORS as e:
            logger.error("Failed to persist intelligence run", error=str(e))
            raise StorageError("intelligence run could not be saved") from e

        run = _to_run(row)
        logger.info(
            "Intelligence run created",
            run_id=run.run_id,
            intended_use=query.intended_use.value,
            candidates=len(items),
            returned=len(run.top_results),
        )
        return run

    async def get(self, run_id: int) -> Run:
        """Return a previously created run exactly as it was stored.

        Raises:
            NotFoundError: no run has this id.
            StorageError: the store could not be read.
        """
        try:
            async with self.session_factory() as session:
                row = await session.get(IntelligenceRun, run_id)
        except STORAGE_ERRORS as e:
            logger.error("Failed to load intelligence run", run_id=run_id, error=str(e))
            raise StorageError("intelligence run could not be loaded") from e

        if row is None:
            raise NotFoundError(f"intelligence run {run_id} not found")
        return _to_run(row)
