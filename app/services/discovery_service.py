"""
Swipematch — Discovery pipeline.

  1. Resolve the requester's location (missing requester is fatal).
  2. Fetch candidates through the candidate filter.
  3. Rank them with the attractiveness ranker.

Storage failures propagate as ``StorageError``; nothing is retried here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app import repo
from app.services.candidate_service import DiscoveryFilters
from app.services.ranking_service import AttractivenessRanker, Candidate
from app.utils.dates import utc_now

logger = structlog.get_logger("swipematch.discovery_service")


class DiscoveryService:
    """Orchestrates candidate filtering and ranking for one requester.

    Parameters
    ----------
    ranker:
        Ranker used to score candidates.  Defaults to one configured from
        settings.
    now_provider:
        Clock used for age calculation when ``discover`` is not given an
        explicit ``now``.
    """

    def __init__(
        self,
        ranker: AttractivenessRanker | None = None,
        now_provider: Callable[[], datetime] = utc_now,
    ) -> None:
        self.ranker = ranker or AttractivenessRanker()
        self.now_provider = now_provider

    async def discover(
        self,
        db: AsyncSession,
        requester_id: int,
        filters: DiscoveryFilters | None = None,
        now: datetime | None = None,
    ) -> list[Candidate]:
        filters = filters or DiscoveryFilters()
        now = now or self.now_provider()

        log = logger.bind(requester_id=requester_id, age=filters.age, gender=filters.gender)
        log.info("discover_start")

        origin = await repo.fetch_requester_location(db, requester_id)
        rows = await repo.fetch_candidates(db, requester_id, filters, now)
        ranked = self.ranker.rank(rows, origin, now)

        log.info(
            "discover_complete",
            candidate_count=len(ranked),
            has_location=origin is not None,
        )
        return ranked
