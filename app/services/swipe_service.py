"""
Swipematch — Swipe recording and match resolution.

Per unordered pair {A, B} the resolver moves through:

  NoSwipe       neither side has liked the other
  OneSidedLike  exactly one direction has a liked swipe; no match
  Matched       both directions liked; exactly one canonical match row

A swipe is committed first, in its own transaction, so that resolution
observes it.  Resolution then canonicalizes the pair (``low < high``), returns
an existing match if there is one, and otherwise creates the match through
the storage layer's insert-if-absent operation when both sides have liked.
Concurrent mutual likes therefore converge on one row and one id.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app import repo
from app.models.match import Swipe

logger = structlog.get_logger("swipematch.swipe_service")


@dataclass(frozen=True)
class MatchResolution:
    matched: bool
    match_id: int | None = None


def canonical_pair(user_a: int, user_b: int) -> tuple[int, int]:
    """Return ``(low, high)`` for an unordered pair of user ids."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


class SwipeRecorder:
    """Appends immutable swipe rows.

    Self-swipes and repeat swipes are accepted as-is; discovery is what keeps
    already-swiped profiles out of the feed.
    """

    async def record_swipe(
        self,
        db: AsyncSession,
        swiper_id: int,
        target_id: int,
        liked: bool,
    ) -> Swipe:
        swipe = await repo.insert_swipe(db, swiper_id, target_id, liked)
        logger.info(
            "swipe_recorded",
            swipe_id=swipe.id,
            swiper_id=swiper_id,
            target_id=target_id,
            liked=liked,
        )
        return swipe


class MatchResolver:
    """Finds or creates the canonical match for a pair of users."""

    async def resolve_match(
        self,
        db: AsyncSession,
        user_a: int,
        user_b: int,
        create: bool = True,
    ) -> MatchResolution:
        low, high = canonical_pair(user_a, user_b)
        log = logger.bind(user_low=low, user_high=high)

        if low == high:
            log.info("match_resolution_self_pair")
            return MatchResolution(matched=False)

        existing = await repo.find_canonical_match(db, low, high)
        if existing is not None:
            log.info("match_already_exists", match_id=existing.id)
            return MatchResolution(matched=True, match_id=existing.id)

        if not create or not await repo.has_mutual_like(db, low, high):
            log.info("match_not_mutual")
            return MatchResolution(matched=False)

        match = await repo.insert_match_if_absent(db, low, high)
        log.info("mutual_match_resolved", match_id=match.id)
        return MatchResolution(matched=True, match_id=match.id)


class SwipeService:
    """Records a swipe and reports whether it completed a match."""

    def __init__(
        self,
        recorder: SwipeRecorder | None = None,
        resolver: MatchResolver | None = None,
    ) -> None:
        self.recorder = recorder or SwipeRecorder()
        self.resolver = resolver or MatchResolver()

    async def swipe(
        self,
        db: AsyncSession,
        requester_id: int,
        target_id: int,
        liked: bool,
    ) -> MatchResolution:
        await self.recorder.record_swipe(db, requester_id, target_id, liked)
        # A pass never creates a match, but still reports an existing one.
        return await self.resolver.resolve_match(db, requester_id, target_id, create=liked)
