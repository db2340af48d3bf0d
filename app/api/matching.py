"""
Swipematch — Matching API

Discovery feed and swipe endpoints.  Both act on behalf of the user named
in the bearer token.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_discovery_service, get_swipe_service
from app.database import get_db
from app.schemas.match import (
    CandidateResponse,
    DiscoverResponse,
    ErrorResponse,
    SwipeRequest,
    SwipeResponse,
    SwipeResult,
)
from app.services.candidate_service import parse_filters
from app.services.discovery_service import DiscoveryService
from app.services.swipe_service import SwipeService

logger = structlog.get_logger("swipematch.api.matching")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET /discover — Ranked candidate feed
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/discover",
    response_model=DiscoverResponse,
    summary="Discover ranked candidate profiles",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def discover(
    age: Optional[str] = Query(None, description="Exact age to match"),
    gender: Optional[str] = Query(None, description="Exact gender label to match"),
    user_id: int = Depends(get_current_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
    db: AsyncSession = Depends(get_db),
) -> DiscoverResponse:
    """Return every profile the user has not swiped on yet, best first.

    Candidates are scored 80% on proximity and 20% on likes received.
    """
    filters = parse_filters(age, gender)
    candidates = await service.discover(db, user_id, filters)

    return DiscoverResponse(
        results=[
            CandidateResponse(
                id=c.id,
                name=c.name,
                gender=c.gender,
                age=c.age,
                distance_from_me=c.distance_km,
                total_likes=c.total_likes,
                attractiveness_score=c.attractiveness_score,
            )
            for c in candidates
        ]
    )


# ──────────────────────────────────────────────────────────────────────────────
# POST /swipe — Like or pass on a profile
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/swipe",
    response_model=SwipeResponse,
    summary="Record a swipe",
    responses={401: {"model": ErrorResponse}},
)
async def swipe(
    payload: SwipeRequest,
    user_id: int = Depends(get_current_user_id),
    service: SwipeService = Depends(get_swipe_service),
    db: AsyncSession = Depends(get_db),
) -> SwipeResponse:
    """Record a like or pass and report whether the pair is now matched."""
    log = logger.bind(user_id=user_id, other_user_id=payload.other_user_id, like=payload.like)
    log.info("swipe_start")

    resolution = await service.swipe(db, user_id, payload.other_user_id, payload.like)

    log.info("swipe_complete", matched=resolution.matched, match_id=resolution.match_id)
    return SwipeResponse(
        results=SwipeResult(matched=resolution.matched, match_id=resolution.match_id)
    )
