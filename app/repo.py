"""
Swipematch — Storage collaborator.

Every query the matchmaking engine issues lives here.  Each public function
takes the request's ``AsyncSession`` as its first argument and runs under a
caller-enforced timeout (``STORAGE_TIMEOUT_SECONDS``).  Timeouts and driver
failures are reported as ``StorageError`` and never retried here.
"""

from __future__ import annotations

import asyncio
import functools
from datetime import date, datetime
from typing import Any, Awaitable, Callable, TypeVar

import structlog
from sqlalchemy import and_, distinct, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import ConsistencyConflict, NotFoundError, StorageError, ValidationError
from app.models.match import Match, Swipe
from app.models.user import User
from app.services.candidate_service import (
    CandidateRow,
    DiscoveryFilters,
    build_candidate_query,
    row_to_candidate,
)
from app.services.geo_service import Coordinate

logger = structlog.get_logger("swipematch.repo")

T = TypeVar("T")


def _storage_call(operation: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Apply the storage timeout and translate driver errors."""

    def decorator(func_: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func_)
        async def wrapper(db: AsyncSession, *args: Any, **kwargs: Any) -> T:
            timeout = get_settings().STORAGE_TIMEOUT_SECONDS
            try:
                return await asyncio.wait_for(func_(db, *args, **kwargs), timeout=timeout)
            except asyncio.TimeoutError as exc:
                logger.error("storage_timeout", operation=operation, timeout=timeout)
                raise StorageError(f"{operation} timed out after {timeout}s") from exc
            except SQLAlchemyError as exc:
                logger.error("storage_failure", operation=operation, error=str(exc))
                await db.rollback()
                raise StorageError(f"{operation} failed") from exc

        return wrapper

    return decorator


# ──────────────────────────────────────────────────────────────────────────────
# Discovery reads
# ──────────────────────────────────────────────────────────────────────────────

@_storage_call("fetch_requester_location")
async def fetch_requester_location(db: AsyncSession, requester_id: int) -> Coordinate | None:
    """Return the requester's coordinate, or ``None`` if they have none.

    Raises ``NotFoundError`` when the requester does not exist.
    """
    result = await db.execute(select(User.lat, User.lng).where(User.id == requester_id))
    row = result.first()
    if row is None:
        raise NotFoundError(f"User {requester_id} not found")
    return Coordinate.from_nullable(row.lat, row.lng)


@_storage_call("fetch_candidates")
async def fetch_candidates(
    db: AsyncSession,
    requester_id: int,
    filters: DiscoveryFilters,
    now: date | datetime,
) -> list[CandidateRow]:
    result = await db.execute(build_candidate_query(requester_id, filters, now))
    return [row_to_candidate(row) for row in result.all()]


# ──────────────────────────────────────────────────────────────────────────────
# Swipes
# ──────────────────────────────────────────────────────────────────────────────

@_storage_call("insert_swipe")
async def insert_swipe(db: AsyncSession, swiper_id: int, target_id: int, liked: bool) -> Swipe:
    """Append one swipe and commit it."""
    swipe = Swipe(swiper_id=swiper_id, target_id=target_id, liked=liked)
    db.add(swipe)
    await db.commit()
    return swipe


@_storage_call("has_mutual_like")
async def has_mutual_like(db: AsyncSession, low: int, high: int) -> bool:
    """True when both ``low -> high`` and ``high -> low`` have a liked swipe."""
    stmt = select(func.count(distinct(Swipe.swiper_id))).where(
        Swipe.liked.is_(True),
        or_(
            and_(Swipe.swiper_id == low, Swipe.target_id == high),
            and_(Swipe.swiper_id == high, Swipe.target_id == low),
        ),
    )
    result = await db.execute(stmt)
    return result.scalar_one() == 2


# ──────────────────────────────────────────────────────────────────────────────
# Matches
# ──────────────────────────────────────────────────────────────────────────────

async def _select_match(db: AsyncSession, low: int, high: int) -> Match | None:
    stmt = select(Match).where(Match.user_low == low, Match.user_high == high)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _insert_match(db: AsyncSession, low: int, high: int) -> Match:
    match = Match(user_low=low, user_high=high)
    db.add(match)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConsistencyConflict("matches", (low, high)) from exc
    return match


@_storage_call("find_canonical_match")
async def find_canonical_match(db: AsyncSession, low: int, high: int) -> Match | None:
    return await _select_match(db, low, high)


@_storage_call("insert_match_if_absent")
async def insert_match_if_absent(db: AsyncSession, low: int, high: int) -> Match:
    """Create the canonical match for ``(low, high)`` or return the existing one.

    The unique constraint on ``(user_low, user_high)`` decides races: the
    losing writer rolls back and re-reads the row the winner committed.
    """
    try:
        match = await _insert_match(db, low, high)
    except ConsistencyConflict as conflict:
        logger.info("match_insert_conflict", table=conflict.table, user_low=low, user_high=high)
        existing = await _select_match(db, low, high)
        if existing is None:
            raise StorageError(f"match for {conflict.key} could not be created") from conflict
        return existing

    logger.info("match_created", match_id=match.id, user_low=low, user_high=high)
    return match


# ──────────────────────────────────────────────────────────────────────────────
# Users
# ──────────────────────────────────────────────────────────────────────────────

@_storage_call("insert_user")
async def insert_user(
    db: AsyncSession,
    *,
    email: str,
    password_hash: str,
    name: str,
    gender: str,
    dob: date,
    lat: float | None = None,
    lng: float | None = None,
) -> User:
    user = User(
        email=email,
        password_hash=password_hash,
        name=name,
        gender=gender,
        dob=dob,
        lat=lat,
        lng=lng,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ValidationError("A user with this email already exists.") from exc
    return user


@_storage_call("get_user_by_email")
async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()
