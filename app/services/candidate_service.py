"""
Swipematch — Candidate filtering for the discovery feed.

Builds the inclusion/exclusion predicate for a requester:

  * never the requester themself;
  * never anyone the requester has already swiped on (like or pass);
  * optionally, exactly the given age (computed against "now");
  * optionally, exactly the given gender label.

A zero age and an empty gender mean "no constraint".  The query also joins
each candidate's received-like count so the ranker needs no extra round
trips.  ``app.repo.fetch_candidates`` executes the query.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import Select, func, select

from app.errors import ValidationError
from app.models.match import Swipe
from app.models.user import User
from app.services.geo_service import Coordinate
from app.utils.dates import dob_range_for_age


@dataclass(frozen=True)
class DiscoveryFilters:
    """Optional discovery constraints; zero / empty disables a filter."""

    age: int = 0
    gender: str = ""


@dataclass(frozen=True)
class CandidateRow:
    """Raw candidate as read from storage, before ranking."""

    id: int
    name: str
    gender: str
    dob: date
    location: Coordinate | None
    like_count: int


def parse_filters(age: str | None = None, gender: str | None = None) -> DiscoveryFilters:
    """Turn raw query-string values into ``DiscoveryFilters``.

    Raises
    ------
    ValidationError
        If ``age`` is not an integer or is negative.
    """
    parsed_age = 0
    if age is not None and age.strip() != "":
        try:
            parsed_age = int(age.strip())
        except ValueError as exc:
            raise ValidationError("Age filter must be a number") from exc
        if parsed_age < 0:
            raise ValidationError("Age filter must be more than 0")

    return DiscoveryFilters(age=parsed_age, gender=(gender or "").strip())


def build_candidate_query(
    requester_id: int,
    filters: DiscoveryFilters,
    now: date | datetime,
) -> Select:
    """Return the SELECT producing candidate rows for ``requester_id``."""
    likes = (
        select(Swipe.target_id, func.count(Swipe.id).label("like_count"))
        .where(Swipe.liked.is_(True))
        .group_by(Swipe.target_id)
        .subquery("likes")
    )
    already_swiped = select(Swipe.target_id).where(Swipe.swiper_id == requester_id)

    stmt = (
        select(
            User.id,
            User.name,
            User.gender,
            User.dob,
            User.lat,
            User.lng,
            func.coalesce(likes.c.like_count, 0).label("like_count"),
        )
        .outerjoin(likes, likes.c.target_id == User.id)
        .where(User.id != requester_id)
        .where(User.id.not_in(already_swiped))
        .order_by(User.id)
    )

    if filters.age:
        earliest, latest = dob_range_for_age(filters.age, now)
        stmt = stmt.where(User.dob.between(earliest, latest))

    if filters.gender:
        stmt = stmt.where(User.gender == filters.gender)

    return stmt


def row_to_candidate(row) -> CandidateRow:
    """Map a result row from ``build_candidate_query`` to ``CandidateRow``."""
    return CandidateRow(
        id=row.id,
        name=row.name,
        gender=row.gender,
        dob=row.dob,
        location=Coordinate.from_nullable(row.lat, row.lng),
        like_count=int(row.like_count or 0),
    )
