"""
Swipematch — Attractiveness ranking for discovery candidates.

For every candidate row the ranker derives:

  age                   whole years from date of birth to "now"
  distance_km           haversine distance from the requester (0 if unknown)
  total_likes           liked swipes the candidate has received

then min/max-normalizes distance and likes across the candidate set and
blends them:

  score = w_dist × (1 − normalized_distance) + w_likes × normalized_likes

Default weights: distance=0.8, likes=0.2.  Closer and more-liked candidates
score higher.  Candidates are returned sorted by score, highest first, with
ties keeping their input order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence

import structlog

from app.config import get_settings
from app.services.candidate_service import CandidateRow
from app.services.geo_service import Coordinate, distance_between
from app.services.scoring_service import normalize, observed_range
from app.utils.dates import calculate_age

logger = structlog.get_logger("swipematch.ranking_service")


@dataclass
class Candidate:
    """A ranked projection of another user's profile."""

    id: int
    name: str
    gender: str
    age: int
    distance_km: float
    total_likes: int
    normalized_distance: float = 0.0
    normalized_likes: float = 0.0
    attractiveness_score: float = 0.0


class AttractivenessRanker:
    """Scores and orders candidates by proximity and popularity."""

    def __init__(
        self,
        distance_weight: float | None = None,
        likes_weight: float | None = None,
    ) -> None:
        settings = get_settings()
        self.w_distance: float = (
            settings.DISTANCE_WEIGHT if distance_weight is None else distance_weight
        )
        self.w_likes: float = settings.LIKES_WEIGHT if likes_weight is None else likes_weight

    def score(self, normalized_distance: float, normalized_likes: float) -> float:
        return self.w_distance * (1.0 - normalized_distance) + self.w_likes * normalized_likes

    def rank(
        self,
        rows: Sequence[CandidateRow],
        origin: Coordinate | None,
        now: date | datetime,
    ) -> list[Candidate]:
        """Return ``rows`` as scored ``Candidate`` objects, best first."""
        candidates = [
            Candidate(
                id=row.id,
                name=row.name,
                gender=row.gender,
                age=calculate_age(row.dob, now),
                distance_km=distance_between(origin, row.location),
                total_likes=row.like_count,
            )
            for row in rows
        ]
        if not candidates:
            return []

        min_distance, max_distance = observed_range(c.distance_km for c in candidates)
        min_likes, max_likes = observed_range(c.total_likes for c in candidates)

        for c in candidates:
            c.normalized_distance = normalize(c.distance_km, min_distance, max_distance)
            c.normalized_likes = normalize(c.total_likes, min_likes, max_likes)
            c.attractiveness_score = self.score(c.normalized_distance, c.normalized_likes)

        # sorted() is stable even with reverse=True.
        ranked = sorted(candidates, key=lambda c: c.attractiveness_score, reverse=True)

        logger.debug(
            "candidates_ranked",
            count=len(ranked),
            min_distance=round(min_distance, 3),
            max_distance=round(max_distance, 3),
            min_likes=min_likes,
            max_likes=max_likes,
        )
        return ranked
