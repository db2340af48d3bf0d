"""
Swipematch — User creation.

The public ``/user/create`` endpoint registers a synthetic user with random
profile data and returns the generated plaintext password once, so the
caller can log in with it.
"""

from __future__ import annotations

import random
import secrets
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app import repo
from app.models.user import User
from app.services.auth_service import hash_password
from app.utils.dates import calculate_age, utc_now

logger = structlog.get_logger("swipematch.user_service")

FIRST_NAMES = [
    "Alice", "Bob", "Charlie", "Darren", "Erica", "Fran", "Grace", "Hassan",
    "Imran", "Jane", "Khadija", "Leo", "Maya", "Noah", "Omar", "Priya",
    "Quinn", "Rosa", "Sami", "Tara", "Usman", "Vera", "Will", "Yasmin", "Zain",
]
LAST_NAMES = [
    "Ahmed", "Brown", "Chen", "Davies", "Evans", "Fischer", "Garcia", "Hughes",
    "Iqbal", "Jones", "Khan", "Lopez", "Miller", "Novak", "Okafor", "Patel",
]
GENDERS = ["male", "female", "other"]

MIN_AGE_YEARS = 18
MAX_AGE_YEARS = 60


@dataclass(frozen=True)
class NewUserProfile:
    """Profile data for a user that has not been stored yet."""

    email: str
    password: str
    name: str
    gender: str
    dob: date
    lat: float | None
    lng: float | None


@dataclass(frozen=True)
class CreatedUser:
    id: int
    email: str
    password: str
    name: str
    gender: str
    age: int


def generate_random_user(rng: random.Random | None = None, now: datetime | None = None) -> NewUserProfile:
    rng = rng or random.Random()
    today = (now or utc_now()).date()

    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    age_days = rng.randint(MIN_AGE_YEARS * 365, MAX_AGE_YEARS * 365)

    return NewUserProfile(
        email=f"{first.lower()}.{last.lower()}.{secrets.token_hex(4)}@example.com",
        password=secrets.token_urlsafe(12),
        name=f"{first} {last}",
        gender=rng.choice(GENDERS),
        dob=today - timedelta(days=age_days),
        lat=round(rng.uniform(-90.0, 90.0), 6),
        lng=round(rng.uniform(-180.0, 180.0), 6),
    )


async def create_user(
    db: AsyncSession,
    profile: NewUserProfile,
    now: datetime | None = None,
) -> CreatedUser:
    """Hash the password, persist the user and return the public view."""
    user: User = await repo.insert_user(
        db,
        email=profile.email,
        password_hash=hash_password(profile.password),
        name=profile.name,
        gender=profile.gender,
        dob=profile.dob,
        lat=profile.lat,
        lng=profile.lng,
    )
    logger.info("user_created", user_id=user.id, gender=user.gender)

    return CreatedUser(
        id=user.id,
        email=user.email,
        password=profile.password,
        name=user.name,
        gender=user.gender,
        age=calculate_age(user.dob, now or utc_now()),
    )
