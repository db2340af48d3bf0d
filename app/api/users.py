"""
Swipematch — Users API

Endpoint for registering synthetic users.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.user import CreateUserResponse, CreateUserResult
from app.services.user_service import create_user, generate_random_user

logger = structlog.get_logger("swipematch.api.users")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST /create — Create a random user
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/create",
    response_model=CreateUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a random user",
)
async def create_random_user(
    db: AsyncSession = Depends(get_db),
) -> CreateUserResponse:
    """Generate a user with random profile data and store it.

    The response carries the generated plaintext password so that the
    caller can log in as the new user.
    """
    logger.info("create_user_start")
    created = await create_user(db, generate_random_user())
    return CreateUserResponse(result=CreateUserResult.model_validate(created))
