"""
Swipematch — Auth API

Exchanges email and password for a signed access token.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.user import LoginRequest, TokenResponse
from app.services.auth_service import login as login_user

logger = structlog.get_logger("swipematch.api.auth")

router = APIRouter()


@router.post("/login", response_model=TokenResponse, summary="Log in")
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """Return a JWT for valid credentials; 401 otherwise."""
    token = await login_user(db, payload.email, payload.password)
    return TokenResponse(token=token)
