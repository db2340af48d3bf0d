"""
Swipematch — Shared API dependencies.

The authenticated user id is resolved once per request from the bearer
token and passed explicitly into the services.
"""

from __future__ import annotations

from fastapi import Header

from app.errors import AuthenticationError
from app.services.auth_service import decode_access_token
from app.services.discovery_service import DiscoveryService
from app.services.swipe_service import SwipeService

BEARER_PREFIX = "Bearer "

# ── Service singletons ────────────────────────────────────────────────────────

_discovery_service: DiscoveryService | None = None
_swipe_service: SwipeService | None = None


def get_discovery_service() -> DiscoveryService:
    global _discovery_service
    if _discovery_service is None:
        _discovery_service = DiscoveryService()
    return _discovery_service


def get_swipe_service() -> SwipeService:
    global _swipe_service
    if _swipe_service is None:
        _swipe_service = SwipeService()
    return _swipe_service


# ── Authentication ────────────────────────────────────────────────────────────

def get_current_user_id(authorization: str | None = Header(None)) -> int:
    """Return the user id from an ``Authorization: Bearer <jwt>`` header."""
    if not authorization:
        raise AuthenticationError("Unauthenticated")
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("auth header must be in format 'Bearer <jwt>'")
    return decode_access_token(authorization[len(BEARER_PREFIX):].strip())
