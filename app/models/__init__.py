"""
Swipematch — ORM model registry.

Importing every model here ensures that ``Base.metadata`` (used by
``app.database.create_schema``) discovers all tables automatically.
"""

from app.models.user import User
from app.models.match import Match, Swipe

__all__ = [
    "User",
    "Match",
    "Swipe",
]
