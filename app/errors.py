"""
Swipematch — Error taxonomy for the matchmaking engine.

The HTTP layer maps these onto status codes in ``app.main``:

* ``ValidationError``      -> 400
* ``AuthenticationError``  -> 401
* ``NotFoundError``        -> 404
* ``StorageError``         -> 500 (generic message, detail only in logs)

``ConsistencyConflict`` never leaves the storage layer.
"""

from __future__ import annotations


class MatchmakingError(Exception):
    """Base class for every error raised by the matchmaking engine."""


class ValidationError(MatchmakingError):
    """Malformed caller input, e.g. a non-numeric age filter."""


class AuthenticationError(MatchmakingError):
    """Missing, malformed or invalid credentials."""


class StorageError(MatchmakingError):
    """A query, transaction or commit failed or timed out."""


class NotFoundError(StorageError):
    """A row the request depends on does not exist.

    Subclasses ``StorageError`` so that the discovery pipeline treats a
    missing requester as fatal to the request rather than degrading.
    """


class ConsistencyConflict(MatchmakingError):
    """Two writers raced to create the same canonical row."""

    def __init__(self, table: str, key: tuple) -> None:
        self.table = table
        self.key = key
        super().__init__(f"concurrent insert into {table} for key {key}")
