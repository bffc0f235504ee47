"""Database domain mixins package."""

from .db_tournaments import TournamentDbMixin

__all__ = [
    "TournamentDbMixin",
]
