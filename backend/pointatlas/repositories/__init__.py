"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from pointatlas.repositories.base import BaseRepository, apply_sorting, parse_sort_tokens
from pointatlas.repositories.marker import MarkerRepository
from pointatlas.repositories.refresh_token import RefreshTokenRepository
from pointatlas.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "apply_sorting",
    "parse_sort_tokens",
    # Domain
    "MarkerRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
