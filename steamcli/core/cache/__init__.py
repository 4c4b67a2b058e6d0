"""Cache package: game cache, profile cache and their shared persistence."""

from __future__ import annotations

from steamcli.core.cache.games import MAX_GAME_AGE, GameCache
from steamcli.core.cache.profiles import MAX_PROFILE_AGE, ProfileCache, profile_expired
from steamcli.core.cache.store import Cache

__all__ = [
    "Cache",
    "GameCache",
    "ProfileCache",
    "MAX_GAME_AGE",
    "MAX_PROFILE_AGE",
    "profile_expired",
]
