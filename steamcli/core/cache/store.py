"""Persistence of the combined game and profile caches.

The whole cache lives in one JSON document::

    {"games": {"<app id>": {...}}, "profiles": [{...}, ...]}

Saving rewrites the file in place. Loading a missing file creates an
empty document; loading a damaged one raises CacheLoadError.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from steamcli.core.cache.games import GameCache
from steamcli.core.cache.profiles import ProfileCache
from steamcli.core.errors import CacheLoadError, CacheSaveError
from steamcli.utils.json_utils import read_json, write_json

logger = logging.getLogger("steamcli.cache")

__all__ = ["Cache"]


class Cache:
    """Game and profile caches bound to one cache file.

    Attributes:
        path: Location of the JSON document.
        games: Cached game records.
        profiles: Cached community profiles.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.games = GameCache()
        self.profiles = ProfileCache()

    @classmethod
    def open(cls, path: Path) -> Cache:
        """Loads the cache at path and drops expired entries.

        Raises:
            CacheLoadError: If an existing file cannot be read or decoded.
            CacheSaveError: If a missing file cannot be created.
        """
        cache = cls(path)
        cache.load()
        profiles = cache.profiles.purge_expired()
        games = cache.games.purge_expired()
        logger.debug("Dropped %d expired profiles and %d expired games", profiles, games)
        return cache

    def to_dict(self) -> dict:
        return {"games": self.games.to_dict(), "profiles": self.profiles.to_list()}

    def save(self) -> None:
        """Writes the full cache to self.path.

        Raises:
            CacheSaveError: If encoding or writing fails.
        """
        logger.debug("Saving cache (%d games, %d profiles)", len(self.games), len(self.profiles))
        try:
            write_json(self.path, self.to_dict())
        except OSError as exc:
            raise CacheSaveError(f"Couldn't write cache file {self.path}: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise CacheSaveError(f"Couldn't encode cache: {exc}") from exc
        logger.debug("Cache save done")

    def load(self) -> None:
        """Replaces the in-memory caches with the content of self.path.

        Raises:
            CacheLoadError: If the file cannot be read or decoded.
        """
        if not self.path.exists():
            logger.info("Creating new cache file %s", self.path)
            self.save()

        try:
            data = read_json(self.path)
        except OSError as exc:
            raise CacheLoadError(f"Couldn't read cache file {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise CacheLoadError(f"Couldn't decode cache file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise CacheLoadError(f"Couldn't decode cache file {self.path}: top level is not an object")

        try:
            games = GameCache.from_dict(data.get("games") or {})
            profiles = ProfileCache.from_list(data.get("profiles") or [])
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise CacheLoadError(f"Couldn't decode cache file {self.path}: {exc}") from exc

        self.games = games
        self.profiles = profiles
        logger.info("Loaded cache (%d games, %d profiles)", len(self.games), len(self.profiles))
