"""
Configuration - cache location and reconciliation settings.
Defaults are platform aware; .env files and STEAMCLI_* environment
variables override them, explicit constructor values override both.
"""

from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger("steamcli.config")


__all__ = ["Config", "default_cache_dir"]

CACHE_FILE_NAME = "steamcli-cache.json"


def default_cache_dir() -> Path:
    """Returns the per-user cache directory for the current platform."""
    system = platform.system()

    if system == "Windows":
        local = os.getenv("LOCALAPPDATA")
        if local:
            return Path(local)
        return Path.home() / "AppData" / "Local"

    if system == "Darwin":
        return Path.home() / "Library" / "Caches"

    xdg = os.getenv("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".cache"


@dataclass
class Config:
    """
    Settings consumed by the cache and the aggregator.

    PARALLEL_UPDATES is the number of app IDs sent to the store per
    request. Requests are still made one at a time.
    """

    CACHE_FILE: Path | None = None
    PARALLEL_UPDATES: int | None = None
    REQUEST_TIMEOUT: float | None = None
    LANGUAGE: str | None = None

    BATCH_DELAY: float = 0.6
    TAG_DELAY: float = 1.0

    def __post_init__(self):
        """Fill unset fields from the environment, then from defaults."""
        load_dotenv()

        if self.CACHE_FILE is None:
            env_file = os.getenv("STEAMCLI_CACHE_FILE")
            self.CACHE_FILE = Path(env_file) if env_file else default_cache_dir() / CACHE_FILE_NAME
        else:
            self.CACHE_FILE = Path(self.CACHE_FILE)

        if self.PARALLEL_UPDATES is None:
            self.PARALLEL_UPDATES = self._env_number("STEAMCLI_PARALLEL_UPDATES", int, 1)
        if self.PARALLEL_UPDATES < 1:
            raise ValueError(f"PARALLEL_UPDATES must be at least 1, got {self.PARALLEL_UPDATES}")

        if self.REQUEST_TIMEOUT is None:
            self.REQUEST_TIMEOUT = self._env_number("STEAMCLI_REQUEST_TIMEOUT", float, 15.0)

        if self.LANGUAGE is None:
            self.LANGUAGE = os.getenv("STEAMCLI_LANGUAGE", "english")

        logger.debug("Using cache file %s", self.CACHE_FILE)

    @staticmethod
    def _env_number(name: str, kind: type, default: int | float) -> int | float:
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            return kind(raw)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
            return default
