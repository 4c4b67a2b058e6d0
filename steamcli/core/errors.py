"""Exception hierarchy shared by the cache, the integrations and the aggregator."""

from __future__ import annotations

__all__ = [
    "SteamCLIError",
    "ProfileResolutionError",
    "DuplicateClientError",
    "StoreRequestError",
    "DetailContractError",
    "TagFetchError",
    "CacheLoadError",
    "CacheSaveError",
    "SteamIDParseError",
]


class SteamCLIError(Exception):
    """Base class for every error raised by steamcli."""


class ProfileResolutionError(SteamCLIError):
    """A caller-supplied identifier could not be resolved into a profile."""

    def __init__(self, identifier: str, detail: str) -> None:
        super().__init__(f"Could not resolve profile '{identifier}': {detail}")
        self.identifier = identifier
        self.detail = detail


class DuplicateClientError(SteamCLIError):
    """The identifier is already registered with the aggregator."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"The client is already present: '{identifier}'")
        self.identifier = identifier


class StoreRequestError(SteamCLIError):
    """Transport, HTTP or decoding failure talking to the store detail service."""


class DetailContractError(SteamCLIError):
    """The detail service omitted an app ID that was requested from it."""

    def __init__(self, app_id: int, requested: list[int]) -> None:
        super().__init__(f"Didn't find game {app_id} in store response (requested: {requested})")
        self.app_id = app_id
        self.requested = requested


class TagFetchError(SteamCLIError):
    """Tags for a single game could not be scraped from its store page."""

    def __init__(self, app_id: int, detail: str) -> None:
        super().__init__(f"Could not fetch tags for {app_id}: {detail}")
        self.app_id = app_id
        self.detail = detail


class CacheLoadError(SteamCLIError):
    """The cache file exists but cannot be read or decoded."""


class CacheSaveError(SteamCLIError):
    """The cache could not be encoded or written."""


class SteamIDParseError(SteamCLIError, ValueError):
    """Text is not a recognised Steam ID representation."""
