"""Profile cache: an ordered list of resolved community profiles."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterator

from steamcli.core.profile import Profile
from steamcli.utils.date_utils import is_older_than, utc_now

logger = logging.getLogger("steamcli.profile_cache")

__all__ = ["ProfileCache", "MAX_PROFILE_AGE", "profile_expired"]

MAX_PROFILE_AGE = timedelta(hours=12)


def profile_expired(profile: Profile, now: datetime | None = None) -> bool:
    """True when the profile was fetched more than 12 hours ago."""
    return is_older_than(profile.updated, MAX_PROFILE_AGE, now)


class ProfileCache:
    """Cached profiles, unique by SteamID64 under normal operation.

    Two entries for one SteamID64 can only come from a hand-edited or
    otherwise damaged cache file. add() replaces all of them and
    remove() deletes all of them.
    """

    def __init__(self, profiles: list[Profile] | None = None) -> None:
        self._profiles: list[Profile] = list(profiles or [])

    def __len__(self) -> int:
        return len(self._profiles)

    def __iter__(self) -> Iterator[Profile]:
        return iter(list(self._profiles))

    def add(self, profile: Profile) -> None:
        """Stores profile, replacing every entry with the same SteamID64.

        Profiles that are already expired are ignored.
        """
        if profile_expired(profile):
            logger.warning(
                "Attempted to add an expired profile to the cache (name=%s, id=%d, updated=%s)",
                profile.name,
                profile.steam_id64,
                profile.updated,
            )
            return

        updated = False
        for i, existing in enumerate(self._profiles):
            if existing.steam_id64 == profile.steam_id64:
                self._profiles[i] = profile
                updated = True

        if not updated:
            self._profiles.append(profile)

    def find(self, id_text: str) -> Profile | None:
        """Looks up a fresh profile by SteamID64 or vanity name.

        Expired entries are purged first. The vanity name comparison
        ignores case.
        """
        logger.debug("Searching for profile %s", id_text)
        self.purge_expired()
        for profile in self._profiles:
            if profile.matches(id_text):
                return profile
        return None

    def find_game(self, app_id: int) -> str | None:
        """Returns the name any cached profile knows app_id by.

        Used to backfill games the store no longer describes.
        """
        for profile in self._profiles:
            game = profile.games.get(app_id)
            if game is not None:
                return game.name
        return None

    def remove(self, id_text: str) -> bool:
        """Deletes every entry matching the SteamID64 or exact vanity name.

        Returns:
            True if at least one entry was removed.
        """
        removed = False
        # TODO: drop the loop once duplicate SteamID64 entries are rejected on load
        while self._remove_one(id_text):
            removed = True
            logger.info("Removed profile %s from cache", id_text)
        return removed

    def _remove_one(self, id_text: str) -> bool:
        for i, profile in enumerate(self._profiles):
            if str(profile.steam_id64) == id_text or (profile.custom_url and profile.custom_url == id_text):
                del self._profiles[i]
                return True
        return False

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drops every profile older than 12 hours and returns the count."""
        if now is None:
            now = utc_now()
        kept = []
        for profile in self._profiles:
            if profile_expired(profile, now):
                logger.debug("Purging profile %s", profile.name)
            else:
                kept.append(profile)
        purged = len(self._profiles) - len(kept)
        self._profiles = kept
        return purged

    def to_list(self) -> list[dict]:
        return [p.to_dict() for p in self._profiles]

    @classmethod
    def from_list(cls, data: list[dict]) -> ProfileCache:
        return cls([Profile.from_dict(item) for item in data])
