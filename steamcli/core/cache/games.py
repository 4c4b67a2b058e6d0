"""Game cache: app ID -> GameRecord with selection queries and expiry."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Iterator

from steamcli.core.game import GameRecord
from steamcli.utils.date_utils import is_older_than, utc_now

logger = logging.getLogger("steamcli.game_cache")

__all__ = ["GameCache", "MAX_GAME_AGE"]

MAX_GAME_AGE = timedelta(days=30)


class GameCache:
    """Mapping from app ID to GameRecord.

    A record is normally stored under its own app ID. When the store
    answers a request for one ID with a record carrying another, the
    same record is stored under both keys.
    """

    def __init__(self, games: dict[int, GameRecord] | None = None) -> None:
        self._games: dict[int, GameRecord] = dict(games or {})

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._games

    def __iter__(self) -> Iterator[int]:
        return iter(self._games)

    def items(self) -> list[tuple[int, GameRecord]]:
        """Snapshot of (key, record) pairs."""
        return list(self._games.items())

    def add(self, app_id: int, game: GameRecord) -> None:
        """Inserts or overwrites the record stored under app_id."""
        self._games[app_id] = game

    def get(self, app_id: int) -> GameRecord | None:
        return self._games.get(app_id)

    def select(
        self,
        tags: Iterable[str] | None = None,
        app_ids: Iterable[int] | None = None,
        match_all: bool = False,
        include_invalid: bool = False,
    ) -> list[GameRecord]:
        """Returns the records matching the given criteria.

        Args:
            tags: Wanted tags, compared case-insensitively. Empty means
                no tag filter.
            app_ids: Restrict candidates to these keys. Empty means
                every cached record is a candidate.
            match_all: Require every tag (AND) instead of any tag (OR).
            include_invalid: Also return records marked invalid.

        Returns:
            Matching records in no particular order. Requested IDs that
            are not cached are logged, never raised.
        """
        wanted_tags = [t.lower() for t in tags or ()]
        wanted_ids = set(app_ids or ())

        logger.debug(
            "Selecting games (tags=%s, ids=%d, and=%s, invalid=%s)",
            wanted_tags,
            len(wanted_ids),
            match_all,
            include_invalid,
        )

        if wanted_ids:
            candidates = [(i, self._games[i]) for i in wanted_ids if i in self._games]
        else:
            candidates = list(self._games.items())

        selected: list[GameRecord] = []
        seen: set[int] = set()
        matched_ids: set[int] = set()
        for app_id, game in candidates:
            if game.invalid and not include_invalid:
                continue
            if wanted_tags and not self._tags_match(game, wanted_tags, match_all):
                logger.debug("Skipping game %d, tags mismatch", app_id)
                continue
            matched_ids.add(app_id)
            # A record stored under two keys is returned once
            if id(game) in seen:
                continue
            seen.add(id(game))
            selected.append(game)

        if wanted_ids:
            self._report_missing(wanted_ids - matched_ids, include_invalid)

        return selected

    @staticmethod
    def _tags_match(game: GameRecord, wanted: list[str], match_all: bool) -> bool:
        if match_all:
            return all(game.has_tag(t) for t in wanted)
        return any(game.has_tag(t) for t in wanted)

    def missing_ids(self, app_ids: Iterable[int]) -> list[int]:
        """Returns the given IDs that have no cached record, sorted."""
        return sorted(i for i in set(app_ids) if i not in self._games)

    def _report_missing(self, unmatched: set[int], include_invalid: bool) -> None:
        # Invalid records skipped because include_invalid is off are not worth a report.
        reported = []
        for app_id in sorted(unmatched):
            game = self._games.get(app_id)
            if game is None:
                logger.error("Game %d doesn't exist in cache", app_id)
                reported.append(app_id)
            elif include_invalid:
                reported.append(app_id)
        if reported:
            logger.error(
                "Games not found in cache during select: %s",
                ",".join(str(i) for i in reported),
            )

    def delete(self, app_id: int) -> bool:
        """Removes the record stored under app_id.

        Returns:
            True if it existed.
        """
        if self._games.pop(app_id, None) is None:
            logger.debug("Game %d not found in cache", app_id)
            return False
        logger.debug("Deleted game %d from cache", app_id)
        return True

    def delete_by_name(self, name: str) -> bool:
        """Removes the first record whose name equals name exactly."""
        for app_id, game in self._games.items():
            if game.name == name:
                logger.debug("Found game %r in cache as %d", name, app_id)
                return self.delete(app_id)
        return False

    def _purge(self, predicate, reason: str) -> int:
        doomed = [app_id for app_id, game in self._games.items() if predicate(game)]
        for app_id in doomed:
            del self._games[app_id]
        if doomed:
            logger.debug("Purged %d %s games", len(doomed), reason)
        return len(doomed)

    def purge_invalid(self) -> int:
        """Removes every invalid record and returns how many were removed."""
        return self._purge(lambda g: g.invalid, "invalid")

    def purge_missing_tags(self) -> int:
        """Removes records without tags (never fetched, or fetched empty)."""
        return self._purge(lambda g: not g.tags, "untagged")

    def purge_expired(self, now: datetime | None = None) -> int:
        """Removes records last updated more than 30 days ago."""
        if now is None:
            now = utc_now()
        return self._purge(lambda g: is_older_than(g.updated, MAX_GAME_AGE, now), "expired")

    def all_tags(self) -> list[str]:
        """Union of every record's tags, case preserved, sorted."""
        return sorted({tag for game in self._games.values() for tag in game.tags or ()})

    def to_dict(self) -> dict[str, dict]:
        return {str(app_id): game.to_dict() for app_id, game in self._games.items()}

    @classmethod
    def from_dict(cls, data: dict[str, dict]) -> GameCache:
        return cls({int(key): GameRecord.from_dict(value) for key, value in data.items()})
