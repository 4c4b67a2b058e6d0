"""Aggregation of several Steam profiles over one shared cache.

The Aggregator keeps one Client per registered identifier, answers
"owned by anyone" / "owned by everyone" queries over their libraries,
and keeps the game cache in sync with the store:

    - update_game_cache() fetches details for every owned app that has
      no cached record yet, in batches, saving after each batch.
    - update_game_tags() scrapes tags for every record that has none,
      saving after each game.

Both are synchronous. A failed detail batch aborts the whole run; the
batches saved before it are kept, so re-running resumes from there.
"""

from __future__ import annotations

import logging
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Iterable, Protocol

from steamcli.config import Config
from steamcli.core.cache import Cache
from steamcli.core.errors import DetailContractError, DuplicateClientError, TagFetchError
from steamcli.core.game import GameRecord
from steamcli.core.profile import Profile
from steamcli.integrations import SteamCommunityResolver, SteamStoreClient

logger = logging.getLogger("steamcli.aggregator")

__all__ = [
    "Aggregator",
    "Client",
    "DetailService",
    "ProfileResolver",
    "TagService",
    "all_ids",
    "common_ids",
]


class ProfileResolver(Protocol):
    def resolve(self, identifier: str) -> Profile: ...


class DetailService(Protocol):
    def fetch_details(self, app_ids: list[int]) -> dict: ...


class TagService(Protocol):
    def fetch_tags(self, app_id: int) -> list[str]: ...


@dataclass
class Client:
    """A registered identifier and the profile it resolved to."""

    identifier: str
    profile: Profile

    def owned_ids(self) -> set[int]:
        return self.profile.owned_ids()


def all_ids(sections: Iterable[set[int]]) -> set[int]:
    """Union of the given ID sets."""
    result: set[int] = set()
    for section in sections:
        result |= section
    return result


def common_ids(sections: Iterable[set[int]]) -> set[int]:
    """Intersection of the given ID sets, computed in a single counting pass."""
    sections = list(sections)
    if not sections:
        return set()
    counts = Counter(app_id for section in sections for app_id in section)
    return {app_id for app_id, count in counts.items() if count == len(sections)}


class Aggregator:
    """Registry of clients plus the cache they share.

    Attributes:
        cache: Game and profile cache, saved during reconciliation.
        clients: Registered clients keyed by the identifier they were added with.
        batch_size: App IDs per detail request (not a concurrency level).
    """

    def __init__(
        self,
        cache: Cache,
        resolver: ProfileResolver,
        details: DetailService,
        tags: TagService,
        batch_size: int = 1,
        batch_delay: float = 0.6,
        tag_delay: float = 1.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.cache = cache
        self.clients: dict[str, Client] = {}
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.tag_delay = tag_delay
        self._resolver = resolver
        self._details = details
        self._tags = tags

    @classmethod
    def from_config(cls, config: Config) -> Aggregator:
        """Opens the configured cache and wires up the Steam website clients."""
        store = SteamStoreClient(timeout=config.REQUEST_TIMEOUT, language=config.LANGUAGE)
        return cls(
            cache=Cache.open(config.CACHE_FILE),
            resolver=SteamCommunityResolver(timeout=config.REQUEST_TIMEOUT),
            details=store,
            tags=store,
            batch_size=config.PARALLEL_UPDATES,
            batch_delay=config.BATCH_DELAY,
            tag_delay=config.TAG_DELAY,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_client(self, identifier: str) -> Client:
        """Registers identifier, reusing a fresh cached profile if there is one.

        Raises:
            DuplicateClientError: If identifier is already registered.
            ProfileResolutionError: If the profile cannot be resolved.
        """
        if identifier in self.clients:
            raise DuplicateClientError(identifier)

        profile = self.cache.profiles.find(identifier)
        if profile is not None:
            logger.debug("Reusing cached client profile %s", profile.name)
        else:
            logger.debug("Creating new client for %s", identifier)
            profile = self._resolver.resolve(identifier)
            self.cache.profiles.add(profile)

        client = Client(identifier=identifier, profile=profile)
        self.clients[identifier] = client
        logger.info("New client: %s (%s, %d games)", identifier, profile.name, len(profile.games))
        return client

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def owned_sections(self) -> list[set[int]]:
        """One set of owned app IDs per registered client."""
        sections = []
        for client in self.clients.values():
            section = client.owned_ids()
            logger.debug("Created matcher section of size %d for %s", len(section), client.identifier)
            sections.append(section)
        return sections

    def wanted_ids(self, common: bool) -> set[int]:
        """Intersection (common=True) or union of the clients' libraries."""
        sections = self.owned_sections()
        if common:
            return common_ids(sections)
        return all_ids(sections)

    def select(
        self,
        tags: Iterable[str] | None = None,
        common: bool = False,
        match_all: bool = False,
        include_invalid: bool = False,
    ) -> list[GameRecord]:
        """Selects cached games owned by any (or every) registered client.

        Without registered clients the whole game cache is searched. With
        clients whose libraries do not overlap, a common selection is empty.
        """
        if not self.clients:
            return self.cache.games.select(tags, None, match_all, include_invalid)

        ids = self.wanted_ids(common)
        if not ids:
            logger.debug("No games match the %s ownership filter", "common" if common else "combined")
            return []
        return self.cache.games.select(tags, ids, match_all, include_invalid)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def missing_game_ids(self) -> set[int]:
        """Owned app IDs without any cached record, valid or not."""
        return set(self.cache.games.missing_ids(self.wanted_ids(common=False)))

    def update_game_cache(self) -> int:
        """Fetches store details for every owned game that is not cached yet.

        Returns:
            Number of app IDs that received a record.

        Raises:
            StoreRequestError: A batch request failed; the run stops.
            DetailContractError: The store omitted a requested ID; the run stops.
            CacheSaveError: Progress could not be saved.
        """
        wanted = self.missing_game_ids()
        logger.debug("Accumulated %d game IDs", len(wanted))

        pending = deque(sorted(wanted))
        stored = 0
        while pending:
            batch: list[int] = []
            while pending and len(batch) < self.batch_size:
                app_id = pending.popleft()
                if app_id in wanted:
                    batch.append(app_id)
            if not batch:
                break

            logger.debug("Fetching games %s", batch)
            response = self._details.fetch_details(batch)

            for app_id in batch:
                detail = response.get(str(app_id))
                if detail is None:
                    raise DetailContractError(app_id, batch)

                if detail.success and detail.record is not None:
                    record = detail.record
                else:
                    record = self._backfill(app_id)

                logger.debug("Adding game to cache (requested %d, received %d)", app_id, record.app_id)
                self.cache.games.add(record.app_id, record)

                # Store mismatches under both IDs, else the requested one is fetched forever
                if record.app_id != app_id:
                    logger.warning("AppID mismatch: requested %d, received %d", app_id, record.app_id)
                    self.cache.games.add(app_id, record)
                    wanted.discard(app_id)
                    stored += 1

                if record.app_id in wanted:
                    wanted.discard(record.app_id)
                    stored += 1

            self.cache.save()
            logger.info("Fetched %d games, %d remaining", stored, len(wanted))

            if wanted:
                time.sleep(self.batch_delay)

        self.cache.save()
        return stored

    def _backfill(self, app_id: int) -> GameRecord:
        logger.warning("Received invalid response from store for %d", app_id)
        name = self.cache.profiles.find_game(app_id)
        if name is None:
            logger.error("Could not backfill game %d from profile", app_id)
            name = ""
        else:
            logger.debug("Backfilling game name %r", name)
        return GameRecord.placeholder(app_id, name)

    def update_game_tags(self) -> int:
        """Scrapes tags for every cached game that has none yet.

        A failure for one game is logged and skipped; it is retried on
        the next run.

        Returns:
            Number of games that received tags.

        Raises:
            CacheSaveError: Progress could not be saved.
        """
        logger.debug("Updating tags")
        tagged = 0
        for app_id, game in self.cache.games.items():
            # Records stored under two IDs are the same object; the first visit fills both
            if game.tags is not None:
                continue

            try:
                tags = self._tags.fetch_tags(app_id)
            except TagFetchError as exc:
                logger.error("Failed fetching tags for %d: %s", app_id, exc)
            else:
                logger.debug("Retrieved tags for %d: %s", app_id, tags)
                game.tags = tags
                tagged += 1
                self.cache.save()

            time.sleep(self.tag_delay)

        return tagged
