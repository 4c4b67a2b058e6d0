# tests/conftest.py
from datetime import timedelta
from typing import Callable

import pytest

from steamcli.core.cache import Cache
from steamcli.core.game import Category, GameRecord
from steamcli.core.profile import Profile, ProfileGame
from steamcli.utils.date_utils import utc_now


@pytest.fixture
def make_game() -> Callable[..., GameRecord]:
    """Factory for GameRecord objects with sensible defaults."""

    def _make(
        app_id: int,
        name: str | None = None,
        tags: list[str] | None = None,
        invalid: bool = False,
        age: timedelta = timedelta(0),
        categories: tuple[str, ...] = (),
    ) -> GameRecord:
        return GameRecord(
            app_id=app_id,
            name=name if name is not None else f"Game {app_id}",
            invalid=invalid,
            type="game",
            tags=tags,
            categories=[Category(id=i, description=d) for i, d in enumerate(categories, start=1)],
            updated=utc_now() - age,
        )

    return _make


@pytest.fixture
def make_profile() -> Callable[..., Profile]:
    """Factory for Profile objects owning the given games."""

    def _make(
        steam_id64: int,
        games: dict[int, str] | None = None,
        custom_url: str = "",
        name: str = "",
        age: timedelta = timedelta(0),
    ) -> Profile:
        return Profile(
            steam_id64=steam_id64,
            name=name or f"user{steam_id64 % 1000}",
            custom_url=custom_url,
            games={
                app_id: ProfileGame(app_id=app_id, name=game_name, playtime_total="1.5")
                for app_id, game_name in (games or {}).items()
            },
            updated=utc_now() - age,
        )

    return _make


@pytest.fixture
def cache_path(tmp_path):
    """Location of a not yet existing cache file."""
    return tmp_path / "cache" / "steamcli-cache.json"


@pytest.fixture
def cache(cache_path) -> Cache:
    """Empty in-memory cache bound to a temp file."""
    return Cache(cache_path)
