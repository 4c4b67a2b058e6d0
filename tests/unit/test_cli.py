"""Tests for the steamcli command line interface."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from steamcli import __version__
from steamcli.cli import app
from steamcli.core.cache import Cache
from steamcli.core.errors import ProfileResolutionError
from steamcli.integrations import StoreDetail
from steamcli.services.aggregator import Aggregator

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_console_logging():
    """Keep log handlers from binding to the runner's temporary stdout."""
    with patch("steamcli.cli.setup_logging"):
        yield


@pytest.fixture
def populated(cache, cache_path, make_game, make_profile):
    """Cache file holding four games and one profile."""
    cache.games.add(1, make_game(1, "Alpha", tags=["Action", "Indie"]))
    cache.games.add(2, make_game(2, "Beta", tags=["action"]))
    cache.games.add(3, make_game(3, "Gamma"))
    cache.games.add(4, make_game(4, "Broken", invalid=True, tags=["Puzzle"]))
    cache.profiles.add(make_profile(76561197960287930, {1: "Alpha", 2: "Beta"}, custom_url="alice"))
    cache.save()
    return cache_path


def _invoke(cache_path, *args: str):
    return runner.invoke(app, ["--cache-file", str(cache_path), *args])


class TestGlobalOptions:
    """Tests for the top level callback."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_parallel_must_be_positive(self, cache_path) -> None:
        """--parallel rejects values below 1."""
        result = runner.invoke(app, ["--parallel", "0", "cache", "games", "info"])
        assert result.exit_code != 0


class TestIdCommand:
    """Tests for the id command."""

    def test_prints_every_form(self) -> None:
        """All representations of the ID are printed."""
        result = runner.invoke(app, ["id", "STEAM_0:0:11101"])
        assert result.exit_code == 0
        assert "SteamID64: 76561197960287930" in result.output
        assert "STEAM_1:0:11101" in result.output
        assert "[U:1:22202]" in result.output
        assert "https://steamcommunity.com/profiles/76561197960287930" in result.output

    def test_invalid_id(self) -> None:
        """Unparseable IDs exit with status 1."""
        result = runner.invoke(app, ["id", "not-an-id"])
        assert result.exit_code == 1

    def test_non_ascii_digits_exit_cleanly(self) -> None:
        """Unicode digits are rejected with status 1, not a traceback."""
        result = runner.invoke(app, ["id", "²"])
        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)

    def test_account_id(self) -> None:
        """--account reads the text as a 32-bit account ID."""
        result = runner.invoke(app, ["id", "--account", "22202"])
        assert result.exit_code == 0
        assert "SteamID64: 76561197960287930" in result.output
        assert "Account:   22202" in result.output

    def test_account_id_out_of_range(self) -> None:
        """Account IDs wider than 32 bits are rejected."""
        result = runner.invoke(app, ["id", "--account", str(1 << 32)])
        assert result.exit_code == 1

    def test_clan_has_no_account_line(self) -> None:
        """Only individual public accounts show an account ID."""
        result = runner.invoke(app, ["id", "[g:1:4]"])
        assert result.exit_code == 0
        assert "Account:" not in result.output


class TestCacheGames:
    """Tests for the cache games subcommands."""

    def test_info(self, populated) -> None:
        """Counts games and case-sensitive unique tags."""
        result = _invoke(populated, "cache", "games", "info")
        assert result.exit_code == 0
        assert "=== Game Cache Information ===" in result.output
        assert "Total games: 4" in result.output
        assert "Unique tags: 4" in result.output

    def test_print_filters(self, populated) -> None:
        """Tag filters apply and invalid games are hidden by default."""
        result = _invoke(populated, "cache", "games", "print", "--tag", "ACTION")
        assert result.exit_code == 0
        assert "Alpha" in result.output
        assert "Beta" in result.output
        assert "Gamma" not in result.output

    def test_print_invalid_marker(self, populated) -> None:
        """Invalid games are marked when included."""
        result = _invoke(populated, "cache", "games", "print", "--invalid", "--appid", "4")
        assert result.exit_code == 0
        assert "Broken (INVALID)" in result.output

    def test_delete(self, populated) -> None:
        """Deletes by ID and by exact name and reports the counts."""
        result = _invoke(populated, "cache", "games", "delete", "--appid", "1", "--appid", "99", "--name", "Beta")
        assert result.exit_code == 0
        assert "Removed 2 games from cache (requested 3)" in result.output
        assert list(Cache.open(populated).games) == [3, 4]

    def test_purge_invalid(self, populated) -> None:
        """Invalid games are removed and saved."""
        result = _invoke(populated, "cache", "games", "purge-invalid")
        assert "Purged 1 invalid games from cache" in result.output
        assert 4 not in Cache.open(populated).games

    def test_purge_missing_tags(self, populated) -> None:
        """Games without tags are removed and saved."""
        result = _invoke(populated, "cache", "games", "purge-missing-tags")
        assert "Purged 1 games with missing tags from cache" in result.output
        assert 3 not in Cache.open(populated).games

    def test_corrupt_cache(self, cache_path) -> None:
        """A damaged cache file aborts with status 1."""
        cache_path.parent.mkdir(parents=True)
        cache_path.write_text("{oops")
        result = _invoke(cache_path, "cache", "games", "info")
        assert result.exit_code == 1


class TestCacheProfiles:
    """Tests for the cache profiles subcommands."""

    def test_list(self, populated) -> None:
        """Cached profiles are listed."""
        result = _invoke(populated, "cache", "profiles", "list")
        assert result.exit_code == 0
        assert "alice" in result.output

    def test_remove(self, populated) -> None:
        """Removal reports how many identifiers matched."""
        result = _invoke(populated, "cache", "profiles", "remove", "alice", "bob")
        assert "Removed 1 profiles from cache (requested 2)" in result.output
        assert len(Cache.open(populated).profiles) == 0


class TestGamesCommand:
    """Tests for the games command."""

    @pytest.fixture
    def aggregator(self, populated, make_profile):
        resolver = MagicMock()
        resolver.resolve.return_value = make_profile(76561198000000001, {2: "Beta", 3: "Gamma"}, custom_url="bob")
        details = MagicMock()
        aggregator = Aggregator(Cache.open(populated), resolver, details, MagicMock(), batch_delay=0, tag_delay=0)
        with patch.object(Aggregator, "from_config", return_value=aggregator):
            yield aggregator

    def test_tags_only_common(self, aggregator, populated) -> None:
        """Common games' tags are printed lower-cased and deduplicated."""
        result = _invoke(populated, "games", "alice", "bob", "--common", "--tags-only", "--no-auto-cache")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "action" in lines
        assert "indie" not in lines

    def test_lists_combined_games(self, aggregator, populated) -> None:
        """Without --common every owned game is listed."""
        result = _invoke(populated, "games", "alice", "bob", "--no-auto-cache")
        assert result.exit_code == 0
        for name in ("Alpha", "Beta", "Gamma"):
            assert name in result.output

    def test_unicode_digit_identifier_does_not_abort(self, aggregator, populated) -> None:
        """An identifier made of Unicode digits is looked up like a vanity name."""
        aggregator._resolver.resolve.side_effect = ProfileResolutionError("²", "not found")
        result = _invoke(populated, "games", "²", "alice", "--tags-only", "--no-auto-cache")
        assert result.exit_code == 0
        aggregator._resolver.resolve.assert_called_once_with("²")
        assert "indie" in result.output.splitlines()

    def test_failed_client_is_skipped(self, aggregator, populated) -> None:
        """A profile that cannot be resolved does not stop the run."""
        aggregator._resolver.resolve.side_effect = ProfileResolutionError("ghost", "not found")
        result = _invoke(populated, "games", "alice", "ghost", "--tags-only", "--no-auto-cache")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "action" in lines
        assert "indie" in lines

    def test_auto_cache_fetches_missing(self, aggregator, populated, make_game) -> None:
        """Owned games missing from the cache are fetched before listing."""
        aggregator.cache.games.delete(3)
        aggregator._details.fetch_details.return_value = {"3": StoreDetail(True, make_game(3, "Gamma"))}
        result = _invoke(populated, "games", "bob")
        assert result.exit_code == 0
        aggregator._details.fetch_details.assert_called_once_with([3])
        assert "Gamma" in result.output
