"""
steamcli - Command Line Interface

Provides commands for:
- Listing games owned by one or more Steam profiles (any or all of them)
- Inspecting and pruning the local game and profile cache
- Converting between Steam ID formats
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from steamcli import __version__
from steamcli.config import Config
from steamcli.core.cache import Cache
from steamcli.core.errors import SteamCLIError, SteamIDParseError
from steamcli.core.game import GameRecord, all_tags
from steamcli.core.logging import setup_logging
from steamcli.services.aggregator import Aggregator
from steamcli.utils.steam_id import (
    account_id_to_steam_id64,
    parse_steam_id,
    steam_id64_to_account_id,
)

app = typer.Typer(
    name="steamcli",
    help="Compare Steam libraries and filter them by store tags",
    add_completion=False,
)
cache_app = typer.Typer(help="Inspect and prune the local cache", no_args_is_help=True)
cache_games_app = typer.Typer(help="Cached game records", no_args_is_help=True)
cache_profiles_app = typer.Typer(help="Cached community profiles", no_args_is_help=True)
app.add_typer(cache_app, name="cache")
cache_app.add_typer(cache_games_app, name="games")
cache_app.add_typer(cache_profiles_app, name="profiles")

console = Console()
logger = logging.getLogger("steamcli.cli")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]steamcli[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    cache_file: Optional[Path] = typer.Option(
        None,
        "--cache-file",
        "-c",
        help="Cache file location (default: user cache dir)",
    ),
    parallel: Optional[int] = typer.Option(
        None,
        "--parallel",
        "-p",
        min=1,
        help="Number of games requested from the store at once",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug output"),
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """steamcli - Steam library aggregation"""
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    ctx.obj = Config(CACHE_FILE=cache_file, PARALLEL_UPDATES=parallel)


def _open_cache(ctx: typer.Context) -> Cache:
    try:
        return Cache.open(ctx.obj.CACHE_FILE)
    except SteamCLIError as exc:
        logger.error("%s", exc)
        raise typer.Exit(1) from exc


def _save_cache(cache: Cache) -> None:
    try:
        cache.save()
    except SteamCLIError as exc:
        logger.error("Could not save cache: %s", exc)


def _print_games(games: list[GameRecord]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("App ID", justify="right")
    table.add_column("Name")
    table.add_column("Categories")
    for game in sorted(games, key=lambda g: (g.name.lower(), g.app_id)):
        name = f"{game.name} (INVALID)" if game.invalid else game.name
        table.add_row(str(game.app_id), name, ", ".join(game.category_names()))
    console.print(table)


@app.command()
def games(
    ctx: typer.Context,
    ids: List[str] = typer.Argument(..., help="SteamID64s, vanity names or profile URLs"),
    tag: List[str] = typer.Option([], "--tag", "-t", help="Only games with this tag (repeatable)"),
    common: bool = typer.Option(False, "--common", help="Only games owned by every profile"),
    match_all: bool = typer.Option(False, "--and", help="Require every --tag instead of any"),
    invalid: bool = typer.Option(False, "--invalid", help="Include games the store no longer lists"),
    fetch_tags: bool = typer.Option(False, "--fetch-tags", help="Scrape missing tags from the store"),
    tags_only: bool = typer.Option(False, "--tags-only", help="Print the tags of the selection only"),
    no_auto_cache: bool = typer.Option(False, "--no-auto-cache", help="Skip fetching missing game details"),
) -> None:
    """List games owned by the given profiles."""
    try:
        aggregator = Aggregator.from_config(ctx.obj)
    except SteamCLIError as exc:
        logger.error("%s", exc)
        raise typer.Exit(1) from exc

    for identifier in ids:
        logger.debug("Adding new ID %s to aggregator", identifier)
        try:
            aggregator.add_client(identifier)
        except SteamCLIError as exc:
            logger.error("Could not add new client: %s", exc)

    if not no_auto_cache:
        try:
            aggregator.update_game_cache()
        except SteamCLIError as exc:
            logger.error("Could not update game cache: %s", exc)

    if fetch_tags:
        try:
            aggregator.update_game_tags()
        except SteamCLIError as exc:
            logger.error("Could not fetch game tags: %s", exc)

    selected = aggregator.select(tag, common, match_all, invalid)
    logger.debug("Selected %d games", len(selected))

    if tags_only:
        for name in all_tags(selected):
            typer.echo(name)
        return

    _print_games(selected)


@app.command("id")
def steam_id(
    text: str = typer.Argument(..., help="SteamID64, STEAM_X:Y:Z or [U:1:N]"),
    account: bool = typer.Option(False, "--account", "-a", help="Read TEXT as a 32-bit account ID"),
) -> None:
    """Show every representation of a Steam ID."""
    try:
        if account:
            if not (text.isascii() and text.isdigit()) or int(text) > 0xFFFFFFFF:
                raise SteamIDParseError(f"Not an account ID: '{text}'")
            text = str(account_id_to_steam_id64(int(text)))
        parsed = parse_steam_id(text)
    except SteamCLIError as exc:
        logger.error("%s", exc)
        raise typer.Exit(1) from exc

    typer.echo(f"SteamID64: {parsed.steam_id64}")
    typer.echo(f"Steam2:    {parsed.steam2}")
    typer.echo(f"Steam3:    {parsed.steam3}")
    # Account IDs only map back for public desktop individual accounts
    if account_id_to_steam_id64(parsed.account_id) == parsed.steam_id64:
        typer.echo(f"Account:   {steam_id64_to_account_id(parsed.steam_id64)}")
    if parsed.community_url:
        typer.echo(f"URL:       {parsed.community_url}")


@cache_games_app.command("info")
def cache_games_info(ctx: typer.Context) -> None:
    """Show game cache statistics."""
    cache = _open_cache(ctx)
    typer.echo("=== Game Cache Information ===")
    typer.echo(f"Total games: {len(cache.games)}")
    typer.echo(f"Unique tags: {len(cache.games.all_tags())}")


@cache_games_app.command("print")
def cache_games_print(
    ctx: typer.Context,
    tag: List[str] = typer.Option([], "--tag", "-t", help="Only games with this tag (repeatable)"),
    appid: List[int] = typer.Option([], "--appid", "-a", help="Only this app ID (repeatable)"),
    match_all: bool = typer.Option(False, "--and", help="Require every --tag instead of any"),
    invalid: bool = typer.Option(False, "--invalid", help="Include invalid games"),
) -> None:
    """Print cached games."""
    cache = _open_cache(ctx)
    _print_games(cache.games.select(tag, appid, match_all, invalid))


@cache_games_app.command("delete")
def cache_games_delete(
    ctx: typer.Context,
    appid: List[int] = typer.Option([], "--appid", "-a", help="App ID to remove (repeatable)"),
    name: List[str] = typer.Option([], "--name", "-n", help="Exact game name to remove (repeatable)"),
) -> None:
    """Remove games from the cache."""
    cache = _open_cache(ctx)

    removed = 0
    for app_id in appid:
        if cache.games.delete(app_id):
            removed += 1
        else:
            logger.error("Failed to remove game %d", app_id)

    for game_name in name:
        if cache.games.delete_by_name(game_name):
            removed += 1
        else:
            logger.error("Failed to remove game %r", game_name)

    _save_cache(cache)
    typer.echo(f"Removed {removed} games from cache (requested {len(appid) + len(name)})")


@cache_games_app.command("purge-invalid")
def cache_games_purge_invalid(ctx: typer.Context) -> None:
    """Remove every game the store refused to describe."""
    cache = _open_cache(ctx)
    purged = cache.games.purge_invalid()
    _save_cache(cache)
    typer.echo(f"Purged {purged} invalid games from cache")


@cache_games_app.command("purge-missing-tags")
def cache_games_purge_missing_tags(ctx: typer.Context) -> None:
    """Remove every game without tags."""
    cache = _open_cache(ctx)
    purged = cache.games.purge_missing_tags()
    _save_cache(cache)
    typer.echo(f"Purged {purged} games with missing tags from cache")


@cache_profiles_app.command("list")
def cache_profiles_list(ctx: typer.Context) -> None:
    """List cached profiles."""
    cache = _open_cache(ctx)
    table = Table(show_header=True, header_style="bold")
    table.add_column("SteamID64")
    table.add_column("Name")
    table.add_column("Vanity")
    table.add_column("Games", justify="right")
    table.add_column("Updated")
    for profile in cache.profiles:
        table.add_row(
            str(profile.steam_id64),
            profile.name,
            profile.custom_url,
            str(len(profile.games)),
            profile.updated.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@cache_profiles_app.command("remove")
def cache_profiles_remove(
    ctx: typer.Context,
    ids: List[str] = typer.Argument(..., help="SteamID64s or vanity names"),
) -> None:
    """Remove profiles from the cache so they are fetched again."""
    cache = _open_cache(ctx)
    removed = sum(1 for identifier in ids if cache.profiles.remove(identifier))
    _save_cache(cache)
    typer.echo(f"Removed {removed} profiles from cache (requested {len(ids)})")


def main() -> None:
    """Entry point for the steamcli console script."""
    app()


if __name__ == "__main__":
    main()
