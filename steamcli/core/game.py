# steamcli/core/game.py

"""Game record dataclasses stored in the game cache.

A GameRecord is the normalized form of one entry of the Steam Store
``appdetails`` response. Invalid records are placeholders for apps the
store refused to describe; their name is backfilled from a cached
profile where possible. Tags are not part of the store response and
stay ``None`` until the tag scraper has visited the game.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from steamcli.utils.date_utils import format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger("steamcli.game")

__all__ = [
    "Category",
    "GameRecord",
    "Platforms",
    "Price",
    "all_tags",
]


@dataclass(frozen=True)
class Price:
    """Price breakdown as reported by the store, amounts in cents."""

    currency: str = ""
    initial: int = 0
    final: int = 0
    discount_percent: int = 0
    initial_formatted: str = ""
    final_formatted: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Price:
        if not data:
            return cls()
        return cls(
            currency=str(data.get("currency", "")),
            initial=int(data.get("initial", 0) or 0),
            final=int(data.get("final", 0) or 0),
            discount_percent=int(data.get("discount_percent", 0) or 0),
            initial_formatted=str(data.get("initial_formatted", "")),
            final_formatted=str(data.get("final_formatted", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "initial": self.initial,
            "final": self.final,
            "discount_percent": self.discount_percent,
            "initial_formatted": self.initial_formatted,
            "final_formatted": self.final_formatted,
        }


@dataclass(frozen=True)
class Platforms:
    """Operating system support flags."""

    windows: bool = False
    mac: bool = False
    linux: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Platforms:
        if not data:
            return cls()
        return cls(
            windows=bool(data.get("windows", False)),
            mac=bool(data.get("mac", False)),
            linux=bool(data.get("linux", False)),
        )

    def to_dict(self) -> dict[str, bool]:
        return {"windows": self.windows, "mac": self.mac, "linux": self.linux}


@dataclass(frozen=True)
class Category:
    """A store category such as "Single-player" or "Steam Cloud"."""

    id: int
    description: str = ""


def _normalize_required_age(value: Any) -> int:
    """Converts the store's required_age into an int.

    The store sends either an int or a numeric string.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            logger.debug("Couldn't convert required_age %r to int", value)
    return 0


@dataclass
class GameRecord:
    """One cached game.

    Attributes:
        app_id: Steam app ID the store reported (may differ from the
            cache key it was requested under).
        name: Display name, empty when unknown.
        invalid: True when the store reported the app as unsuccessful.
        tags: User tags from the store page, None until fetched.
        categories: Store categories in the order the store lists them.
        updated: When the record was fetched (aware UTC).
    """

    app_id: int
    name: str = ""
    invalid: bool = False
    type: str = ""
    required_age: int = 0
    description: str = ""
    short_description: str = ""
    supported_languages: str = ""
    website: str = ""
    developers: list[str] = field(default_factory=list)
    publishers: list[str] = field(default_factory=list)
    price: Price = field(default_factory=Price)
    platforms: Platforms = field(default_factory=Platforms)
    categories: list[Category] = field(default_factory=list)
    tags: list[str] | None = None
    updated: datetime = field(default_factory=utc_now)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameRecord:
        """Builds a record from a cache entry or a store ``data`` object.

        Args:
            data: Decoded JSON object using the store's field names.

        Returns:
            The parsed record. A missing timestamp means "fetched now".
        """
        tags = data.get("tags")
        updated = parse_timestamp(data.get("updated"))
        return cls(
            app_id=int(data.get("steam_appid", 0) or 0),
            name=str(data.get("name") or ""),
            invalid=bool(data.get("_is_invalid", False)),
            type=str(data.get("type") or ""),
            required_age=_normalize_required_age(data.get("required_age", 0)),
            description=str(data.get("detailed_description") or ""),
            short_description=str(data.get("short_description") or ""),
            supported_languages=str(data.get("supported_languages") or ""),
            website=str(data.get("website") or ""),
            developers=list(data.get("developers") or []),
            publishers=list(data.get("publishers") or []),
            price=Price.from_dict(data.get("price_overview")),
            platforms=Platforms.from_dict(data.get("platforms")),
            categories=[
                Category(id=int(c.get("id", 0)), description=str(c.get("description", "")))
                for c in data.get("categories") or []
            ],
            tags=list(tags) if tags is not None else None,
            updated=updated if updated is not None else utc_now(),
        )

    @classmethod
    def placeholder(cls, app_id: int, name: str = "") -> GameRecord:
        """Invalid record for an app the store would not describe."""
        return cls(app_id=app_id, name=name, invalid=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "_is_invalid": self.invalid,
            "type": self.type,
            "name": self.name,
            "steam_appid": self.app_id,
            "required_age": self.required_age,
            "detailed_description": self.description,
            "short_description": self.short_description,
            "supported_languages": self.supported_languages,
            "website": self.website,
            "developers": list(self.developers),
            "publishers": list(self.publishers),
            "price_overview": self.price.to_dict(),
            "platforms": self.platforms.to_dict(),
            "categories": [{"id": c.id, "description": c.description} for c in self.categories],
            "tags": list(self.tags) if self.tags is not None else None,
            "updated": format_timestamp(self.updated),
        }

    def category_names(self) -> list[str]:
        """Returns category descriptions in store order."""
        return [c.description for c in self.categories]

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive tag membership."""
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags or ())


def all_tags(records: Iterable[GameRecord]) -> list[str]:
    """Returns the unique tags of the given records, lower-cased and sorted."""
    tags = {tag.lower() for record in records for tag in record.tags or ()}
    return sorted(tags)
