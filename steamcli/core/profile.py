"""Steam community profile records.

A Profile is what the community XML endpoint tells us about one account
plus the games it owns. Profiles are identified by their SteamID64; the
vanity name ("customURL") is only a lookup alias.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from steamcli.utils.date_utils import format_timestamp, parse_timestamp, utc_now

__all__ = ["Profile", "ProfileGame"]


@dataclass(frozen=True)
class ProfileGame:
    """A game entry from a profile's games list.

    Args:
        app_id: Steam application ID.
        name: Game display name.
        playtime_total: Hours on record as Steam formats it ("1,234.5").
        playtime_two_weeks: Hours played in the last two weeks.
    """

    app_id: int
    name: str
    playtime_total: str = ""
    playtime_two_weeks: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProfileGame:
        return cls(
            app_id=int(data.get("appID", 0)),
            name=str(data.get("name", "")),
            playtime_total=str(data.get("playtime_total", "")),
            playtime_two_weeks=str(data.get("playtime_two_weeks", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "appID": self.app_id,
            "playtime_total": self.playtime_total,
            "playtime_two_weeks": self.playtime_two_weeks,
        }


@dataclass
class Profile:
    """A resolved Steam community profile.

    Attributes:
        steam_id64: Unique 64-bit account identity.
        name: Display name ("steamID" in the community XML).
        custom_url: Vanity name, empty if the account has none.
        games: Owned games keyed by app ID.
        updated: When the profile was fetched (aware UTC).
    """

    steam_id64: int
    name: str = ""
    custom_url: str = ""
    status: str = ""
    privacy: str = ""
    visibility_state: int = 0
    vac_banned: bool = False
    trade_ban: str = ""
    is_limited: bool = False
    member_since: date | None = None
    location: str = ""
    games: dict[int, ProfileGame] = field(default_factory=dict)
    updated: datetime = field(default_factory=utc_now)

    def owned_ids(self) -> set[int]:
        return set(self.games)

    def matches(self, id_text: str) -> bool:
        """True if id_text is this profile's SteamID64 or vanity name (any case)."""
        text = id_text.strip()
        if text.isascii() and text.isdigit() and int(text) == self.steam_id64:
            return True
        return bool(self.custom_url) and self.custom_url.lower() == text.lower()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        member_since = data.get("memberSince")
        updated = parse_timestamp(data.get("updated"))
        games = {}
        for key, value in (data.get("games") or {}).items():
            game = ProfileGame.from_dict(value)
            games[int(key)] = game
        return cls(
            steam_id64=int(data.get("steamID64", 0)),
            name=str(data.get("steamID", "")),
            custom_url=str(data.get("customURL", "")),
            status=str(data.get("stateMessage", "")),
            privacy=str(data.get("privacyState", "")),
            visibility_state=int(data.get("visibilityState", 0) or 0),
            vac_banned=bool(data.get("vacBanned", False)),
            trade_ban=str(data.get("tradeBanState", "")),
            is_limited=bool(data.get("isLimitedAccount", False)),
            member_since=date.fromisoformat(member_since) if member_since else None,
            location=str(data.get("location", "")),
            games=games,
            updated=updated if updated is not None else utc_now(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "steamID": self.name,
            "steamID64": self.steam_id64,
            "customURL": self.custom_url,
            "stateMessage": self.status,
            "privacyState": self.privacy,
            "visibilityState": self.visibility_state,
            "vacBanned": self.vac_banned,
            "tradeBanState": self.trade_ban,
            "isLimitedAccount": self.is_limited,
            "memberSince": self.member_since.isoformat() if self.member_since else None,
            "location": self.location,
            "games": {str(app_id): game.to_dict() for app_id, game in self.games.items()},
            "updated": format_timestamp(self.updated),
        }
