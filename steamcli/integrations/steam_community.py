"""Steam Community profile resolver.

Turns a caller-supplied identifier (SteamID64, Steam2/Steam3 ID, vanity
name or profile URL) into a Profile with its owned games, using the
community site's XML views (``?xml=1``). Works for public profiles
only; no API key or login is involved.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ElementTree
from urllib.parse import quote

import requests

from steamcli.core.errors import ProfileResolutionError, SteamIDParseError
from steamcli.core.profile import Profile, ProfileGame
from steamcli.utils.date_utils import parse_member_since, utc_now
from steamcli.utils.steam_id import ACCOUNT_TYPE_INDIVIDUAL, is_steam_id64, parse_steam_id

logger = logging.getLogger("steamcli.steam_community")

__all__ = ["SteamCommunityResolver"]


class SteamCommunityResolver:
    """Resolves identifiers into profiles via steamcommunity.com."""

    BASE_URL = "https://steamcommunity.com"

    _HEADERS: dict[str, str] = {
        "Accept": "application/xml,text/xml",
        "Accept-Language": "en-US,en;q=0.9",
        "User-Agent": "steamcli/1.0",
    }

    _URL_PATTERN: re.Pattern[str] = re.compile(r"steamcommunity\.com/(id|profiles)/([^/?#\s]+)")

    def __init__(self, timeout: float = 15.0, session: requests.Session | None = None) -> None:
        """Initialize the resolver.

        Args:
            timeout: Seconds to wait for each request.
            session: Optional preconfigured session (tests inject a mock).
        """
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(self._HEADERS)

    def resolve(self, identifier: str) -> Profile:
        """Fetch the profile and owned games for identifier.

        Args:
            identifier: SteamID64, Steam2/Steam3 ID, vanity name or profile URL.

        Returns:
            The profile, stamped with the current time.

        Raises:
            ProfileResolutionError: On any transport, HTTP or decoding
                failure, or when Steam reports an error for the profile.
        """
        path = self.profile_path(identifier)
        logger.debug("Resolving %s via /%s", identifier, path)

        root = self._get_xml(identifier, f"{self.BASE_URL}/{path}", {"xml": "1"})
        profile = self._parse_profile(identifier, root)

        games_url = f"{self.BASE_URL}/profiles/{profile.steam_id64}/games"
        games_root = self._get_xml(identifier, games_url, {"xml": "1", "tab": "all"})
        profile.games = self._parse_games(identifier, games_root)
        logger.debug("Retrieved %d games for %s", len(profile.games), profile.name)

        return profile

    def profile_path(self, identifier: str) -> str:
        """Returns ``profiles/<id64>`` or ``id/<vanity>`` for identifier."""
        text = identifier.strip()

        match = self._URL_PATTERN.search(text)
        if match:
            kind, value = match.groups()
            return f"{kind}/{quote(value)}"

        if is_steam_id64(text):
            return f"profiles/{text}"

        if not (text.isascii() and text.isdigit()):
            try:
                steam_id = parse_steam_id(text)
            except SteamIDParseError:
                pass
            else:
                if steam_id.account_type == ACCOUNT_TYPE_INDIVIDUAL:
                    return f"profiles/{steam_id.steam_id64}"

        return f"id/{quote(text)}"

    def _get_xml(self, identifier: str, url: str, params: dict[str, str]) -> ElementTree.Element:
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return ElementTree.fromstring(response.content)
        except requests.RequestException as exc:
            raise ProfileResolutionError(identifier, f"could not perform request: {exc}") from exc
        except ElementTree.ParseError as exc:
            raise ProfileResolutionError(identifier, f"could not decode XML: {exc}") from exc

    @staticmethod
    def _text(element: ElementTree.Element, tag: str) -> str:
        child = element.find(tag)
        if child is None or child.text is None:
            return ""
        return child.text.strip()

    def _parse_profile(self, identifier: str, root: ElementTree.Element) -> Profile:
        error = self._text(root, "error")
        if error:
            raise ProfileResolutionError(identifier, error)
        if root.tag != "profile":
            raise ProfileResolutionError(identifier, f"unexpected document <{root.tag}>")

        raw_id = self._text(root, "steamID64")
        if not (raw_id.isascii() and raw_id.isdigit()) or int(raw_id) == 0:
            raise ProfileResolutionError(identifier, "could not decode profile")

        visibility = self._text(root, "visibilityState")
        return Profile(
            steam_id64=int(raw_id),
            name=self._text(root, "steamID"),
            custom_url=self._text(root, "customURL"),
            status=self._text(root, "stateMessage"),
            privacy=self._text(root, "privacyState"),
            visibility_state=int(visibility) if visibility.isascii() and visibility.isdigit() else 0,
            vac_banned=self._text(root, "vacBanned") == "1",
            trade_ban=self._text(root, "tradeBanState"),
            is_limited=self._text(root, "isLimitedAccount") == "1",
            member_since=parse_member_since(self._text(root, "memberSince")),
            location=self._text(root, "location"),
            updated=utc_now(),
        )

    def _parse_games(self, identifier: str, root: ElementTree.Element) -> dict[int, ProfileGame]:
        error = self._text(root, "error")
        if error:
            raise ProfileResolutionError(identifier, f"could not retrieve profile's games: {error}")

        games: dict[int, ProfileGame] = {}
        for element in root.iter("game"):
            raw_id = self._text(element, "appID")
            if not (raw_id.isascii() and raw_id.isdigit()):
                logger.debug("Skipping game entry without app ID")
                continue
            app_id = int(raw_id)
            games[app_id] = ProfileGame(
                app_id=app_id,
                name=self._text(element, "name"),
                playtime_total=self._text(element, "hoursOnRecord"),
                playtime_two_weeks=self._text(element, "hoursLast2Weeks"),
            )
        return games
