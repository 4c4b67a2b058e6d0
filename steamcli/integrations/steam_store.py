# steamcli/integrations/steam_store.py

"""
Steam Store integration for game details and user tags.

Details come from the store's ``appdetails`` JSON endpoint, which takes
a comma separated list of app IDs. Tags are not part of that response,
so they are scraped from the human-readable store page of each game.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests
from bs4 import BeautifulSoup

from steamcli.core.errors import StoreRequestError, TagFetchError
from steamcli.core.game import GameRecord

logger = logging.getLogger("steamcli.steam_store")


__all__ = ["SteamStoreClient", "StoreDetail"]


@dataclass(frozen=True)
class StoreDetail:
    """One entry of an appdetails response.

    Attributes:
        success: False when the store refused to describe the app.
        record: The parsed record when success is True, else None.
    """

    success: bool
    record: GameRecord | None = None


class SteamStoreClient:
    """
    Fetches game details and tags from the Steam Store.

    Every request blocks for at most ``timeout`` seconds. Pacing between
    requests is left to the caller.
    """

    DETAILS_URL = "https://store.steampowered.com/api/appdetails/"
    APP_URL = "https://store.steampowered.com/app/"

    # Age gate bypass, otherwise mature games render the gate instead of the tags
    AGE_GATE_COOKIES = {
        "birthtime": "156729601",
        "lastagecheckage": "1-0-1987",
        "wants_mature_content": "1",
    }

    def __init__(self, timeout: float = 15.0, language: str = "english", session: requests.Session | None = None):
        """
        Initializes the SteamStoreClient.

        Args:
            timeout (float): Seconds to wait for each request.
            language (str): Steam's internal language name for tags.
            session (requests.Session | None): Optional preconfigured session.
        """
        self.timeout = timeout
        self.language = language
        self._session = session or requests.Session()
        for name, value in {**self.AGE_GATE_COOKIES, "Steam_Language": language}.items():
            self._session.cookies.set(name, value, domain="store.steampowered.com", path="/")

    def fetch_details(self, app_ids: list[int]) -> dict[str, StoreDetail]:
        """
        Fetches store details for a batch of apps in a single request.

        Args:
            app_ids (list[int]): The app IDs to describe.

        Returns:
            dict[str, StoreDetail]: Entries keyed by the requested ID as a
                string. A successful record's own app ID may differ from
                its key.

        Raises:
            StoreRequestError: On transport or HTTP failure, an undecodable
                body, or a ``null`` body (rate limited, or too many IDs).
        """
        ids = ",".join(str(i) for i in app_ids)
        logger.debug("Fetching store details for %s", ids)

        try:
            response = self._session.get(
                self.DETAILS_URL,
                params={"appids": ids, "l": self.language},
                timeout=self.timeout,
            )
            logger.debug("Got response %d", response.status_code)
            response.raise_for_status()
            body = response.text
        except requests.RequestException as e:
            raise StoreRequestError(f"could not retrieve data from the store: {e}") from e

        if body.strip() == "null":
            raise StoreRequestError("rate limit exceeded or unsupported parallelisation number used")

        try:
            data = response.json()
        except ValueError as e:
            raise StoreRequestError(f"couldn't decode json: {e}") from e

        if not isinstance(data, dict):
            raise StoreRequestError(f"unexpected store response of type {type(data).__name__}")

        return {key: self._parse_entry(key, entry) for key, entry in data.items()}

    @staticmethod
    def _parse_entry(key: str, entry: Any) -> StoreDetail:
        if not isinstance(entry, dict) or not entry.get("success"):
            return StoreDetail(success=False)

        payload = entry.get("data")
        if not isinstance(payload, dict):
            logger.warning("Store reported success for %s without data", key)
            return StoreDetail(success=False)

        try:
            return StoreDetail(success=True, record=GameRecord.from_dict(payload))
        except (TypeError, ValueError) as e:
            raise StoreRequestError(f"couldn't decode details for {key}: {e}") from e

    def fetch_tags(self, app_id: int) -> list[str]:
        """
        Scrapes the user tags of one game from its store page.

        Args:
            app_id (int): The Steam app ID.

        Returns:
            list[str]: Tag names in page order. Empty if the page is valid
                but lists no tags.

        Raises:
            TagFetchError: If the page cannot be fetched or is not the
                store page of app_id (age gate, region lock, redirect).
        """
        url = f"{self.APP_URL}{app_id}"
        logger.debug("Retrieving tags from %s", url)

        try:
            response = self._session.get(url, timeout=self.timeout)
            logger.debug("Got response %d", response.status_code)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TagFetchError(app_id, f"could not retrieve data from the store: {e}") from e

        soup = BeautifulSoup(response.text, "html.parser")

        if not self._is_store_page(soup, app_id):
            logger.debug("Validity check failed for %d", app_id)
            raise TagFetchError(app_id, "returned page did not pass validity check")

        tags = []
        for element in soup.select("a.app_tag"):
            text = element.get_text().strip()
            if text and text != "+":
                tags.append(text)

        if not tags:
            logger.warning("Did not find any tags for %d", app_id)
        return tags

    def _is_store_page(self, soup: BeautifulSoup, app_id: int) -> bool:
        prefix = f"{self.APP_URL}{app_id}"
        for meta in soup.find_all("meta"):
            content = meta.get("content")
            if isinstance(content, str) and content.startswith(prefix):
                rest = content[len(prefix):]
                if not rest or rest[0] in "/?#":
                    return True
        return False
