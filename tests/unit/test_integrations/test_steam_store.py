"""Tests for SteamStoreClient."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from steamcli.core.errors import StoreRequestError, TagFetchError
from steamcli.integrations.steam_store import SteamStoreClient

DETAILS = {
    "10": {
        "success": True,
        "data": {
            "type": "game",
            "name": "Counter-Strike",
            "steam_appid": 10,
            "required_age": 0,
            "developers": ["Valve"],
            "categories": [{"id": 1, "description": "Multi-player"}],
        },
    },
    "20": {"success": False},
}

STORE_PAGE = """
<html><head>
<meta property="og:url" content="https://store.steampowered.com/app/10/CounterStrike/">
</head><body>
<div class="glance_tags popular_tags">
    <a href="#" class="app_tag">
        Action
    </a>
    <a href="#" class="app_tag">FPS</a>
    <a href="#" class="app_tag"> </a>
    <div class="app_tag add_button">+</div>
    <a href="#" class="app_tag">+</a>
</div>
</body></html>
"""


def _response(text: str, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.text = text
    response.raise_for_status.return_value = None
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(session) -> SteamStoreClient:
    return SteamStoreClient(timeout=2.0, language="german", session=session)


class TestInit:
    """Tests for session setup."""

    def test_sets_age_gate_and_language_cookies(self, session) -> None:
        """Age gate and language cookies are scoped to the store."""
        SteamStoreClient(language="german", session=session)
        names = {call.args[0] for call in session.cookies.set.call_args_list}
        assert names == {"birthtime", "lastagecheckage", "wants_mature_content", "Steam_Language"}
        session.cookies.set.assert_any_call("Steam_Language", "german", domain="store.steampowered.com", path="/")


class TestFetchDetails:
    """Tests for SteamStoreClient.fetch_details."""

    def test_batch_request(self, client, session) -> None:
        """All IDs go into one request with the language parameter."""
        session.get.return_value = _response("{...}", DETAILS)

        result = client.fetch_details([10, 20])

        session.get.assert_called_once_with(
            SteamStoreClient.DETAILS_URL,
            params={"appids": "10,20", "l": "german"},
            timeout=2.0,
        )
        assert result["10"].success is True
        assert result["10"].record.name == "Counter-Strike"
        assert result["10"].record.developers == ["Valve"]
        assert result["10"].record.tags is None
        assert result["20"].success is False
        assert result["20"].record is None

    def test_success_without_data(self, client, session) -> None:
        """A success flag with no payload counts as unsuccessful."""
        session.get.return_value = _response("{...}", {"30": {"success": True, "data": []}})
        assert client.fetch_details([30])["30"].success is False

    def test_null_body(self, client, session) -> None:
        """A null body signals rate limiting."""
        session.get.return_value = _response("null", None)
        with pytest.raises(StoreRequestError, match="rate limit"):
            client.fetch_details([10])

    def test_transport_error(self, client, session) -> None:
        """Network failures are wrapped."""
        session.get.side_effect = requests.Timeout("slow")
        with pytest.raises(StoreRequestError):
            client.fetch_details([10])

    def test_http_error(self, client, session) -> None:
        """HTTP status errors are wrapped."""
        response = _response("", {})
        response.raise_for_status.side_effect = requests.HTTPError("429")
        session.get.return_value = response
        with pytest.raises(StoreRequestError):
            client.fetch_details([10])

    def test_bad_json(self, client, session) -> None:
        """Undecodable bodies are wrapped."""
        session.get.return_value = _response("<html>", ValueError("no json"))
        with pytest.raises(StoreRequestError, match="decode"):
            client.fetch_details([10])

    def test_unexpected_shape(self, client, session) -> None:
        """A JSON list is not a valid details response."""
        session.get.return_value = _response("[]", [])
        with pytest.raises(StoreRequestError):
            client.fetch_details([10])


class TestFetchTags:
    """Tests for SteamStoreClient.fetch_tags."""

    def test_scrapes_tags_in_order(self, client, session) -> None:
        """Tag texts are stripped, blanks and '+' are skipped."""
        session.get.return_value = _response(STORE_PAGE)
        assert client.fetch_tags(10) == ["Action", "FPS"]
        session.get.assert_called_once_with("https://store.steampowered.com/app/10", timeout=2.0)

    def test_valid_page_without_tags(self, client, session) -> None:
        """A valid page with no tags yields an empty list."""
        session.get.return_value = _response(
            '<html><head><meta content="https://store.steampowered.com/app/10"></head></html>'
        )
        assert client.fetch_tags(10) == []

    def test_validity_check_fails(self, client, session) -> None:
        """A page for another app is rejected."""
        session.get.return_value = _response(STORE_PAGE)
        with pytest.raises(TagFetchError, match="validity"):
            client.fetch_tags(1)

    def test_validity_check_requires_exact_id(self, client, session) -> None:
        """The app ID must not be a prefix of the page's ID."""
        page = STORE_PAGE.replace("/app/10/", "/app/100/")
        session.get.return_value = _response(page)
        with pytest.raises(TagFetchError):
            client.fetch_tags(10)

    def test_network_error(self, client, session) -> None:
        """Network failures become TagFetchError."""
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(TagFetchError) as exc_info:
            client.fetch_tags(10)
        assert exc_info.value.app_id == 10
