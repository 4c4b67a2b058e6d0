# steamcli/utils/steam_id.py

"""Parsing and conversion between the textual forms of a Steam ID.

Supported inputs:
    - SteamID64, e.g. ``76561197960287930``
    - Steam2 / legacy triplet, e.g. ``STEAM_0:0:11101``
    - Steam3, e.g. ``[U:1:22202]``

A SteamID64 packs four fields, from the most significant bits down:
universe (8 bits), account type (4), instance (20), account ID (32).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from steamcli.core.errors import SteamIDParseError

__all__ = [
    "SteamID",
    "parse_steam_id",
    "is_steam_id64",
    "account_id_to_steam_id64",
    "steam_id64_to_account_id",
    "STEAM_ID_BASE",
]

# SteamID64 of account ID 0 in the public universe
STEAM_ID_BASE = 76561197960265728

UNIVERSE_PUBLIC = 1
UNIVERSE_MAX = 5

ACCOUNT_TYPE_INDIVIDUAL = 1
ACCOUNT_TYPE_CLAN = 7
ACCOUNT_TYPE_MAX = 10

DESKTOP_INSTANCE = 1

# Steam3 letter <-> account type
_TYPE_LETTERS: dict[str, int] = {
    "I": 0,
    "U": 1,
    "M": 2,
    "G": 3,
    "A": 4,
    "P": 5,
    "C": 6,
    "g": 7,
    "T": 8,
    "a": 10,
}
_LETTER_FOR_TYPE: dict[int, str] = {v: k for k, v in _TYPE_LETTERS.items()}

_STEAM2_PATTERN = re.compile(r"^STEAM_(\d+):([01]):(\d+)$", re.ASCII)
_STEAM3_PATTERN = re.compile(r"^\[([A-Za-z]):(\d+):(\d+)(?::(\d+))?\]$", re.ASCII)


@dataclass(frozen=True)
class SteamID:
    """A decoded Steam ID.

    Attributes:
        universe: Steam universe (1 = public).
        account_type: Account type (1 = individual, 7 = clan).
        instance: Account instance (1 for desktop accounts).
        account_id: 32-bit account number.
    """

    universe: int
    account_type: int
    instance: int
    account_id: int

    @property
    def steam_id64(self) -> int:
        return (self.universe << 56) | (self.account_type << 52) | (self.instance << 32) | self.account_id

    @property
    def steam2(self) -> str:
        """Legacy ``STEAM_X:Y:Z`` form."""
        return f"STEAM_{self.universe}:{self.account_id & 1}:{self.account_id >> 1}"

    @property
    def steam3(self) -> str:
        """Modern ``[L:U:N]`` form."""
        letter = _LETTER_FOR_TYPE.get(self.account_type, "I")
        return f"[{letter}:{self.universe}:{self.account_id}]"

    @property
    def community_url(self) -> str:
        """Profile or group page for individual and clan accounts, else empty."""
        if self.account_type == ACCOUNT_TYPE_INDIVIDUAL:
            return f"https://steamcommunity.com/profiles/{self.steam_id64}"
        if self.account_type == ACCOUNT_TYPE_CLAN:
            return f"https://steamcommunity.com/gid/{self.steam_id64}"
        return ""

    @classmethod
    def from_steam_id64(cls, value: int) -> SteamID:
        """Decodes a SteamID64.

        Raises:
            SteamIDParseError: If the universe or account type is out of range.
        """
        if value <= 0 or value >= 1 << 64:
            raise SteamIDParseError(f"SteamID64 out of range: {value}")
        steam_id = cls(
            universe=(value >> 56) & 0xFF,
            account_type=(value >> 52) & 0xF,
            instance=(value >> 32) & 0xFFFFF,
            account_id=value & 0xFFFFFFFF,
        )
        if not 0 < steam_id.universe <= UNIVERSE_MAX:
            raise SteamIDParseError(f"Invalid universe {steam_id.universe} in {value}")
        if not 0 < steam_id.account_type <= ACCOUNT_TYPE_MAX:
            raise SteamIDParseError(f"Invalid account type {steam_id.account_type} in {value}")
        return steam_id


def parse_steam_id(text: str) -> SteamID:
    """Parses any supported Steam ID representation.

    Args:
        text: SteamID64, ``STEAM_X:Y:Z`` or ``[L:U:N]``.

    Returns:
        The decoded SteamID.

    Raises:
        SteamIDParseError: If the text matches none of the forms.
    """
    value = text.strip()
    if value == "STEAM_ID_PENDING":
        raise SteamIDParseError("Cannot parse PENDING triplets")
    if value == "UNKNOWN":
        raise SteamIDParseError("This ID is invalid (UNKNOWN)")

    if value.isascii() and value.isdigit():
        return SteamID.from_steam_id64(int(value))

    match = _STEAM2_PATTERN.match(value)
    if match:
        universe = int(match.group(1)) or UNIVERSE_PUBLIC
        if universe > UNIVERSE_MAX:
            raise SteamIDParseError(f"Invalid universe in {value}")
        account_id = int(match.group(3)) * 2 + int(match.group(2))
        if account_id > 0xFFFFFFFF:
            raise SteamIDParseError(f"Account number out of range in {value}")
        return SteamID(universe, ACCOUNT_TYPE_INDIVIDUAL, DESKTOP_INSTANCE, account_id)

    match = _STEAM3_PATTERN.match(value)
    if match:
        letter, universe, account_id, instance = match.groups()
        if letter not in _TYPE_LETTERS:
            raise SteamIDParseError(f"Unknown account type letter '{letter}' in {value}")
        account_type = _TYPE_LETTERS[letter]
        if instance is None:
            instance = DESKTOP_INSTANCE if account_type == ACCOUNT_TYPE_INDIVIDUAL else 0
        steam_id = SteamID(int(universe), account_type, int(instance), int(account_id))
        if not 0 < steam_id.universe <= UNIVERSE_MAX or steam_id.account_id > 0xFFFFFFFF:
            raise SteamIDParseError(f"Steam3 ID out of range: {value}")
        return steam_id

    raise SteamIDParseError(f"Couldn't determine ID type of '{value}'")


def is_steam_id64(text: str) -> bool:
    """True if text is the SteamID64 of an individual account."""
    value = text.strip()
    if not (value.isascii() and value.isdigit()):
        return False
    try:
        return SteamID.from_steam_id64(int(value)).account_type == ACCOUNT_TYPE_INDIVIDUAL
    except SteamIDParseError:
        return False


def account_id_to_steam_id64(account_id: int) -> int:
    """Convert a 32-bit account ID to the SteamID64 of a public individual account."""
    return account_id + STEAM_ID_BASE


def steam_id64_to_account_id(steam_id_64: int) -> int:
    """Convert SteamID64 back to the 32-bit account ID."""
    return steam_id_64 - STEAM_ID_BASE
