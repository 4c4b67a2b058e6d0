from __future__ import annotations

__all__: list[str] = ["SteamCommunityResolver", "SteamStoreClient", "StoreDetail"]

from steamcli.integrations.steam_community import SteamCommunityResolver
from steamcli.integrations.steam_store import SteamStoreClient, StoreDetail
