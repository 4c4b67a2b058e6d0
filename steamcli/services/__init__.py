from __future__ import annotations

from steamcli.services.aggregator import Aggregator, Client

__all__: list[str] = [
    "Aggregator",
    "Client",
]
