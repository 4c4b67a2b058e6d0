"""steamcli - aggregate and query Steam game ownership across profiles."""

from __future__ import annotations

from steamcli.version import __version__

__all__ = ["__version__"]
