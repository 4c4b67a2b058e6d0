"""JSON file I/O for the cache document.

Unlike best-effort settings files, the cache must never silently turn
into an empty document, so both helpers raise on failure.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

__all__ = ["read_json", "write_json"]

logger = logging.getLogger("steamcli.json_utils")


def read_json(path: Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the content is not valid JSON.
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: Any, ensure_parents: bool = True) -> int:
    """Serialize data and rewrite path with it (truncate, no temp file).

    Args:
        path: Target file path.
        data: Data to serialize as JSON.
        ensure_parents: Create parent directories if needed.

    Returns:
        Number of characters written.

    Raises:
        OSError: If the file cannot be opened or written.
        TypeError, ValueError: If data is not serializable.
    """
    payload = json.dumps(data, indent=2, ensure_ascii=False)
    if ensure_parents:
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        written = f.write(payload)
    logger.debug("Wrote %d characters to %s", written, path)
    return written
