"""
Basic file-system utilities shared across the pipeline.

Provides helpers for creating parent directories and reading/writing JSON
payloads in UTF-8 (Arabic text is stored unescaped).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def ensure_parent(path: str | Path) -> None:
    """
    Ensure that the parent directory for the given path exists.

    Args:
      path: Target file path whose parent should be created.
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def write_json(path: str | Path, obj: Any) -> None:
    """
    Write a JSON value to disk using UTF-8 encoding.

    The payload is written to a sibling temporary file first and then moved
    into place, so readers never observe a half-written record.

    Args:
      path: Destination file path.
      obj: JSON-serializable value to persist.
    """
    ensure_parent(path)
    tmp_path = Path(f"{path}.tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)
    tmp_path.replace(path)


def read_json(path: str | Path) -> Any:
    """
    Read and parse a JSON file using UTF-8 encoding.

    Args:
      path: Source file path.

    Returns:
      The decoded JSON value (usually a dict or list).
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)
