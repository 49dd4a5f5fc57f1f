"""
JSON file helpers shared by the stores.
"""

import json
import os
from pathlib import Path
from typing import Any

from ..exceptions import StoreError


def read_json(path: Path, default: Any) -> Any:
    """
    Read a JSON file.

    Returns:
        Decoded content, or `default` when the file is missing or empty

    Raises:
        StoreError: the file exists but is not valid JSON
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    except OSError as e:
        raise StoreError(f"Cannot read {path}: {e}") from e

    if not text.strip():
        return default
    try:
        return json.loads(text)
    except ValueError as e:
        raise StoreError(f"Corrupt JSON in {path}: {e}") from e


def write_json_atomic(path: Path, data: Any, indent: int = 2):
    """Write JSON via a temp file and os.replace so readers never see half a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_name(path.name + ".tmp")
    with open(temp_file, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)
    os.replace(temp_file, path)
