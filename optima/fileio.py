"""Atomic YAML/JSON file I/O for Optima's stored state."""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_json(path: Path) -> Any:
    """Read a JSON document, returning an empty dict if the file is missing or blank."""
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    return json.loads(text) if text.strip() else {}


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning an empty dict if missing, blank or not a mapping."""
    if not path.exists():
        return {}
    result = yaml.safe_load(path.read_text(encoding="utf-8"))
    return result if isinstance(result, dict) else {}


def _replace_atomically(path: Path, content: str, suffix: str) -> None:
    """Write to a locked temp file in the same directory, fsync, then rename over *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_json_atomic(path: Path, data: Any) -> None:
    _replace_atomically(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", ".json")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    content = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _replace_atomically(path, content, ".yaml")
