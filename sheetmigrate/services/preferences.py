from __future__ import annotations

import json
import logging
from pathlib import Path

"""Remembered paths ("last used source / target") stored as a small JSON file.

The preferences object is created by the CLI and injected into the PathSelector;
nothing else reads or writes the file.
"""

__all__ = [
    "PathPreferences",
]

logger = logging.getLogger(__name__)


class PathPreferences:
    """Key -> last used path, optionally persisted to ``path``.

    With ``path=None`` values live in memory only (nothing is written).
    A missing or unreadable file starts empty; the problem is logged at WARN.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._values: dict[str, str] = {}
        self._dirty = False

    def load(self) -> PathPreferences:
        if self.path is None or not self.path.exists():
            return self
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"ignoring unreadable preferences file {self.path}: {e}")
            return self
        if isinstance(data, dict):
            self._values = {str(k): str(v) for k, v in data.items() if isinstance(v, str)}
        return self

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def remember(self, key: str, value: str) -> None:
        if self._values.get(key) != value:
            self._values[key] = value
            self._dirty = True

    def save(self) -> Path | None:
        if self.path is None or not self._dirty:
            return None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._values, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"could not save preferences to {self.path}: {e}")
            return None
        self._dirty = False
        return self.path
