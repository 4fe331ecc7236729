"""
Record store abstraction: one JSON document per record name.

Records are read and written wholesale. There is no locking, versioning or
schema validation; the last completed write wins.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol


class RecordStore(Protocol):
    """Defines the operations the board needs from record storage."""

    def read(self, name: str, fallback: Any) -> Any:
        ...

    def write(self, name: str, value: Any) -> None:
        ...


@dataclass
class InMemoryRecordStore:
    """Test double for record storage."""

    records: dict[str, str] = field(default_factory=dict)

    def read(self, name: str, fallback: Any) -> Any:
        raw = self.records.get(name)
        if raw is None:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            return fallback

    def write(self, name: str, value: Any) -> None:
        # Keep the serialized text to mimic the file-backed store.
        self.records[name] = json.dumps(value, indent=2)

    def reset(self) -> None:
        """Clear all stored records (useful in tests)."""
        self.records.clear()


@dataclass
class JsonFileRecordStore:
    """
    Stores each record as ``<data_dir>/<name>``, pretty-printed JSON.
    """

    data_dir: str = "."

    def __post_init__(self):
        self._root = Path(self.data_dir)
        self._root.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self._root / name

    def read(self, name: str, fallback: Any) -> Any:
        path = self.path_for(name)
        if not path.exists():
            return fallback
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return fallback

    def write(self, name: str, value: Any) -> None:
        body = json.dumps(value, indent=2)
        path = self.path_for(name)
        # Write next to the target and swap it in, so readers never observe
        # a half-written document.
        fd, tmp_name = tempfile.mkstemp(
            dir=self._root, prefix=f".{name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(body)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
