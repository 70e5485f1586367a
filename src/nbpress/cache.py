"""Persistent fingerprint cache gating notebook reconversion."""

import json
import logging
from pathlib import Path

from nbpress.output import atomic_write

logger = logging.getLogger(__name__)

# Bump whenever the rendered output changes so every cached entry misses.
SCHEMA_VERSION = "3"


class CacheStore:
    """Filename to fingerprint mapping, persisted as a JSON object.

    Values are stored as ``"<schema version>:<fingerprint>"``. An entry written
    by a different schema version never matches.
    """

    def __init__(self, path: Path | str, schema_version: str = SCHEMA_VERSION):
        """Initialize the cache store.

        Args:
            path: Location of the JSON cache file
            schema_version: Version tag mixed into every stored value
        """
        self.path = Path(path)
        self.schema_version = schema_version
        self._entries: dict[str, str] = {}

    def load(self) -> dict[str, str]:
        """Read the cache file.

        A missing file yields an empty cache. An unreadable or malformed file
        is logged and also yields an empty cache, so everything is reconverted.

        Returns:
            dict[str, str]: Copy of the loaded entries
        """
        self._entries = {}
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load cache %s, starting empty: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Cache %s is not a JSON object, starting empty", self.path)
            return {}

        self._entries = {k: v for k, v in data.items() if isinstance(v, str)}
        return dict(self._entries)

    def tag(self, fingerprint: str) -> str:
        """Return the stored form of a fingerprint."""
        return f"{self.schema_version}:{fingerprint}"

    def should_skip(self, filename: str, fingerprint: str) -> bool:
        """Return True if the file was already converted with this content."""
        return self._entries.get(filename) == self.tag(fingerprint)

    def record(self, filename: str, fingerprint: str) -> None:
        """Remember a successful conversion (in memory until flushed)."""
        self._entries[filename] = self.tag(fingerprint)

    def forget(self, filename: str) -> None:
        """Drop the entry for a file, forcing its reconversion."""
        self._entries.pop(filename, None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def entries(self) -> dict[str, str]:
        """Return a copy of the current entries."""
        return dict(self._entries)

    def flush(self) -> None:
        """Rewrite the whole cache file atomically."""
        content = json.dumps(self._entries, indent=2, sort_keys=True) + "\n"
        atomic_write(self.path, content.encode("utf-8"))
