"""Index (staging area) implementation."""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .errors import IndexCorrupt
from strata.utils.fs import locked_write

logger = logging.getLogger(__name__)

INDEX_VERSION = 1


class Index:
    """
    Strata index (staging area).

    The index maps repository-relative paths (POSIX separators) to the blob
    hash that the next commit will contain. It is persisted as JSON and
    always rewritten as a whole, never appended to.
    """

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self.entries: Dict[str, str] = dict(entries or {})
        self.version: int = INDEX_VERSION

    def add_entry(self, path: str, blob_hash: str) -> None:
        """Add or update the entry for path."""
        self.entries[path] = blob_hash

    def remove_entry(self, path: str) -> bool:
        """
        Remove entry from index.

        Returns:
            True if the path was present
        """
        if path in self.entries:
            del self.entries[path]
            return True
        return False

    def get_entry(self, path: str) -> Optional[str]:
        """Get staged blob hash for path."""
        return self.entries.get(path)

    def clear(self) -> None:
        """Clear all entries from index."""
        self.entries.clear()

    def to_bytes(self) -> bytes:
        """
        Encode index as JSON.

        Format: {"version": 1, "entries": {<path>: <hash>, ...}} with keys
        sorted, so identical contents always produce identical bytes.
        """
        data = {'version': self.version, 'entries': self.entries}
        return (json.dumps(data, indent=2, sort_keys=True) + '\n').encode()

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Index':
        """
        Decode index bytes.

        Raises:
            IndexCorrupt: If data is not a valid index document
        """
        try:
            document = json.loads(data.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise IndexCorrupt(f"Corrupted index file: {e}") from e

        if not isinstance(document, dict):
            raise IndexCorrupt("Corrupted index file: expected an object")

        version = document.get('version')
        if version != INDEX_VERSION:
            raise IndexCorrupt(f"Unsupported index version: {version}")

        entries = document.get('entries', {})
        if not isinstance(entries, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in entries.items()):
            raise IndexCorrupt("Corrupted index file: entries must map paths to hashes")

        return cls(entries)

    def write(self, index_path) -> None:
        """
        Write index to disk under the index lock.

        Args:
            index_path: Path to index file
        """
        locked_write(index_path, self.to_bytes())
        logger.debug("Wrote index with %d entr(ies) to %s", len(self.entries), index_path)

    @classmethod
    def read(cls, index_path) -> 'Index':
        """
        Read index from disk.

        A missing index file reads as an empty index.
        """
        path = Path(index_path)
        if not path.exists():
            return cls()
        return cls.from_bytes(path.read_bytes())

    def __contains__(self, path: str) -> bool:
        return path in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Index(entries={len(self.entries)})"
