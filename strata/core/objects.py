"""Strata objects: blobs, trees and commits.

Every object is stored as ``<type> <size>\\0<payload>`` and identified by
the SHA-256 of those exact bytes.
"""

import math
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple

from .errors import FormatError
from .hash import hash_object, HASH_LENGTH

OBJECT_TYPES = ('blob', 'tree', 'commit')

FILE = 'file'
DIRECTORY = 'directory'

MODES = {
    FILE: '100644',
    DIRECTORY: '040000',
}
KINDS = {mode: kind for kind, mode in MODES.items()}

HASH_BYTES = HASH_LENGTH // 2


def encode_object(obj_type: str, payload: bytes) -> bytes:
    """
    Prefix payload with its type and length header.

    Args:
        obj_type: One of 'blob', 'tree', 'commit'
        payload: Raw object payload

    Returns:
        bytes: ``<type> <len>\\0<payload>``
    """
    return f"{obj_type} {len(payload)}\0".encode() + payload


def decode_object(raw: bytes) -> Tuple[str, bytes]:
    """
    Split encoded object bytes into type and payload.

    Args:
        raw: Encoded object bytes

    Returns:
        Tuple of (type, payload)

    Raises:
        FormatError: If the header is missing, malformed, names an unknown
            type, or declares a length that differs from the payload
    """
    null_idx = raw.find(b'\0')
    if null_idx == -1:
        raise FormatError("Invalid object format: missing null byte")

    try:
        header = raw[:null_idx].decode('ascii')
    except UnicodeDecodeError:
        raise FormatError("Invalid object header: not ASCII")

    parts = header.split(' ')
    if len(parts) != 2 or not parts[1].isdigit():
        raise FormatError(f"Invalid object header: {header!r}")

    obj_type, size_str = parts
    if obj_type not in OBJECT_TYPES:
        raise FormatError(f"Unknown object type: {obj_type}")

    payload = raw[null_idx + 1:]
    size = int(size_str)
    if len(payload) != size:
        raise FormatError(f"Object size mismatch: expected {size}, got {len(payload)}")

    return obj_type, payload


def parse_object(raw: bytes) -> 'StrataObject':
    """
    Decode encoded bytes into a Blob, Tree or Commit.

    Raises:
        FormatError: If the header or payload is invalid
    """
    obj_type, payload = decode_object(raw)
    obj = _OBJECT_CLASSES[obj_type]()
    obj.deserialize(payload)
    return obj


class StrataObject(ABC):
    """Base class for all Strata objects."""

    def __init__(self):
        self._hash: Optional[str] = None

    @abstractmethod
    def serialize(self) -> bytes:
        """
        Serialize object payload to bytes.

        Returns:
            bytes: Payload without the type/length header
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> None:
        """
        Load object state from payload bytes.

        Args:
            data: Payload without the type/length header
        """
        pass

    @property
    def type(self) -> str:
        """Object type name (blob, tree, commit)."""
        return self.__class__.__name__.lower()

    def encode(self) -> bytes:
        """Full stored representation: header followed by payload."""
        return encode_object(self.type, self.serialize())

    def compute_hash(self) -> str:
        """
        Compute and cache object hash.

        The hash covers the header as well as the payload, so a blob and a
        tree with identical payload bytes never collide.

        Returns:
            str: 64-character SHA-256 hash
        """
        if self._hash is None:
            self._hash = hash_object(self.encode())
        return self._hash

    @property
    def hash(self) -> str:
        """64-character SHA-256 hash of the encoded object."""
        return self.compute_hash()

    def __eq__(self, other) -> bool:
        if not isinstance(other, StrataObject):
            return NotImplemented
        return self.type == other.type and self.hash == other.hash

    def __hash__(self) -> int:
        return hash(self.hash)


class Blob(StrataObject):
    """
    Represents file content.

    A blob stores the raw content of a file without any metadata
    like filename or permissions.
    """

    def __init__(self, data: Optional[bytes] = None):
        super().__init__()
        self._data = data or b''

    @property
    def data(self) -> bytes:
        return self._data

    @data.setter
    def data(self, value: bytes) -> None:
        self._data = value
        self._hash = None

    def serialize(self) -> bytes:
        return self._data

    def deserialize(self, data: bytes) -> None:
        self.data = data

    @classmethod
    def from_file(cls, filepath) -> 'Blob':
        """
        Create blob from file.

        Args:
            filepath: Path to file

        Returns:
            Blob: New blob containing file content
        """
        with open(filepath, 'rb') as f:
            return cls(f.read())

    def __repr__(self) -> str:
        return f"Blob(hash={self.hash[:7]}, size={len(self._data)})"


class TreeEntry:
    """
    A single named entry in a tree.

    - name: file or directory name (no path separators)
    - hash: hash of the blob or subtree
    - kind: 'file' or 'directory'
    """

    def __init__(self, name: str, obj_hash: str, kind: str = FILE):
        if kind not in MODES:
            raise ValueError(f"Invalid tree entry kind: {kind}")
        if not name or '/' in name or '\0' in name or name in ('.', '..'):
            raise ValueError(f"Invalid tree entry name: {name!r}")
        if len(obj_hash) != HASH_LENGTH:
            raise ValueError(f"Invalid object hash for {name}: {obj_hash}")
        self.name = name
        self.hash = obj_hash
        self.kind = kind

    @property
    def mode(self) -> str:
        return MODES[self.kind]

    @property
    def is_directory(self) -> bool:
        return self.kind == DIRECTORY

    def __repr__(self) -> str:
        return f"TreeEntry({self.mode} {self.kind} {self.hash[:7]} {self.name})"

    def __lt__(self, other: 'TreeEntry') -> bool:
        return self.name < other.name

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeEntry):
            return NotImplemented
        return (self.name, self.hash, self.kind) == (other.name, other.hash, other.kind)


class Tree(StrataObject):
    """
    Represents directory structure.

    Entries are kept keyed by name; they are always serialized in name
    order, so the tree hash does not depend on insertion order.
    """

    def __init__(self):
        super().__init__()
        self._entries: Dict[str, TreeEntry] = {}

    @property
    def entries(self) -> List[TreeEntry]:
        """Entries sorted by name."""
        return sorted(self._entries.values())

    def add_entry(self, name: str, obj_hash: str, kind: str = FILE) -> None:
        """
        Add or replace an entry.

        Args:
            name: Entry name
            obj_hash: Blob or tree hash
            kind: 'file' or 'directory'
        """
        self._entries[name] = TreeEntry(name, obj_hash, kind)
        self._hash = None

    def add_file(self, name: str, blob_hash: str) -> None:
        self.add_entry(name, blob_hash, FILE)

    def add_directory(self, name: str, tree_hash: str) -> None:
        self.add_entry(name, tree_hash, DIRECTORY)

    def get_entry(self, name: str) -> Optional[TreeEntry]:
        return self._entries.get(name)

    def serialize(self) -> bytes:
        """
        Serialize tree entries.

        Format per entry: ``<mode> <name>\\0<32-byte binary hash>``,
        entries in name order.
        """
        result = bytearray()
        for entry in self.entries:
            result += f"{entry.mode} {entry.name}".encode() + b'\0'
            result += bytes.fromhex(entry.hash)
        return bytes(result)

    def deserialize(self, data: bytes) -> None:
        """
        Load entries from serialized tree payload.

        Raises:
            FormatError: If an entry is truncated or has an unknown mode
        """
        self._entries = {}
        pos = 0

        while pos < len(data):
            space_pos = data.find(b' ', pos)
            null_pos = data.find(b'\0', pos)
            if space_pos == -1 or null_pos == -1 or space_pos > null_pos:
                raise FormatError(f"Malformed tree entry at offset {pos}")

            mode = data[pos:space_pos].decode('ascii', errors='replace')
            if mode not in KINDS:
                raise FormatError(f"Unknown tree entry mode: {mode}")
            try:
                name = data[space_pos + 1:null_pos].decode()
            except UnicodeDecodeError:
                raise FormatError(f"Tree entry name at offset {pos} is not valid UTF-8")

            hash_end = null_pos + 1 + HASH_BYTES
            if hash_end > len(data):
                raise FormatError(f"Truncated hash for tree entry {name}")
            obj_hash = data[null_pos + 1:hash_end].hex()

            try:
                self.add_entry(name, obj_hash, KINDS[mode])
            except ValueError as e:
                raise FormatError(str(e))
            pos = hash_end

        self._hash = None

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Tree(entries={len(self._entries)})"


class Commit(StrataObject):
    """
    Represents a commit with metadata.

    A commit captures:
    - Snapshot of project (tree hash)
    - Parent commit, absent for the root commit
    - Author
    - Timestamp (unix seconds)
    - Commit message
    """

    def __init__(
        self,
        tree: str = '',
        parent: Optional[str] = None,
        message: str = '',
        author: str = '',
        timestamp: int = 0
    ):
        super().__init__()
        self.tree = tree
        self.parent = parent
        self.message = message
        self.author = author
        self.timestamp = timestamp

    def serialize(self) -> bytes:
        """
        Serialize commit.

        Format:
        tree <tree-hash>
        parent <parent-hash>  (omitted for root commits)
        author <author> <timestamp>

        <commit message>
        """
        lines = [f'tree {self.tree}']
        if self.parent:
            lines.append(f'parent {self.parent}')
        lines.append(f'author {self.author} {self.timestamp}')
        lines.append('')
        lines.append(self.message)
        return '\n'.join(lines).encode()

    def deserialize(self, data: bytes) -> None:
        try:
            content = data.decode()
        except UnicodeDecodeError:
            raise FormatError("Commit payload is not valid UTF-8")

        header, sep, message = content.partition('\n\n')
        if not sep:
            raise FormatError("Commit payload has no message separator")

        self.tree = ''
        self.parent = None
        self.author = ''
        self.timestamp = 0

        for line in header.split('\n'):
            if line.startswith('tree '):
                self.tree = line[5:]
            elif line.startswith('parent '):
                self.parent = line[7:]
            elif line.startswith('author '):
                parts = line[7:].rsplit(' ', 1)
                if len(parts) != 2 or not parts[1].lstrip('-').isdigit():
                    raise FormatError(f"Malformed author line: {line!r}")
                self.author = parts[0]
                self.timestamp = int(parts[1])
            else:
                raise FormatError(f"Unknown commit header: {line!r}")

        if not self.tree:
            raise FormatError("Commit has no tree")

        self.message = message
        self._hash = None

    @classmethod
    def create(
        cls,
        tree_hash: str,
        parent_hash: Optional[str],
        author: str,
        message: str,
        timestamp: Optional[int] = None,
        clock: Callable[[], float] = time.time
    ) -> 'Commit':
        """
        Create a new commit.

        Args:
            tree_hash: Hash of tree object
            parent_hash: Parent commit hash, or None for a root commit
            author: Author name and email (e.g., "Name <email>")
            message: Commit message
            timestamp: Unix timestamp (defaults to clock() rounded up to the
                next whole second, never earlier than the call)
            clock: Time source used when timestamp is None

        Returns:
            Commit: New commit object
        """
        if timestamp is None:
            timestamp = math.ceil(clock())
        return cls(
            tree=tree_hash,
            parent=parent_hash,
            message=message,
            author=author,
            timestamp=timestamp
        )

    def __repr__(self) -> str:
        parent_info = f", parent={self.parent[:7]}" if self.parent else ""
        msg_preview = self.message.split('\n')[0][:50]
        return f"Commit(hash={self.hash[:7]}{parent_info}, msg='{msg_preview}')"


_OBJECT_CLASSES = {
    'blob': Blob,
    'tree': Tree,
    'commit': Commit,
}
