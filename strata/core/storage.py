"""Storage backends for Strata.

The Storage interface persists objects, refs, HEAD and the index and holds
no business logic. FileSystemStorage keeps everything under ``.strata``;
MemoryStorage keeps everything in dictionaries for tests and embedding.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping, Optional

from .errors import CorruptObject, FormatError, ObjectNotFound, RefNotFound, InvalidBranchName
from .hash import hash_object, is_valid_hash
from .index import Index
from .objects import StrataObject, Commit, parse_object
from .refs import RefManager, HEADS_PREFIX, SYMREF_PREFIX, is_valid_branch_name
from strata.utils.fs import atomic_write

logger = logging.getLogger(__name__)

META_DIR = '.strata'
DEFAULT_BRANCH = 'master'


class Storage(ABC):
    """
    Capability interface for object, ref, HEAD and index persistence.

    Implementations perform no retries; I/O errors reach the caller as-is.
    """

    @abstractmethod
    def initialize(self, default_branch: str = DEFAULT_BRANCH) -> None:
        """Prepare empty storage with HEAD on default_branch."""

    @abstractmethod
    def is_initialized(self) -> bool:
        """Whether initialize() has run for this storage."""

    @abstractmethod
    def store_object(self, obj: StrataObject) -> str:
        """
        Persist obj keyed by its hash. Storing the same object twice is a no-op.

        Returns:
            str: Object hash
        """

    @abstractmethod
    def read_raw(self, obj_hash: str) -> bytes:
        """
        Return stored bytes for obj_hash.

        Raises:
            ObjectNotFound: If no such object exists
        """

    @abstractmethod
    def has_object(self, obj_hash: str) -> bool:
        """Check whether obj_hash is stored."""

    @abstractmethod
    def update_ref(self, name: str, commit_hash: str) -> None:
        """Point branch name at commit_hash, creating it if needed."""

    @abstractmethod
    def get_ref(self, name: str) -> str:
        """
        Commit hash of branch name.

        Raises:
            RefNotFound: If the branch does not exist
        """

    @abstractmethod
    def list_refs(self) -> Dict[str, str]:
        """All branches mapped to commit hashes, in name order."""

    @abstractmethod
    def get_head(self) -> Optional[str]:
        """Branch HEAD points to, or None when detached."""

    @abstractmethod
    def set_head(self, branch: str) -> None:
        """Point HEAD symbolically at branch."""

    @abstractmethod
    def detach_head(self, commit_hash: str) -> None:
        """Point HEAD directly at a commit."""

    @abstractmethod
    def head_commit_hash(self) -> Optional[str]:
        """Commit hash HEAD resolves to, or None before the first commit."""

    @abstractmethod
    def get_index_entries(self) -> Dict[str, str]:
        """Staged path -> blob hash mapping (empty if there is no index)."""

    @abstractmethod
    def update_index_entries(self, entries: Mapping[str, str]) -> None:
        """Replace the whole index with entries."""

    def get_object(self, obj_hash: str) -> StrataObject:
        """
        Read and decode an object.

        Raises:
            ObjectNotFound: If the object is absent
            CorruptObject: If the stored bytes fail header/length validation
                or do not hash back to obj_hash
        """
        raw = self.read_raw(obj_hash)
        try:
            obj = parse_object(raw)
        except FormatError as e:
            raise CorruptObject(obj_hash, str(e)) from e

        if hash_object(raw) != obj_hash:
            raise CorruptObject(obj_hash, "content does not match hash")
        return obj

    def get_head_commit(self) -> Optional[Commit]:
        """
        Resolve HEAD to a commit object.

        Returns:
            Commit, or None if the current branch has never been committed to
        """
        commit_hash = self.head_commit_hash()
        if commit_hash is None:
            return None

        obj = self.get_object(commit_hash)
        if not isinstance(obj, Commit):
            raise CorruptObject(commit_hash, f"HEAD points to a {obj.type}, not a commit")
        return obj

    def update_index(self, path: str, blob_hash: str) -> None:
        """Add or update one index entry."""
        entries = self.get_index_entries()
        entries[path] = blob_hash
        self.update_index_entries(entries)

    def clear_index(self) -> None:
        """Remove every entry from the index."""
        self.update_index_entries({})


class FileSystemStorage(Storage):
    """
    Storage under ``<root>/.strata``.

    Layout:
    .strata/
    ├── objects/<hash>        # "<type> <len>\\0<payload>"
    ├── refs/heads/<branch>   # commit hash
    ├── HEAD                  # "ref: refs/heads/<branch>" or commit hash
    ├── index                 # JSON path -> blob hash
    └── config                # repository configuration
    """

    def __init__(self, root):
        self.root = Path(root)
        self.meta_dir = self.root / META_DIR
        self.objects_dir = self.meta_dir / 'objects'
        self.index_file = self.meta_dir / 'index'
        self.config_file = self.meta_dir / 'config'
        self.refs = RefManager(self.meta_dir)

    def initialize(self, default_branch: str = DEFAULT_BRANCH) -> None:
        self.objects_dir.mkdir(parents=True, exist_ok=True)
        self.refs.heads_dir.mkdir(parents=True, exist_ok=True)
        self.refs.set_head(default_branch)
        Index().write(self.index_file)
        if not self.config_file.exists():
            self.config_file.write_text('[core]\n\trepositoryformatversion = 0\n')
        logger.debug("Initialized storage at %s", self.meta_dir)

    def is_initialized(self) -> bool:
        return self.meta_dir.is_dir()

    def object_path(self, obj_hash: str) -> Path:
        """Objects are stored flat, one file per hash."""
        return self.objects_dir / obj_hash

    def store_object(self, obj: StrataObject) -> str:
        obj_hash = obj.hash
        path = self.object_path(obj_hash)

        if path.exists():
            logger.debug("Object %s already in store, skipped", obj_hash[:8])
            return obj_hash

        atomic_write(path, obj.encode())
        logger.debug("Stored %s %s", obj.type, obj_hash[:8])
        return obj_hash

    def read_raw(self, obj_hash: str) -> bytes:
        if not is_valid_hash(obj_hash):
            raise ObjectNotFound(obj_hash)
        try:
            return self.object_path(obj_hash).read_bytes()
        except FileNotFoundError:
            raise ObjectNotFound(obj_hash)

    def has_object(self, obj_hash: str) -> bool:
        return is_valid_hash(obj_hash) and self.object_path(obj_hash).is_file()

    def update_ref(self, name: str, commit_hash: str) -> None:
        self.refs.write_branch(name, commit_hash)

    def get_ref(self, name: str) -> str:
        return self.refs.read_branch(name)

    def list_refs(self) -> Dict[str, str]:
        return self.refs.list_branches()

    def get_head(self) -> Optional[str]:
        return self.refs.get_current_branch()

    def set_head(self, branch: str) -> None:
        self.refs.set_head(branch)

    def detach_head(self, commit_hash: str) -> None:
        self.refs.detach_head(commit_hash)

    def head_commit_hash(self) -> Optional[str]:
        return self.refs.resolve_head()

    def get_index_entries(self) -> Dict[str, str]:
        return dict(Index.read(self.index_file).entries)

    def update_index_entries(self, entries: Mapping[str, str]) -> None:
        Index(dict(entries)).write(self.index_file)

    def __repr__(self) -> str:
        return f"FileSystemStorage(path={self.meta_dir})"


class MemoryStorage(Storage):
    """Dictionary-backed storage; nothing survives the process."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.refs: Dict[str, str] = {}
        self.head: str = ''
        self.index: Dict[str, str] = {}

    def initialize(self, default_branch: str = DEFAULT_BRANCH) -> None:
        self.set_head(default_branch)
        self.index = {}

    def is_initialized(self) -> bool:
        return bool(self.head)

    def store_object(self, obj: StrataObject) -> str:
        obj_hash = obj.hash
        if obj_hash not in self.objects:
            self.objects[obj_hash] = obj.encode()
            logger.debug("Stored %s %s in memory", obj.type, obj_hash[:8])
        return obj_hash

    def read_raw(self, obj_hash: str) -> bytes:
        try:
            return self.objects[obj_hash]
        except KeyError:
            raise ObjectNotFound(obj_hash)

    def has_object(self, obj_hash: str) -> bool:
        return obj_hash in self.objects

    def update_ref(self, name: str, commit_hash: str) -> None:
        if not is_valid_branch_name(name):
            raise InvalidBranchName(name)
        self.refs[name] = commit_hash

    def get_ref(self, name: str) -> str:
        if not is_valid_branch_name(name):
            raise RefNotFound(name)
        try:
            return self.refs[name]
        except KeyError:
            raise RefNotFound(name)

    def list_refs(self) -> Dict[str, str]:
        return dict(sorted(self.refs.items()))

    def get_head(self) -> Optional[str]:
        if self.head.startswith(SYMREF_PREFIX + HEADS_PREFIX):
            return self.head[len(SYMREF_PREFIX + HEADS_PREFIX):]
        return None

    def set_head(self, branch: str) -> None:
        self.head = f'{SYMREF_PREFIX}{HEADS_PREFIX}{branch}'

    def detach_head(self, commit_hash: str) -> None:
        self.head = commit_hash

    def head_commit_hash(self) -> Optional[str]:
        branch = self.get_head()
        if branch is not None:
            return self.refs.get(branch)
        return self.head or None

    def get_index_entries(self) -> Dict[str, str]:
        return dict(self.index)

    def update_index_entries(self, entries: Mapping[str, str]) -> None:
        self.index = dict(entries)

    def __repr__(self) -> str:
        return f"MemoryStorage(objects={len(self.objects)}, refs={len(self.refs)})"
