"""Repository management for Strata."""

import errno
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .config import Config, format_identity
from .errors import (
    BranchExists, BranchNameConflict, CorruptObject, EmptyCommit, EmptyMessage,
    InvalidBranchName, NoCommitsYet, NotARepository, ObjectNotFound, PathOutsideRepository,
    PathspecNotFound, RefNotFound, RepositoryExists, UnknownBranch,
    UncommittedChanges,
)
from .objects import Blob, Commit, Tree, StrataObject
from .refs import is_valid_branch_name
from .storage import Storage, FileSystemStorage, META_DIR, DEFAULT_BRANCH
from .tree_builder import TreeBuilder

logger = logging.getLogger(__name__)


@dataclass
class StatusReport:
    """
    Result of comparing the working tree, the index and HEAD.

    - staged: every path in the index
    - staged_changes: index path -> 'new', 'modified' or 'unchanged',
      relative to the HEAD commit's tree
    - unstaged: tracked files whose content differs from the index entry,
      or from HEAD when the file is not staged
    - untracked: files neither staged nor in HEAD
    - deleted: staged or committed files missing from the working tree
    """
    branch: Optional[str] = None
    staged: List[str] = field(default_factory=list)
    staged_changes: Dict[str, str] = field(default_factory=dict)
    unstaged: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked or self.deleted)


class Repository:
    """
    A Strata repository rooted at an explicit directory.

    All user-facing operations (add, commit, branch, checkout, status,
    unstage) go through a Storage backend; the working tree is read and
    written directly on disk.
    """

    def __init__(
        self,
        path='.',
        storage: Optional[Storage] = None,
        identity: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Args:
            path: Repository root (working tree)
            storage: Storage backend, defaults to FileSystemStorage at path
            identity: Returns the author string for new commits; defaults to
                user.name/user.email from config
            clock: Returns the current unix time; defaults to time.time
        """
        self.work_tree = Path(path).resolve()
        self.meta_dir = self.work_tree / META_DIR
        self.config_file = self.meta_dir / 'config'
        self.storage = storage if storage is not None else FileSystemStorage(self.work_tree)
        self.config = Config(self.config_file)
        self.identity = identity
        self.clock = clock or time.time

    @classmethod
    def init(cls, path='.', default_branch: str = DEFAULT_BRANCH, **kwargs) -> 'Repository':
        """
        Create a new repository.

        HEAD starts as ``ref: refs/heads/<default_branch>`` with no branch
        file behind it until the first commit.

        Raises:
            RepositoryExists: If the storage is already initialized
        """
        repo = cls(path, **kwargs)
        if repo.storage.is_initialized():
            raise RepositoryExists(repo.meta_dir)

        repo.work_tree.mkdir(parents=True, exist_ok=True)
        repo.storage.initialize(default_branch)
        logger.debug("Initialized repository at %s", repo.work_tree)
        return repo

    @classmethod
    def open(cls, path='.', **kwargs) -> 'Repository':
        """
        Open an existing repository.

        Raises:
            NotARepository: If the metadata directory is missing
        """
        repo = cls(path, **kwargs)
        if not repo.storage.is_initialized():
            raise NotARepository(repo.work_tree)
        return repo

    @classmethod
    def find(cls, path='.') -> Optional['Repository']:
        """
        Find repository by searching up the directory tree.

        Returns:
            Repository if found, None otherwise
        """
        current = Path(path).resolve()

        while True:
            if (current / META_DIR).is_dir():
                return cls(current)

            if current == current.parent:
                return None

            current = current.parent

    # Paths

    def _resolve(self, path) -> Path:
        """Absolute path for a path given relative to the repository root."""
        p = Path(path)
        if not p.is_absolute():
            p = self.work_tree / p
        p = Path(os.path.normpath(p))
        if p == self.work_tree or p.parent == p:
            return p.resolve()
        # Resolve the directory but keep the final name, so a symlink
        # inside the repository is staged as itself
        return p.parent.resolve() / p.name

    def relative_path(self, path) -> str:
        """
        Repository-relative POSIX path for path.

        Raises:
            PathOutsideRepository: If path is outside the working tree or
                inside the metadata directory
        """
        abs_path = self._resolve(path)
        try:
            rel = abs_path.relative_to(self.work_tree)
        except ValueError:
            raise PathOutsideRepository(path)

        if rel.parts and rel.parts[0] == META_DIR:
            raise PathOutsideRepository(path)
        return rel.as_posix()

    def _walk(self, directory: Path) -> Iterator[Path]:
        """Yield files under directory, skipping the metadata directory."""
        for dirpath, dirnames, filenames in os.walk(directory):
            dirnames[:] = sorted(d for d in dirnames if d != META_DIR)
            for name in sorted(filenames):
                file_path = Path(dirpath) / name
                if file_path.is_file():
                    yield file_path

    def working_files(self) -> List[str]:
        """All files in the working tree as relative POSIX paths."""
        return sorted(
            file_path.relative_to(self.work_tree).as_posix()
            for file_path in self._walk(self.work_tree)
        )

    # Objects

    def write_object(self, obj: StrataObject) -> str:
        return self.storage.store_object(obj)

    def read_object(self, obj_hash: str) -> StrataObject:
        return self.storage.get_object(obj_hash)

    def read_tree_files(self, tree_hash: str, prefix: str = '') -> Dict[str, str]:
        """
        Flatten a stored tree into path -> blob hash.

        Raises:
            CorruptObject: If tree_hash names something other than a tree
        """
        tree = self.read_object(tree_hash)
        if not isinstance(tree, Tree):
            raise CorruptObject(tree_hash, f"expected tree, found {tree.type}")

        files = {}
        for entry in tree.entries:
            path = f"{prefix}{entry.name}"
            if entry.is_directory:
                files.update(self.read_tree_files(entry.hash, f"{path}/"))
            else:
                files[path] = entry.hash
        return files

    def read_commit(self, commit_hash: str) -> Commit:
        commit = self.read_object(commit_hash)
        if not isinstance(commit, Commit):
            raise CorruptObject(commit_hash, f"expected commit, found {commit.type}")
        return commit

    def read_commit_files(self, commit_hash: str) -> Dict[str, str]:
        return self.read_tree_files(self.read_commit(commit_hash).tree)

    def head_files(self) -> Dict[str, str]:
        """Files of the HEAD commit, empty before the first commit."""
        head = self.storage.head_commit_hash()
        if head is None:
            return {}
        return self.read_commit_files(head)

    def author(self) -> str:
        if self.identity is not None:
            return self.identity()
        return format_identity(self.config)

    # Operations

    def add(self, path) -> List[str]:
        """
        Stage a file, or every file under a directory.

        Each file's content is stored as a blob before its index entry is
        written, so the index never names a missing blob.

        Args:
            path: File or directory, absolute or relative to the root

        Returns:
            Staged paths relative to the repository root

        Raises:
            FileNotFoundError: If path does not exist
            PathOutsideRepository: If path is outside the working tree
        """
        target = self._resolve(path)
        if not target.exists():
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", str(path))

        self.relative_path(target)
        files = list(self._walk(target)) if target.is_dir() else [target]

        entries = self.storage.get_index_entries()
        added = []
        for file_path in files:
            rel_path = self.relative_path(file_path)
            blob = Blob.from_file(file_path)
            entries[rel_path] = self.storage.store_object(blob)
            added.append(rel_path)

        if added:
            self.storage.update_index_entries(entries)
        logger.debug("Staged %d file(s) from %s", len(added), path)
        return sorted(added)

    def commit(self, message: str) -> str:
        """
        Record the staged files as a new commit on the current branch.

        Returns:
            str: Hash of the new commit

        Raises:
            EmptyMessage: If message is empty or blank
            EmptyCommit: If nothing is staged
            ObjectNotFound: If an index entry names a missing blob
        """
        if not message or not message.strip():
            raise EmptyMessage()

        entries = self.storage.get_index_entries()
        if not entries:
            raise EmptyCommit()

        for blob_hash in entries.values():
            if not self.storage.has_object(blob_hash):
                raise ObjectNotFound(blob_hash)

        builder = TreeBuilder()
        root = builder.build(entries)
        for tree in builder.trees.values():
            self.storage.store_object(tree)

        parent = self.storage.head_commit_hash()
        commit = Commit.create(
            tree_hash=root.hash,
            parent_hash=parent,
            author=self.author(),
            message=message,
            clock=self.clock
        )
        commit_hash = self.storage.store_object(commit)

        branch = self.storage.get_head()
        if branch is None:
            self.storage.detach_head(commit_hash)
        else:
            self.storage.update_ref(branch, commit_hash)

        self.storage.clear_index()
        logger.debug("Created commit %s on %s", commit_hash[:8], branch or 'detached HEAD')
        return commit_hash

    def create_branch(self, name: str) -> str:
        """
        Create a branch at the HEAD commit. HEAD itself does not move.

        Returns:
            str: Commit hash the branch points to

        Raises:
            NoCommitsYet: If HEAD has no commit
            InvalidBranchName: If name is not a valid ref name
            BranchExists: If the branch already exists
        """
        head = self.storage.head_commit_hash()
        if head is None:
            raise NoCommitsYet(f"create branch '{name}'")

        if not is_valid_branch_name(name):
            raise InvalidBranchName(name)

        for existing in self.storage.list_refs():
            if existing == name:
                raise BranchExists(name)
            if existing.startswith(name + '/') or name.startswith(existing + '/'):
                raise BranchNameConflict(name, existing)

        self.storage.update_ref(name, head)
        return head

    def list_branches(self) -> List[str]:
        return list(self.storage.list_refs())

    def get_current_branch(self) -> Optional[str]:
        """Current branch name, or None when HEAD is detached."""
        return self.storage.get_head()

    def checkout(self, branch_name: str, materialize: bool = False) -> None:
        """
        Switch HEAD to a branch.

        By default only HEAD changes and the working tree is left alone.
        With materialize=True the target commit's files are written to the
        working tree and files tracked by the old HEAD but absent from the
        target are removed.

        Raises:
            UnknownBranch: If the branch does not exist
            UncommittedChanges: With materialize=True, if modified or
                untracked files would be overwritten
        """
        try:
            target = self.storage.get_ref(branch_name)
        except RefNotFound:
            raise UnknownBranch(branch_name)

        if materialize:
            self._materialize(target)

        self.storage.set_head(branch_name)
        logger.debug("Switched to branch %s", branch_name)

    def _materialize(self, target_commit: str) -> None:
        old_files = self.head_files()
        new_files = self.read_commit_files(target_commit)
        status = self.status()

        touched = set(old_files) | set(new_files)
        at_risk = set(status.unstaged) & touched
        at_risk.update(path for path in status.untracked if path in new_files)
        # Staged content that matches neither side exists nowhere else
        at_risk.update(
            path for path, blob_hash in self.storage.get_index_entries().items()
            if path in touched
            and blob_hash not in (old_files.get(path), new_files.get(path))
        )
        # A file already holding the target content loses nothing
        blocked = [
            path for path in at_risk
            if self._working_hash(path) != new_files.get(path)
        ]
        if blocked:
            raise UncommittedChanges(sorted(blocked))

        for path, blob_hash in new_files.items():
            if old_files.get(path) == blob_hash and (self.work_tree / path).is_file():
                continue
            blob = self.read_object(blob_hash)
            file_path = self.work_tree / path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(blob.data)

        for path in old_files:
            if path in new_files:
                continue
            file_path = self.work_tree / path
            if file_path.is_file():
                file_path.unlink()
            self._prune_empty_dirs(file_path.parent)

    def _working_hash(self, path: str) -> Optional[str]:
        file_path = self.work_tree / path
        if not file_path.is_file():
            return None
        return Blob.from_file(file_path).hash

    def _prune_empty_dirs(self, directory: Path) -> None:
        while directory != self.work_tree and directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
            directory = directory.parent

    def status(self) -> StatusReport:
        """
        Compare the working tree with the index and the HEAD commit.

        A working file is checked against its index entry when staged and
        against the HEAD tree otherwise; a file in neither is untracked.
        Every index entry is reported as staged.
        """
        index = self.storage.get_index_entries()
        head_files = self.head_files()
        working = self.working_files()

        report = StatusReport(branch=self.get_current_branch())

        for rel_path in working:
            if rel_path in index:
                expected = index[rel_path]
            elif rel_path in head_files:
                expected = head_files[rel_path]
            else:
                report.untracked.append(rel_path)
                continue

            if Blob.from_file(self.work_tree / rel_path).hash != expected:
                report.unstaged.append(rel_path)

        tracked = set(index) | set(head_files)
        report.deleted = sorted(tracked - set(working))
        report.staged = sorted(index)

        for path in report.staged:
            if path not in head_files:
                report.staged_changes[path] = 'new'
            elif head_files[path] != index[path]:
                report.staged_changes[path] = 'modified'
            else:
                report.staged_changes[path] = 'unchanged'

        return report

    def unstage(self, path) -> None:
        """
        Remove one path from the index.

        Raises:
            PathspecNotFound: If the path is not staged; the index is not
                rewritten in that case
        """
        try:
            rel_path = self.relative_path(path)
        except PathOutsideRepository:
            raise PathspecNotFound(str(path))

        entries = self.storage.get_index_entries()
        if rel_path not in entries:
            raise PathspecNotFound(str(path))

        del entries[rel_path]
        self.storage.update_index_entries(entries)

    def log(self, start: Optional[str] = None) -> Iterator[Tuple[str, Commit]]:
        """
        Walk history from start (default HEAD) following parent links.

        Yields:
            (commit_hash, Commit) pairs, newest first
        """
        commit_hash = start or self.storage.head_commit_hash()
        seen = set()

        while commit_hash:
            if commit_hash in seen:
                raise CorruptObject(commit_hash, "commit history contains a cycle")
            seen.add(commit_hash)

            commit = self.read_commit(commit_hash)
            yield commit_hash, commit
            commit_hash = commit.parent

    def __repr__(self) -> str:
        return f"Repository(path={self.work_tree})"
