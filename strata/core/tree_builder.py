"""Build a hierarchy of trees from a flat path -> blob hash mapping."""

import logging
import posixpath
from collections import defaultdict
from typing import Dict, Mapping, Set

from .errors import FormatError
from .objects import Tree

logger = logging.getLogger(__name__)


def _parent_dir(path: str) -> str:
    parent = posixpath.dirname(path)
    return '' if parent in ('', '.') else parent


def normalize_path(path: str) -> str:
    """Convert an index path to the POSIX form used in trees."""
    normalized = posixpath.normpath(path.replace('\\', '/'))
    if normalized in ('', '.') or normalized.startswith('../') or normalized == '..' \
            or normalized.startswith('/'):
        raise FormatError(f"Invalid staged path: {path!r}")
    return normalized


class TreeBuilder:
    """
    Converts staged paths into Tree objects, bottom-up.

    Directories are built post-order, so a parent is only hashed after all
    of its subdirectories are final. Every tree produced during a build is
    kept in ``trees`` (keyed by directory path, ``''`` for the root) so the
    caller can store them. The builder never touches storage itself.
    """

    def __init__(self):
        self.trees: Dict[str, Tree] = {}
        self._files: Dict[str, Dict[str, str]] = {}
        self._subdirs: Dict[str, Set[str]] = {}

    def build(self, paths: Mapping[str, str]) -> Tree:
        """
        Build the root tree for a path -> blob hash mapping.

        Args:
            paths: Repository-relative file paths mapped to blob hashes

        Returns:
            Tree: Root tree. An empty mapping yields an empty tree.

        Raises:
            FormatError: If a path is invalid or is used both as a file
                and as a directory
        """
        self.trees = {}
        self._group(paths)
        root = self._build_dir('')
        logger.debug("Built %d tree(s) from %d path(s), root %s",
                     len(self.trees), len(paths), root.hash[:8])
        return root

    def _group(self, paths: Mapping[str, str]) -> None:
        files = defaultdict(dict)
        subdirs = defaultdict(set)
        subdirs['']

        for raw_path, blob_hash in paths.items():
            path = normalize_path(raw_path)
            directory = _parent_dir(path)
            files[directory][posixpath.basename(path)] = blob_hash

            # Register every ancestor, including ones with no direct files
            while directory:
                parent = _parent_dir(directory)
                subdirs[parent].add(directory)
                directory = parent

        all_dirs = set().union(*subdirs.values())
        for directory, names in files.items():
            for name in names:
                child = posixpath.join(directory, name) if directory else name
                if child in all_dirs:
                    raise FormatError(f"Path {child!r} is both a file and a directory")

        self._files = dict(files)
        self._subdirs = dict(subdirs)

    def _build_dir(self, directory: str) -> Tree:
        if directory in self.trees:
            return self.trees[directory]

        tree = Tree()
        for name, blob_hash in self._files.get(directory, {}).items():
            tree.add_file(name, blob_hash)

        for subdir in sorted(self._subdirs.get(directory, ())):
            subtree = self._build_dir(subdir)
            tree.add_directory(posixpath.basename(subdir), subtree.hash)

        self.trees[directory] = tree
        return tree


def build_tree_from_paths(paths: Mapping[str, str]) -> Tree:
    """
    Build the root tree for a path -> blob hash mapping.

    Convenience wrapper around TreeBuilder for callers that only need the
    root hash.
    """
    return TreeBuilder().build(paths)
