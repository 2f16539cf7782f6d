"""Core functionality for Strata.

This module contains the core data structures:
- Strata objects (Blob, Tree, Commit) and their encoding
- Tree building from staged paths
- Storage backends (objects, refs, HEAD, index)
- Repository operations
- Configuration management
- Hashing utilities
"""

from strata.core.errors import StrataError
from strata.core.objects import StrataObject, Blob, Tree, TreeEntry, Commit
from strata.core.tree_builder import TreeBuilder, build_tree_from_paths
from strata.core.storage import Storage, FileSystemStorage, MemoryStorage
from strata.core.repository import Repository, StatusReport
from strata.core.hash import hash_object, hash_file
from strata.core.index import Index
from strata.core.refs import RefManager
from strata.core.config import Config

__all__ = [
    'StrataError',
    'StrataObject',
    'Blob',
    'Tree',
    'TreeEntry',
    'Commit',
    'TreeBuilder',
    'build_tree_from_paths',
    'Storage',
    'FileSystemStorage',
    'MemoryStorage',
    'Repository',
    'StatusReport',
    'Index',
    'RefManager',
    'Config',
    'hash_object',
    'hash_file',
]
