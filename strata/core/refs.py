"""Reference management for Strata."""

import logging
import re
from pathlib import Path
from typing import Dict, Optional

from .errors import RefNotFound, InvalidBranchName
from strata.utils.fs import locked_write

logger = logging.getLogger(__name__)

HEADS_PREFIX = 'refs/heads/'
SYMREF_PREFIX = 'ref: '

_INVALID_BRANCH = re.compile(r'(^[./-])|(\.\.)|([\x00-\x20~^:?*\[\\])|(/[./])|(\.lock$)|(/$)|(\.$)|(@\{)')


def is_valid_branch_name(name: str) -> bool:
    """
    Check a branch name against Git's ref name rules.

    Rejects empty names, '..', control characters, spaces, '~^:?*[\\',
    leading '-', '.' or '/', components starting with '.', a trailing
    '/' or '.', names ending in '.lock', '@{' and the bare name '@'.
    """
    if not name or name == '@' or name == 'HEAD':
        return False
    return _INVALID_BRANCH.search(name) is None


class RefManager:
    """
    Reads and writes branch references and HEAD.

    Handles:
    - Symbolic HEAD (``ref: refs/heads/<branch>``)
    - Detached HEAD (raw commit hash)
    - Branch references (refs/heads/*)
    """

    def __init__(self, meta_dir):
        """
        Initialize reference manager.

        Args:
            meta_dir: Repository metadata directory (.strata)
        """
        self.meta_dir = Path(meta_dir)
        self.heads_dir = self.meta_dir / 'refs' / 'heads'
        self.head_file = self.meta_dir / 'HEAD'

    def branch_path(self, name: str) -> Path:
        return self.heads_dir / name

    def read_branch(self, name: str) -> str:
        """
        Read the commit hash a branch points to.

        Raises:
            RefNotFound: If the name is not a valid branch name or the branch
                file does not exist
        """
        if not is_valid_branch_name(name):
            raise RefNotFound(name)
        path = self.branch_path(name)
        if not path.is_file():
            raise RefNotFound(name)
        return path.read_text().strip()

    def branch_exists(self, name: str) -> bool:
        return is_valid_branch_name(name) and self.branch_path(name).is_file()

    def write_branch(self, name: str, commit_hash: str) -> None:
        """Point branch at commit_hash, creating it if needed."""
        if not is_valid_branch_name(name):
            raise InvalidBranchName(name)
        locked_write(self.branch_path(name), (commit_hash + '\n').encode())
        logger.debug("Updated refs/heads/%s -> %s", name, commit_hash[:8])

    def list_branches(self) -> Dict[str, str]:
        """
        List all branches.

        Returns:
            Branch names (including nested ones like 'feature/x') mapped to
            commit hashes, in name order
        """
        if not self.heads_dir.exists():
            return {}

        branches = {}
        for branch_file in sorted(self.heads_dir.rglob('*')):
            if branch_file.is_file() and not branch_file.name.endswith('.lock'):
                name = branch_file.relative_to(self.heads_dir).as_posix()
                branches[name] = branch_file.read_text().strip()
        return branches

    def read_head(self) -> str:
        """Raw HEAD content without the trailing newline."""
        return self.head_file.read_text().strip()

    def get_current_branch(self) -> Optional[str]:
        """
        Get the branch HEAD symbolically points to.

        Returns:
            Branch name, or None if HEAD is detached
        """
        content = self.read_head()
        if content.startswith(SYMREF_PREFIX + HEADS_PREFIX):
            return content[len(SYMREF_PREFIX + HEADS_PREFIX):]
        return None

    def is_detached_head(self) -> bool:
        return not self.read_head().startswith(SYMREF_PREFIX)

    def set_head(self, branch: str) -> None:
        """Point HEAD symbolically at a branch."""
        locked_write(self.head_file, f'{SYMREF_PREFIX}{HEADS_PREFIX}{branch}\n'.encode())
        logger.debug("HEAD -> refs/heads/%s", branch)

    def detach_head(self, commit_hash: str) -> None:
        """Point HEAD directly at a commit."""
        locked_write(self.head_file, (commit_hash + '\n').encode())
        logger.debug("HEAD detached at %s", commit_hash[:8])

    def resolve_head(self) -> Optional[str]:
        """
        Resolve HEAD to a commit hash.

        Returns:
            Commit hash, or None while the current branch has no commits
        """
        content = self.read_head()
        if content.startswith(SYMREF_PREFIX):
            ref_path = self.meta_dir / content[len(SYMREF_PREFIX):]
            if not ref_path.is_file():
                return None
            return ref_path.read_text().strip() or None
        return content or None
