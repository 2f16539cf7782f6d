"""Exception types raised by Strata.

Every error raised on purpose by the core derives from StrataError so the
command layer can render it. Filesystem failures are not wrapped: OSError
and its subclasses reach the caller unchanged.
"""


class StrataError(Exception):
    """Base class for all Strata errors."""

    pass


class NotARepository(StrataError):
    """Raised when the metadata directory is missing."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Not a strata repository: {path}")


class FormatError(StrataError):
    """Raised when encoded object bytes cannot be decoded."""

    pass


class CorruptObject(FormatError):
    """Raised when a stored object fails validation on read."""

    def __init__(self, obj_hash: str, reason: str):
        self.hash = obj_hash
        self.reason = reason
        super().__init__(f"Object {obj_hash} is corrupt: {reason}")


class IndexCorrupt(FormatError):
    """Raised when the index file cannot be parsed."""

    pass


class NotFound(StrataError):
    """Raised when an object or reference does not exist."""

    pass


class ObjectNotFound(NotFound):
    def __init__(self, obj_hash: str):
        self.hash = obj_hash
        super().__init__(f"Object {obj_hash} not found")


class RefNotFound(NotFound):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Reference {name} not found")


class EmptyCommit(StrataError):
    """Raised when committing with nothing staged."""

    def __init__(self):
        super().__init__("Nothing to commit (staging area is empty)")


class EmptyMessage(StrataError):
    """Raised when a commit message is empty."""

    def __init__(self):
        super().__init__("Aborting commit due to empty commit message")


class NoCommitsYet(StrataError):
    """Raised when an operation needs a base commit that does not exist."""

    def __init__(self, action: str = "continue"):
        super().__init__(f"Cannot {action}: you must create at least one commit first")


class UnknownBranch(StrataError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Branch '{name}' does not exist")


class BranchExists(StrataError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Branch '{name}' already exists")


class InvalidBranchName(StrataError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"'{name}' is not a valid branch name")


class BranchNameConflict(InvalidBranchName):
    """Raised when a branch name would nest inside, or contain, an existing branch."""

    def __init__(self, name: str, existing: str):
        self.name = name
        self.existing = existing
        StrataError.__init__(self, f"'{existing}' exists; cannot create '{name}'")


class PathspecNotFound(StrataError):
    """Raised when unstaging a path that is not in the index."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"pathspec '{path}' did not match any file in the index")


class PathOutsideRepository(StrataError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"'{path}' is outside repository")


class LockError(StrataError):
    """Raised when another process holds the lock on a metadata file."""

    def __init__(self, lock_path):
        self.lock_path = lock_path
        super().__init__(
            f"Unable to create '{lock_path}': File exists. "
            "Another strata process seems to be running in this repository"
        )


class RepositoryExists(StrataError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Repository already exists at {path}")


class UncommittedChanges(StrataError):
    """Raised when switching branches would overwrite working tree changes."""

    def __init__(self, paths):
        self.paths = list(paths)
        listing = ', '.join(self.paths)
        super().__init__(f"Your local changes would be overwritten by checkout: {listing}")
