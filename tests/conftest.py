"""Shared pytest fixtures for Strata tests."""

import pytest
import tempfile
import shutil
from pathlib import Path
from strata.core.repository import Repository
from strata.core.storage import MemoryStorage
from strata.core.objects import Blob, Tree, Commit

AUTHOR = "Test User <test@example.com>"


class FakeClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start=1700000000):
        self.now = start

    def __call__(self):
        self.now += 1
        return self.now


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir).resolve()
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo(temp_dir):
    """Create an initialized repository with a fixed author."""
    return Repository.init(str(temp_dir), identity=lambda: AUTHOR)


@pytest.fixture
def memory_repo(temp_dir, clock):
    """Repository whose metadata lives in memory; working tree on disk."""
    return Repository.init(
        str(temp_dir), storage=MemoryStorage(), identity=lambda: AUTHOR, clock=clock
    )


@pytest.fixture(params=['filesystem', 'memory'])
def any_repo(request, temp_dir, clock):
    """Repository on each storage backend."""
    storage = MemoryStorage() if request.param == 'memory' else None
    return Repository.init(str(temp_dir), storage=storage, identity=lambda: AUTHOR, clock=clock)


@pytest.fixture
def sample_blob():
    """Create a sample blob object."""
    return Blob(b"Hello, World!\n")


@pytest.fixture
def sample_tree(repo, sample_blob):
    """Create a sample tree with one blob."""
    blob_hash = repo.write_object(sample_blob)
    tree = Tree()
    tree.add_file('test.txt', blob_hash)
    return tree


@pytest.fixture
def sample_commit(sample_tree, repo):
    """Sample commit object."""
    tree_hash = repo.write_object(sample_tree)
    return Commit.create(
        tree_hash=tree_hash,
        parent_hash=None,
        author=AUTHOR,
        message="Test commit",
        timestamp=1700000000
    )


@pytest.fixture
def working_files(repo):
    """Create sample file structure in repository."""
    (repo.work_tree / "subdir").mkdir()
    files = {
        'file1': repo.work_tree / "test1.txt",
        'file2': repo.work_tree / "test2.txt",
        'file3': repo.work_tree / "subdir" / "test3.txt",
    }
    files['file1'].write_text("Content 1")
    files['file2'].write_text("Content 2")
    files['file3'].write_text("Content 3")
    return files


@pytest.fixture
def committed_repo(repo, working_files):
    """Repository with every working file committed once."""
    repo.add(repo.work_tree)
    repo.commit_hash = repo.commit("Initial commit")
    return repo


def make_commit(repo, files, message="Test commit"):
    """
    Helper function to write, stage and commit files.

    Args:
        repo: Repository instance
        files: Mapping of repository-relative path to text content
        message: Commit message

    Returns:
        str: Commit hash
    """
    for rel_path, content in files.items():
        file_path = repo.work_tree / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        repo.add(rel_path)
    return repo.commit(message)
