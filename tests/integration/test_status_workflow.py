"""Integration tests for status and unstage."""

import pytest
from strata.core.errors import PathspecNotFound
from strata.core.objects import Blob
from tests.conftest import make_commit


def test_status_empty_repository(any_repo):
    report = any_repo.status()
    assert report.branch == 'master'
    assert report.is_clean


def test_status_untracked(repo, working_files):
    report = repo.status()
    assert report.untracked == ['subdir/test3.txt', 'test1.txt', 'test2.txt']
    assert report.staged == []
    assert not report.is_clean


def test_status_lists_are_path_sorted(committed_repo, working_files):
    """Files in subdirectories sort by full path, not by walk order."""
    for path in working_files.values():
        path.write_text("edited")
    (committed_repo.work_tree / 'a_dir').mkdir()
    (committed_repo.work_tree / 'a_dir' / 'new.txt').write_text("new")
    (committed_repo.work_tree / 'z.txt').write_text("new")

    report = committed_repo.status()
    assert report.unstaged == ['subdir/test3.txt', 'test1.txt', 'test2.txt']
    assert report.untracked == ['a_dir/new.txt', 'z.txt']
    assert committed_repo.working_files() == sorted(committed_repo.working_files())


def test_status_staged(repo, working_files):
    repo.add('test1.txt')
    report = repo.status()

    assert report.staged == ['test1.txt']
    assert report.staged_changes == {'test1.txt': 'new'}
    assert report.unstaged == []
    assert 'test1.txt' not in report.untracked


def test_status_clean_after_commit(committed_repo):
    """Committed files match HEAD even though the index was cleared."""
    report = committed_repo.status()
    assert report.is_clean
    assert report.staged == []


def test_status_modified_after_staging(repo, working_files):
    repo.add('test1.txt')
    working_files['file1'].write_text("Edited after add")

    report = repo.status()
    assert report.staged == ['test1.txt']
    assert report.unstaged == ['test1.txt']


def test_status_modified_after_commit(committed_repo, working_files):
    working_files['file3'].write_text("Edited after commit")
    report = committed_repo.status()
    assert report.unstaged == ['subdir/test3.txt']
    assert report.untracked == []


def test_status_deleted(committed_repo, working_files):
    working_files['file2'].unlink()
    assert committed_repo.status().deleted == ['test2.txt']


def test_status_deleted_after_staging(repo, working_files):
    repo.add('test1.txt')
    working_files['file1'].unlink()
    report = repo.status()
    assert report.deleted == ['test1.txt']
    assert report.staged == ['test1.txt']


def test_staged_changes_against_head(any_repo):
    """Staged entries are classified relative to the HEAD tree."""
    repo = any_repo
    make_commit(repo, {'kept.txt': 'same', 'edit.txt': 'old'}, "base")

    repo.add('kept.txt')
    (repo.work_tree / 'edit.txt').write_text('new')
    repo.add('edit.txt')
    (repo.work_tree / 'fresh.txt').write_text('fresh')
    repo.add('fresh.txt')

    report = repo.status()
    assert report.staged == ['edit.txt', 'fresh.txt', 'kept.txt']
    assert report.staged_changes == {
        'edit.txt': 'modified',
        'fresh.txt': 'new',
        'kept.txt': 'unchanged',
    }


def test_status_ignores_metadata(repo):
    report = repo.status()
    assert not any(path.startswith('.strata') for path in report.untracked)


def test_unstage(any_repo):
    repo = any_repo
    (repo.work_tree / 'a.txt').write_text('a')
    (repo.work_tree / 'b.txt').write_text('b')
    repo.add('.')

    repo.unstage('a.txt')

    assert repo.storage.get_index_entries() == {'b.txt': Blob(b'b').hash}
    assert (repo.work_tree / 'a.txt').read_text() == 'a'
    report = repo.status()
    assert report.untracked == ['a.txt']


def test_unstage_missing_path_leaves_index_untouched(repo, working_files):
    """A failed unstage does not rewrite the index file."""
    repo.add('test1.txt')
    index_file = repo.storage.index_file
    before = index_file.read_bytes()
    mtime = index_file.stat().st_mtime_ns

    with pytest.raises(PathspecNotFound) as exc_info:
        repo.unstage('test2.txt')

    assert 'test2.txt' in str(exc_info.value)
    assert index_file.read_bytes() == before
    assert index_file.stat().st_mtime_ns == mtime


def test_unstage_outside_repository(repo, tmp_path):
    with pytest.raises(PathspecNotFound):
        repo.unstage(tmp_path / 'elsewhere.txt')


def test_unstage_then_commit(repo, working_files):
    repo.add('.')
    repo.unstage('subdir/test3.txt')
    commit_hash = repo.commit("partial")
    assert sorted(repo.read_commit_files(commit_hash)) == ['test1.txt', 'test2.txt']
