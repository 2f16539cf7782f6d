"""Integration tests for branch management workflow."""

import pytest
from strata.core.errors import (
    BranchExists, BranchNameConflict, InvalidBranchName, UncommittedChanges, UnknownBranch,
)
from tests.conftest import make_commit


def test_create_branch_on_commit(committed_repo):
    """Test creating a branch on the HEAD commit."""
    repo = committed_repo

    assert repo.create_branch('feature') == repo.commit_hash
    assert repo.list_branches() == ['feature', 'master']
    assert repo.storage.get_ref('feature') == repo.commit_hash
    assert repo.get_current_branch() == 'master'


def test_create_existing_branch(committed_repo):
    committed_repo.create_branch('feature')
    with pytest.raises(BranchExists):
        committed_repo.create_branch('feature')
    with pytest.raises(BranchExists):
        committed_repo.create_branch('master')


@pytest.mark.parametrize('name', ['bad name', '..', 'x.lock', '-dash'])
def test_create_invalid_branch(committed_repo, name):
    with pytest.raises(InvalidBranchName):
        committed_repo.create_branch(name)
    assert committed_repo.list_branches() == ['master']


def test_checkout_moves_head_only(committed_repo):
    """Checkout rewrites HEAD and leaves the working tree alone."""
    repo = committed_repo
    repo.create_branch('b')
    (repo.work_tree / 'scratch.txt').write_text('keep me')

    repo.checkout('b')

    assert (repo.meta_dir / 'HEAD').read_text() == 'ref: refs/heads/b\n'
    assert repo.get_current_branch() == 'b'
    assert (repo.work_tree / 'scratch.txt').read_text() == 'keep me'


def test_checkout_unknown_branch(committed_repo):
    with pytest.raises(UnknownBranch):
        committed_repo.checkout('nope')
    assert committed_repo.get_current_branch() == 'master'


@pytest.mark.parametrize('name', ['../../HEAD', '../config', 'HEAD'])
def test_checkout_rejects_names_outside_heads(any_repo, name):
    """Names that would leave refs/heads are unknown branches."""
    make_commit(any_repo, {'a.txt': 'a'}, "base")
    with pytest.raises(UnknownBranch):
        any_repo.checkout(name)

    assert any_repo.get_current_branch() == 'master'
    assert any_repo.status().is_clean


def test_nested_branch_name_conflicts(committed_repo):
    """A branch cannot nest inside, or contain, an existing branch."""
    committed_repo.create_branch('feature')
    with pytest.raises(BranchNameConflict):
        committed_repo.create_branch('feature/x')

    committed_repo.create_branch('topic/one')
    with pytest.raises(BranchNameConflict) as exc_info:
        committed_repo.create_branch('topic')
    assert exc_info.value.existing == 'topic/one'
    assert isinstance(exc_info.value, InvalidBranchName)

    assert committed_repo.list_branches() == ['feature', 'master', 'topic/one']
    committed_repo.create_branch('feature-x')


def test_branches_diverge(any_repo):
    """Commits on one branch do not move the other."""
    base = make_commit(any_repo, {'base.txt': 'base'}, "base")
    any_repo.create_branch('feature')
    any_repo.checkout('feature')
    feature = make_commit(any_repo, {'feature.txt': 'f'}, "feature work")

    assert any_repo.storage.get_ref('feature') == feature
    assert any_repo.storage.get_ref('master') == base
    assert any_repo.read_commit(feature).parent == base

    any_repo.checkout('master')
    assert any_repo.storage.head_commit_hash() == base


def test_checkout_materialize(any_repo):
    """With materialize the working tree follows the target branch."""
    repo = any_repo
    make_commit(repo, {'shared.txt': 'v1', 'only_master.txt': 'm'}, "master")
    repo.create_branch('feature')
    repo.checkout('feature', materialize=True)
    make_commit(repo, {'shared.txt': 'v2', 'docs/only_feature.txt': 'f'}, "feature")

    repo.checkout('master', materialize=True)
    assert (repo.work_tree / 'shared.txt').read_text() == 'v1'
    assert (repo.work_tree / 'only_master.txt').exists()
    assert not (repo.work_tree / 'docs').exists()

    repo.checkout('feature', materialize=True)
    assert (repo.work_tree / 'shared.txt').read_text() == 'v2'
    assert (repo.work_tree / 'docs' / 'only_feature.txt').read_text() == 'f'
    assert repo.status().is_clean


def test_materialize_refuses_to_overwrite_changes(any_repo):
    repo = any_repo
    make_commit(repo, {'shared.txt': 'v1'}, "master")
    repo.create_branch('feature')
    repo.checkout('feature')
    make_commit(repo, {'shared.txt': 'v2'}, "feature")
    repo.checkout('master', materialize=True)

    (repo.work_tree / 'shared.txt').write_text('local edit')
    with pytest.raises(UncommittedChanges) as exc_info:
        repo.checkout('feature', materialize=True)

    assert exc_info.value.paths == ['shared.txt']
    assert repo.get_current_branch() == 'master'
    assert (repo.work_tree / 'shared.txt').read_text() == 'local edit'


def test_materialize_refuses_to_overwrite_untracked(any_repo):
    repo = any_repo
    make_commit(repo, {'a.txt': 'a'}, "master")
    repo.create_branch('feature')
    repo.checkout('feature')
    make_commit(repo, {'new.txt': 'from feature'}, "feature")
    repo.checkout('master', materialize=True)
    assert not (repo.work_tree / 'new.txt').exists()

    (repo.work_tree / 'new.txt').write_text('untracked')
    with pytest.raises(UncommittedChanges):
        repo.checkout('feature', materialize=True)
    assert (repo.work_tree / 'new.txt').read_text() == 'untracked'


def test_materialize_refuses_to_overwrite_staged_edit(any_repo):
    """Staged content that matches neither branch blocks the switch."""
    repo = any_repo
    make_commit(repo, {'a.txt': 'master-version'}, "master")
    repo.create_branch('other')
    repo.checkout('other')
    make_commit(repo, {'a.txt': 'other-version'}, "other")
    repo.checkout('master', materialize=True)

    (repo.work_tree / 'a.txt').write_text('precious staged edit')
    repo.add('a.txt')

    with pytest.raises(UncommittedChanges) as exc_info:
        repo.checkout('other', materialize=True)

    assert exc_info.value.paths == ['a.txt']
    assert repo.get_current_branch() == 'master'
    assert (repo.work_tree / 'a.txt').read_text() == 'precious staged edit'


def test_materialize_allows_staged_target_content(any_repo):
    repo = any_repo
    make_commit(repo, {'a.txt': 'one'}, "master")
    repo.create_branch('other')
    repo.checkout('other')
    make_commit(repo, {'a.txt': 'two'}, "other")
    repo.checkout('master', materialize=True)

    (repo.work_tree / 'a.txt').write_text('two')
    repo.add('a.txt')
    repo.checkout('other', materialize=True)

    assert repo.get_current_branch() == 'other'
    assert (repo.work_tree / 'a.txt').read_text() == 'two'
