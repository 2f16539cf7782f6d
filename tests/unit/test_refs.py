"""Tests for branch references and HEAD."""

import pytest
from strata.core.errors import RefNotFound, InvalidBranchName, LockError
from strata.core.refs import RefManager, is_valid_branch_name

HASH_A = 'a' * 64
HASH_B = 'b' * 64


@pytest.fixture
def refs(tmp_path):
    manager = RefManager(tmp_path / '.strata')
    manager.heads_dir.mkdir(parents=True)
    manager.set_head('master')
    return manager


@pytest.mark.parametrize('name', ['master', 'feature/login', 'fix-123', 'v1.0', 'user_branch'])
def test_valid_branch_names(name):
    assert is_valid_branch_name(name)


@pytest.mark.parametrize('name', [
    '', '@', 'HEAD', '-flag', '.hidden', '/lead', 'trail/', 'trail.',
    'a..b', 'has space', 'tab\there', 'til~de', 'car^et', 'co:lon',
    'q?', 'st*r', 'br[acket', 'back\\slash', 'name.lock', 'a/.b', 're@{1}',
])
def test_invalid_branch_names(name):
    assert not is_valid_branch_name(name)


def test_head_is_symbolic(refs):
    assert refs.head_file.read_text() == 'ref: refs/heads/master\n'
    assert refs.get_current_branch() == 'master'
    assert not refs.is_detached_head()


def test_unborn_branch_resolves_to_none(refs):
    assert refs.resolve_head() is None
    assert not refs.branch_exists('master')


def test_write_and_read_branch(refs):
    refs.write_branch('master', HASH_A)
    assert refs.read_branch('master') == HASH_A
    assert refs.branch_path('master').read_text() == HASH_A + '\n'
    assert refs.resolve_head() == HASH_A


def test_read_missing_branch(refs):
    with pytest.raises(RefNotFound):
        refs.read_branch('nope')


def test_write_invalid_branch(refs):
    with pytest.raises(InvalidBranchName):
        refs.write_branch('bad..name', HASH_A)
    assert refs.list_branches() == {}


def test_nested_branches_listed(refs):
    refs.write_branch('master', HASH_A)
    refs.write_branch('feature/x', HASH_B)
    assert refs.list_branches() == {'feature/x': HASH_B, 'master': HASH_A}


def test_switch_head(refs):
    refs.write_branch('master', HASH_A)
    refs.write_branch('dev', HASH_B)
    refs.set_head('dev')
    assert refs.get_current_branch() == 'dev'
    assert refs.resolve_head() == HASH_B


def test_detached_head(refs):
    refs.detach_head(HASH_A)
    assert refs.is_detached_head()
    assert refs.get_current_branch() is None
    assert refs.resolve_head() == HASH_A


def test_held_lock_blocks_ref_update(refs):
    refs.write_branch('master', HASH_A)
    lock = refs.branch_path('master').with_name('master.lock')
    lock.write_text('')

    with pytest.raises(LockError):
        refs.write_branch('master', HASH_B)
    assert refs.read_branch('master') == HASH_A
