"""Object encoding and blob tests."""

import hashlib
import pytest
from strata.core.errors import FormatError
from strata.core.objects import (
    Blob, Tree, encode_object, decode_object, parse_object,
)


def test_blob_creation():
    """Test blob creation with data."""
    blob = Blob(b'hello world')
    assert blob.data == b'hello world'
    assert blob.type == 'blob'


def test_blob_encoding_has_typed_length_header():
    blob = Blob(b'hi')
    assert blob.encode() == b'blob 2\0hi'


def test_blob_hash_covers_header():
    """Hash is SHA-256 over header plus payload, not payload alone."""
    blob = Blob(b'hi')
    assert blob.hash == hashlib.sha256(b'blob 2\0hi').hexdigest()
    assert blob.hash != hashlib.sha256(b'hi').hexdigest()


def test_blob_hash_deterministic():
    """Test identical content always hashes the same."""
    assert Blob(b'same data').hash == Blob(b'same data').hash
    assert Blob(b'same data').hash == Blob(b'same data').compute_hash()


def test_blob_hash_changes_with_data():
    blob = Blob(b'one')
    first = blob.hash
    blob.data = b'two'
    assert blob.hash != first


def test_blob_roundtrip_binary():
    """Test decoding an encoded blob returns the exact content."""
    content = bytes(range(256)) + b'\0\0trailing'
    decoded = parse_object(Blob(content).encode())
    assert isinstance(decoded, Blob)
    assert decoded.data == content


def test_empty_blob():
    blob = Blob()
    assert blob.encode() == b'blob 0\0'
    assert parse_object(blob.encode()).data == b''


def test_blob_from_file(tmp_path):
    """Test blob creation from file."""
    path = tmp_path / 'file.txt'
    path.write_bytes(b'file content')
    assert Blob.from_file(path).data == b'file content'


def test_blob_and_tree_with_same_payload_differ():
    tree = Tree()
    assert Blob(b'').hash != tree.hash


def test_encode_decode_object():
    raw = encode_object('commit', b'payload')
    assert decode_object(raw) == ('commit', b'payload')


def test_decode_missing_null_byte():
    with pytest.raises(FormatError, match="missing null byte"):
        decode_object(b'blob 5 hello')


def test_decode_length_mismatch():
    with pytest.raises(FormatError, match="size mismatch"):
        decode_object(b'blob 10\0short')


def test_decode_length_too_short():
    with pytest.raises(FormatError, match="size mismatch"):
        decode_object(b'blob 1\0two')


def test_decode_malformed_header():
    with pytest.raises(FormatError):
        decode_object(b'blob\0')
    with pytest.raises(FormatError):
        decode_object(b'blob x\0')
    with pytest.raises(FormatError):
        decode_object(b'blob -1\0')


def test_decode_unknown_type():
    with pytest.raises(FormatError, match="Unknown object type"):
        decode_object(b'tag 0\0')


def test_objects_equal_by_hash():
    assert Blob(b'x') == Blob(b'x')
    assert Blob(b'x') != Blob(b'y')
