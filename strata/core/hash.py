"""Hash utilities for Strata."""

import hashlib

HASH_LENGTH = 64


def hash_object(data: bytes) -> str:
    """
    Compute SHA-256 hash of data.
    
    Args:
        data: Bytes to hash
        
    Returns:
        64-character hex string
    """
    return hashlib.sha256(data).hexdigest()


def hash_file(filepath: str) -> str:
    """
    Compute SHA-256 hash of a file's raw bytes.
    
    Args:
        filepath: Path to file
        
    Returns:
        64-character hex string
    """
    with open(filepath, 'rb') as f:
        return hash_object(f.read())


def is_valid_hash(value: str) -> bool:
    """Check that value looks like a full hex object id."""
    if len(value) != HASH_LENGTH:
        return False
    return all(c in '0123456789abcdef' for c in value)
