"""Utility helpers for Strata."""

from strata.utils.fs import atomic_write, LockFile

__all__ = ['atomic_write', 'LockFile']
