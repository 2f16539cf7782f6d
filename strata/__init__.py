"""Strata - a content-addressed version control engine implemented in Python."""

__version__ = '0.1.0'

from strata.core.repository import Repository
from strata.core.objects import StrataObject, Blob, Tree, Commit

__all__ = [
    'Repository',
    'StrataObject',
    'Blob',
    'Tree',
    'Commit',
]
