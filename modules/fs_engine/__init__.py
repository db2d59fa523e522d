"""
Filesystem engine module for FileKeeper.

Provides listing, search and mutating operations scoped under one root
directory.
"""

from .engine import FileOperationsEngine, DirectoryEntry, EntryKind, matches_mask

__all__ = ['FileOperationsEngine', 'DirectoryEntry', 'EntryKind', 'matches_mask']
