"""
Infrastructure layer for filang.

Contains abstractions for external systems:
- FileSystem: The filesystem capability the interpreter calls into
- LocalFileSystem: FileSystem backed by the local disk

These provide clean interfaces that can be mocked for testing.
"""

from .filesystem import FileSystem, LocalFileSystem

__all__ = [
    'FileSystem',
    'LocalFileSystem',
]
