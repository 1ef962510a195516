"""
filang shell - Interactive prompt for filang statements.

Provides the statement prompt with command completion and the line
editor used by EDIT FILE.
"""

from .editor import LineEditor
from .shell import FilangShell, run_shell

__all__ = ['FilangShell', 'LineEditor', 'run_shell']
