"""
Service layer for filang.

Contains the logic that ties the parser, the query engine and the
filesystem together:
- Session: The current working directory
- Interpreter: Runs statements and records their events

Services are the primary API for the shell and the CLI commands.
"""

from .interpreter import Interpreter
from .session import Session

__all__ = [
    'Interpreter',
    'Session',
]
