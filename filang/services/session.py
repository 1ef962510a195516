"""
Session state for the filang interpreter.

The only mutable state the interpreter has is the current working
directory. Handlers resolve names against it; only USE and DROP move it.
"""

import logging
import os
from typing import Optional

from ..exit_codes import PathNotFoundError
from ..infra.filesystem import FileSystem

logger = logging.getLogger(__name__)


class Session:
    """
    Interpreter session holding the current directory.

    Example:
        session = Session('/tmp/work', fs)
        session.resolve('a.txt')   # '/tmp/work/a.txt'
        session.use('logs')        # cwd is now '/tmp/work/logs'
        session.drop()             # back to '/tmp/work'
    """

    def __init__(self, cwd: Optional[str] = None, fs: Optional[FileSystem] = None):
        self.cwd = os.path.abspath(os.path.expanduser(cwd or os.getcwd()))
        self.fs = fs

    def resolve(self, *parts: str) -> str:
        """Join ``parts`` onto the current directory."""
        return os.path.normpath(os.path.join(self.cwd, *parts))

    def use(self, folder: str) -> str:
        """
        Change into ``folder`` (relative to the current directory).

        Raises:
            PathNotFoundError: If the target is not a directory
        """
        target = self.resolve(folder)
        is_dir = self.fs.is_dir(target) if self.fs else os.path.isdir(target)
        if not is_dir:
            raise PathNotFoundError(folder, f'No folder "{folder}"')
        logger.debug(f"cwd {self.cwd} -> {target}")
        self.cwd = target
        return target

    def drop(self) -> str:
        """
        Move to the parent directory.

        Raises:
            PathNotFoundError: If already at the filesystem root
        """
        parent = os.path.dirname(self.cwd)
        if parent == self.cwd:
            raise PathNotFoundError(self.cwd, "Already at the root directory.")
        logger.debug(f"cwd {self.cwd} -> {parent}")
        self.cwd = parent
        return parent
