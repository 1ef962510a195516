"""
Line editor used by EDIT FILE.

A small two-mode editor. In INSERT mode every line typed is appended to
the buffer; a line starting with ":" is a command:

    :save          write the buffer and leave
    :exit          leave without writing
    :load <file>   replace the buffer with another file's content
    :show          print the buffer with line numbers
    :undo          drop the last buffer line
"""

import logging
import os
from enum import Enum
from typing import Callable, List, Optional

from ..infra.filesystem import FileSystem

logger = logging.getLogger("filang")


class EditorMode(Enum):
    INSERT = "insert"
    COMMAND = "command"
    CLOSED = "closed"


class LineEditor:
    """
    Edits one file a line at a time.

    Input and output are injectable so the editor runs without a
    terminal.

    Example:
        editor = LineEditor(LocalFileSystem())
        saved = editor.edit('/tmp/notes.txt')
    """

    def __init__(
        self,
        fs: FileSystem,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        encoding: str = 'utf-8',
    ):
        self.fs = fs
        self.input_func = input_func
        self.output = output
        self.encoding = encoding
        self.buffer: List[str] = []
        self.mode = EditorMode.CLOSED
        self.path: Optional[str] = None
        self.saved = False

    def open(self, path: str) -> None:
        """Load ``path`` into the buffer (empty if the file does not exist)."""
        self.path = path
        self.saved = False
        self.buffer = []
        if self.fs.is_file(path):
            self.buffer = self.fs.read_text(path, self.encoding).splitlines()
        self.mode = EditorMode.INSERT

    def edit(self, path: str) -> bool:
        """
        Run the editor loop on ``path``.

        Returns:
            True if the buffer was saved
        """
        self.open(path)
        name = os.path.basename(path)
        self.output(f"-- INSERT -- editing {name} ({len(self.buffer)} lines). "
                    f"Type :save to write, :exit to quit.")

        while self.mode is not EditorMode.CLOSED:
            try:
                line = self.input_func(f"{len(self.buffer) + 1:>4} ")
            except EOFError:
                self.mode = EditorMode.CLOSED
                break
            self.feed(line)

        return self.saved

    def feed(self, line: str) -> None:
        """Process one input line."""
        if line.startswith(':'):
            self.mode = EditorMode.COMMAND
            self.execute(line[1:].strip())
        else:
            self.buffer.append(line)

    def execute(self, command: str) -> None:
        """Run an editor command (without the leading colon)."""
        parts = command.split(maxsplit=1)
        name = parts[0].lower() if parts else ''
        arg = parts[1] if len(parts) > 1 else ''

        if name == 'save':
            self.fs.write_text(self.path, '\n'.join(self.buffer), self.encoding)
            self.saved = True
            self.mode = EditorMode.CLOSED
            return
        if name == 'exit':
            self.mode = EditorMode.CLOSED
            return

        if name == 'load':
            self._load(arg)
        elif name == 'show':
            for number, text in enumerate(self.buffer, 1):
                self.output(f"{number:>4} {text}")
        elif name == 'undo':
            if self.buffer:
                self.buffer.pop()
        else:
            logger.warning(f"Unknown editor command: {command}")

        self.mode = EditorMode.INSERT

    def _load(self, filename: str) -> None:
        if not filename or len(filename.split()) != 1:
            logger.warning("Usage: :load <file>")
            return
        source = os.path.join(os.path.dirname(self.path), filename)
        if not self.fs.is_file(source):
            logger.warning(f'File "{filename}" does not exist.')
            return
        self.buffer = self.fs.read_text(source, self.encoding).splitlines()
        logger.info(f'File "{filename}" loaded.')
