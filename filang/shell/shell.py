"""
Interactive shell for filang.

Reads one statement per line, hands it to the interpreter and renders
whatever records the statement produced. The prompt shows the current
working folder.
"""

import cmd
import sys
from typing import List, Optional

from ..config import load_config
from ..domain.event import StatementResult
from ..parsing.router import COMMANDS
from ..render import render_result
from ..services.interpreter import Interpreter
from ..services.session import Session
from .editor import LineEditor


class FilangShell(cmd.Cmd):
    """Interactive shell for filang statements."""

    intro = """
╔═══════════════════════════════════════════════════════════════════╗
║                     filang Interactive Shell                      ║
║                                                                   ║
║  Query:  SELECT FILES WHERE size > 1024 ORDER BY size DESC        ║
║  Files:  CREATE, READ, WRITE, UPDATE, EDIT, DELETE, MERGE         ║
║  Move:   MOVE, COPY, RENAME, CHMOD                                ║
║  Folders: USE "<dir>", DROP, LIST *, COUNT ALL                    ║
║  Scripts: LOAD "<script>.fql"                                     ║
║  Press Tab to complete commands, 'exit' or Ctrl+D to quit        ║
╚═══════════════════════════════════════════════════════════════════╝
"""

    def __init__(self, interpreter: Optional[Interpreter] = None,
                 directory: Optional[str] = None, stdin=None, stdout=None):
        """Initialize the shell."""
        super().__init__(stdin=stdin, stdout=stdout)
        if stdin is not None:
            self.use_rawinput = False

        if interpreter is None:
            config = load_config()
            interpreter = Interpreter(config=config, session=Session(directory) if directory else None)
            interpreter.editor = LineEditor(interpreter.fs, encoding=interpreter.encoding)
        self.interpreter = interpreter
        self.last_result: Optional[StatementResult] = None
        self.update_prompt()

    def update_prompt(self):
        """Update the shell prompt based on the current folder."""
        self.prompt = f"filang:{self.interpreter.cwd}> "

    def default(self, line):
        """Run any line that is not a shell builtin as a statement."""
        text = line.strip()
        if text.lower() in ('exit', 'quit'):
            return self.do_exit('')

        self.last_result = self.interpreter.execute(text)
        render_result(self.last_result)

    def postcmd(self, stop, line):
        self.update_prompt()
        return stop

    def emptyline(self):
        """Do nothing on empty line."""
        pass

    def do_exit(self, arg):
        """Exit the shell."""
        self.stdout.write("\nGoodbye!\n")
        return True

    def do_quit(self, arg):
        """Exit the shell."""
        return self.do_exit(arg)

    def do_EOF(self, arg):
        """Handle Ctrl+D to exit."""
        self.stdout.write("\n")
        return self.do_exit(arg)

    def completenames(self, text, line='', begidx=0, endidx=None):
        line = line or text
        endidx = len(line) if endidx is None else endidx
        return self._complete_phrase(line, begidx, endidx) + super().completenames(text)

    def completedefault(self, text, line, begidx, endidx):
        return self._complete_phrase(line, begidx, endidx)

    def _complete_phrase(self, line: str, begidx: int, endidx: int) -> List[str]:
        """Complete the current word against the known command phrases."""
        typed = line[:endidx].lstrip().upper()
        position = len(line[:begidx].split())
        matches = set()
        for phrase in COMMANDS:
            words = phrase.split()
            if phrase.startswith(typed) and position < len(words):
                matches.add(words[position] + ' ')
        return sorted(matches)


def run_shell(directory: Optional[str] = None):
    """Run the interactive shell."""
    try:
        shell = FilangShell(directory=directory)
        shell.cmdloop()
    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
        sys.exit(0)
