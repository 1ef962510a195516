"""
Non-interactive statement execution for filang.

``filang exec`` runs statements given on the command line and
``filang run`` runs a script file, one statement per line.
"""

from pathlib import Path
from typing import List, Optional, Tuple

import click

from ..cli_utils import check_results, run_statements, standard_command
from ..config import configure_logging, load_config
from ..services.interpreter import Interpreter
from ..services.session import Session


def _interpreter(directory: Optional[str]) -> Interpreter:
    config = load_config()
    configure_logging(config)
    session = Session(directory) if directory else None
    return Interpreter(config=config, session=session)


def script_lines(text: str) -> List[str]:
    """Statements of a script: trimmed lines minus blanks and // comments."""
    lines = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith('//'):
            lines.append(stripped)
    return lines


@click.command('exec')
@click.argument('statements', nargs=-1, required=True)
@click.option('--directory', '-d', type=click.Path(exists=True, file_okay=False),
              help='Folder to run the statements in')
@click.option('--json', 'as_json', is_flag=True, help='Print each result as a JSON line')
@standard_command
def exec_handler(statements: Tuple[str, ...], directory: Optional[str], as_json: bool):
    """
    Run one or more statements and exit.

    Examples:

        filang exec 'COUNT FILES'

        filang exec 'CREATE FOLDER "archive"' 'MOVE FILES WHERE name LIKE "%.bak" TO "archive"'

        filang exec --json 'SELECT FILES WHERE size > 1048576 ORDER BY size DESC'
    """
    results = run_statements(_interpreter(directory), statements, as_json=as_json)
    check_results(results)


@click.command('run')
@click.argument('script', type=click.Path(exists=True, dir_okay=False))
@click.option('--directory', '-d', type=click.Path(exists=True, file_okay=False),
              help='Folder to run the script in (defaults to the current folder)')
@click.option('--json', 'as_json', is_flag=True, help='Print each result as a JSON line')
@standard_command
def run_handler(script: str, directory: Optional[str], as_json: bool):
    """
    Run a .fql script, one statement per line.

    Blank lines and lines starting with // are skipped.

    Examples:

        filang run cleanup.fql --directory ~/Downloads
    """
    path = Path(script)
    if path.suffix.lower() != '.fql':
        raise click.BadParameter("script must have the .fql extension", param_hint='SCRIPT')

    lines = script_lines(path.read_text(encoding='utf-8'))
    results = run_statements(_interpreter(directory), lines, as_json=as_json)
    check_results(results)
