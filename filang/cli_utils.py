"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
from functools import wraps
from typing import Iterable, List

import click

from .domain.event import StatementResult
from .exit_codes import (
    GENERAL_ERROR, INTERRUPTED, SUCCESS,
    CommandError, PartialSuccessError, get_exit_code_for_exception,
)
from .render import render_result
from .services.interpreter import Interpreter


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Consistent error handling on stderr
    - Exit code taken from CommandError, or mapped from the exception type
    - Exit code 130 on Ctrl+C
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(e.exit_code)
        except Exception as e:
            click.echo(f"Command failed: {e}", err=True)
            sys.exit(get_exit_code_for_exception(e))
        sys.exit(SUCCESS)

    return wrapper


def run_statements(interpreter: Interpreter, lines: Iterable[str],
                   as_json: bool = False) -> List[StatementResult]:
    """
    Execute statements one after another and print what they produce.

    Records are rendered as tables, or every result is printed as one
    JSON line when ``as_json`` is set.
    """
    results = []
    for line in lines:
        result = interpreter.execute(line)
        results.append(result)
        if as_json:
            print(json.dumps(result.to_dict(), ensure_ascii=False), flush=True)
        else:
            render_result(result)
    return results


def check_results(results: List[StatementResult]) -> None:
    """
    Raise the error matching the worst outcome among ``results``.

    Raises:
        CommandError: With the exit code of the first aborted statement
        PartialSuccessError: If some items failed but no statement aborted
    """
    for result in results:
        code = result.exit_code
        if code is not None:
            raise CommandError(f"Statement {type(result.statement).__name__} failed", code)

    failed = sum(r.failed for r in results)
    if failed:
        succeeded = sum(r.succeeded for r in results)
        if not succeeded:
            raise CommandError(f"{failed} operation(s) failed", GENERAL_ERROR)
        raise PartialSuccessError(
            f"{failed} operation(s) failed, {succeeded} succeeded",
            succeeded=succeeded,
            failed=failed,
        )


__all__ = [
    'standard_command',
    'run_statements',
    'check_results',
]
