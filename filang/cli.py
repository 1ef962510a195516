#!/usr/bin/env python3

import click

from filang import __version__
from filang.commands.config import config_cmd
from filang.commands.exec import exec_handler, run_handler
from filang.commands.shell import shell_handler


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="filang")
@click.pass_context
def cli(ctx):
    """filang - Query and manage files with a small SQL-like language.

    Without a command, starts the interactive shell.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(shell_handler)


cli.add_command(shell_handler, name='shell')
cli.add_command(exec_handler, name='exec')
cli.add_command(run_handler, name='run')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
