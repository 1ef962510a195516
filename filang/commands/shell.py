"""
Shell command for filang.
"""

import click
import sys


@click.command()
@click.option('--directory', '-d', type=click.Path(exists=True, file_okay=False),
              help='Folder to start in (defaults to the configured start folder)')
def shell_handler(directory):
    """Launch the interactive filang shell.

    Every line is one statement. Keywords are case-insensitive.

    Examples:

        filang shell

        filang:/tmp> CREATE FILE "notes.txt"
        filang:/tmp> WRITE FILE "notes.txt" TO "first line\\nsecond line"
        filang:/tmp> SELECT FILES WHERE extension = ".txt" ORDER BY size DESC
        filang:/tmp> USE "logs"
        filang:/tmp/logs> DELETE FILES WHERE modified < "2024-01-01"
        filang:/tmp/logs> DROP
    """
    from filang.config import configure_logging, load_config
    from filang.shell import run_shell

    configure_logging(load_config())
    try:
        run_shell(directory)
    except KeyboardInterrupt:
        click.echo("\nShell closed.")
    except Exception as e:
        click.echo(f"Error running shell: {e}", err=True)
        sys.exit(1)
