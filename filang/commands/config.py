import click
import json

from filang.config import get_config_path, get_default_config, load_config, save_config


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
def show_config(pretty):
    """Show the current configuration with all merges applied.

    Defaults, then the config file, then FILANG_SECTION_KEY environment
    variables. By default, outputs single-line JSON.
    """
    config = load_config()

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))


@config_cmd.command("path")
def config_path():
    """Show the config file path being used."""
    print(json.dumps({"config_path": str(get_config_path())}))


@config_cmd.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
def init_config(force):
    """Write the default configuration file."""
    path = get_config_path()
    if path.exists() and not force:
        click.echo(f"Configuration already exists at {path}. Use --force to overwrite.")
        return
    written = save_config(get_default_config())
    click.echo(f"Default configuration written to {written}.")
