from pathlib import Path

import click

from codegateway.config.defaults import CONFIG_FILE_NAMES
from codegateway.config.loader import create_default_config_file


@click.command()
@click.option('--directory', '-d', type=click.Path(file_okay=False), default='.', help='Where to write the config file.')
@click.option('--force', is_flag=True, help='Overwrite an existing config file.')
def init(directory, force):
    """
    Write a starter codegateway.yaml.
    """
    target = Path(directory) / CONFIG_FILE_NAMES[0]
    if target.exists() and not force:
        raise click.ClickException(f"{target} already exists. Use --force to overwrite it.")

    target.parent.mkdir(parents=True, exist_ok=True)
    path = create_default_config_file(str(target.parent))
    click.echo(f"Created {path}")
