"""gradpass CLI entry point - assembles all command groups."""
import logging

import click

from gradpass import __version__

from .checkin_cmd import checkin
from .offline_cmd import offline
from .simulate_cmd import simulate


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Log at INFO level')
def cli(verbose: bool):
    """gradpass: ceremony admission that survives the venue Wi-Fi."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


cli.add_command(checkin)
cli.add_command(offline)
cli.add_command(simulate)


if __name__ == "__main__":
    cli()
