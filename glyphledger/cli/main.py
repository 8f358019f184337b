"""glyph CLI entry point - assembles all command groups."""
import logging

import click

from glyphledger import __version__

from .anchor_cmd import anchor
from .compact_cmd import compact
from .receipt_cmd import receipt
from .twin_cmd import twin


@click.group()
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Debug logging on stderr')
def cli(verbose: bool):
    """glyph: tamper-evident receipt ledger."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


cli.add_command(compact)
cli.add_command(receipt)
cli.add_command(anchor)
cli.add_command(twin)


if __name__ == "__main__":
    cli()
