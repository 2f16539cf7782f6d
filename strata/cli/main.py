"""Main CLI entry point for Strata."""

import logging

import click
from colorama import init

from strata import __version__
from strata.cli.output import BANNER
from strata.cli.commands import (init_cmd, add_cmd, commit_cmd, branch_cmd, checkout_cmd,
                                 status_cmd, restore_cmd, log_cmd, cat_file_cmd,
                                 ls_tree_cmd, config_cmd)

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class StrataGroup(click.Group):
    """Custom Group class to display banner before help."""

    def format_help(self, ctx, formatter):
        click.echo(BANNER)
        super().format_help(ctx, formatter)


@click.group(cls=StrataGroup)
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Show debug logging')
def cli(verbose):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(levelname)s %(name)s: %(message)s'
        )


cli.add_command(init_cmd)
cli.add_command(add_cmd)
cli.add_command(commit_cmd)
cli.add_command(branch_cmd)
cli.add_command(checkout_cmd)
cli.add_command(status_cmd)
cli.add_command(restore_cmd)
cli.add_command(log_cmd)
cli.add_command(cat_file_cmd)
cli.add_command(ls_tree_cmd)
cli.add_command(config_cmd)


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
