"""Restore command - remove files from the staging area."""

import click
from pathlib import Path
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import success, error


@click.command('restore')
@click.argument('paths', nargs=-1, required=True)
@click.option('--staged', is_flag=True, help='Unstage the given paths')
def restore_cmd(paths, staged):
    """
    Unstage files.

    Only --staged is supported: the paths are removed from the index and
    the working tree is not touched.

    Examples:
        strata restore --staged file.txt
    """
    if not staged:
        click.echo(error("Restoring working tree files is not supported; use --staged"))
        raise click.Abort()

    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    failed = False
    for path_arg in paths:
        path = Path(path_arg)
        if not path.is_absolute():
            path = Path.cwd() / path
        try:
            repo.unstage(path)
            click.echo(success(f"Unstaged {path_arg}"))
        except StrataError as e:
            click.echo(error(str(e)))
            failed = True

    if failed:
        raise click.Abort()
