"""Add command - stage files for commit."""

import click
from pathlib import Path
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import success, error, info, warning


@click.command('add')
@click.argument('paths', nargs=-1, required=True)
def add_cmd(paths):
    """
    Add file contents to the staging area.

    Directories are added recursively. Modified files must be added
    again to stage the new changes.

    Examples:
        strata add file.txt
        strata add src
        strata add .
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    added_files = []
    failed_files = []

    for path_arg in paths:
        path = Path(path_arg)
        if not path.is_absolute():
            path = Path.cwd() / path

        try:
            added_files.extend(repo.add(path))
        except FileNotFoundError:
            failed_files.append((path_arg, "File not found"))
        except StrataError as e:
            failed_files.append((path_arg, str(e)))

    if added_files:
        click.echo(success(f"Added {len(added_files)} file(s) to staging area"))
        for file in added_files:
            click.echo(info(f"  {file}"))

    if failed_files:
        click.echo(error(f"Failed to add {len(failed_files)} path(s):"))
        for file, reason in failed_files:
            click.echo(error(f"  {file}: {reason}"))
        raise click.Abort()

    if not added_files:
        click.echo(warning("No files matched"))
