"""Branch command - list or create branches."""

import click
from colorama import Fore, Style
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import success, error, info, short


@click.command('branch')
@click.argument('name', required=False)
@click.option('-v', '--verbose', is_flag=True, help='Show the commit each branch points to')
def branch_cmd(name, verbose):
    """
    List branches, or create a new one at the current commit.

    Creating a branch does not switch to it.

    Examples:
        strata branch               # List branches
        strata branch feature       # Create branch 'feature'
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    if name:
        try:
            commit_hash = repo.create_branch(name)
        except StrataError as e:
            click.echo(error(str(e)))
            raise click.Abort()
        click.echo(success(f"Created branch '{name}' at {short(commit_hash)}"))
        return

    current = repo.get_current_branch()
    refs = repo.storage.list_refs()

    if not refs:
        click.echo(info(f"No branches yet (HEAD is on unborn branch '{current}')"))
        return

    for branch, commit_hash in refs.items():
        suffix = f" {short(commit_hash)}" if verbose else ""
        if branch == current:
            click.echo(f"* {Fore.GREEN}{branch}{Style.RESET_ALL}{suffix}")
        else:
            click.echo(f"  {branch}{suffix}")
