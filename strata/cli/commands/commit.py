"""Commit command - create a commit from staged changes."""

import click
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import success, error, info, short


@click.command('commit')
@click.option('-m', '--message', required=True, help='Commit message')
def commit_cmd(message):
    """
    Record changes to the repository.

    Creates a commit from the staged files in the index, advances the
    current branch to it and clears the index.

    Examples:
        strata commit -m "Initial commit"
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    staged = len(repo.storage.get_index_entries())

    try:
        commit_hash = repo.commit(message)
    except StrataError as e:
        click.echo(error(str(e)))
        if staged == 0:
            click.echo(info("Use 'strata add <file>' to stage changes"))
        raise click.Abort()

    commit = repo.read_commit(commit_hash)
    branch = repo.get_current_branch() or 'detached HEAD'

    click.echo(success(f"[{branch} {short(commit_hash)}] {message}"))
    click.echo(info(f"Author: {commit.author}"))
    if commit.parent:
        click.echo(info(f"Parent: {short(commit.parent)}"))
    else:
        click.echo(info("(root commit)"))
    click.echo(info(f"Tree: {short(commit.tree)}"))
    click.echo(info(f"Files: {staged}"))
