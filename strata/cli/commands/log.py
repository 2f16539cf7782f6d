"""Log command - show commit history."""

import click
from datetime import datetime
from colorama import Fore, Style
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import error, info, short


def format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime('%a %b %d %H:%M:%S %Y')


@click.command('log')
@click.option('-n', '--max-count', type=int, default=None, help='Limit number of commits')
@click.option('--oneline', is_flag=True, help='Show each commit on one line')
def log_cmd(max_count, oneline):
    """
    Show commit history of the current branch.

    Examples:
        strata log
        strata log -n 5 --oneline
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    if repo.storage.head_commit_hash() is None:
        branch = repo.get_current_branch()
        click.echo(info(f"Branch '{branch}' does not have any commits yet"))
        return

    try:
        for count, (commit_hash, commit) in enumerate(repo.log()):
            if max_count is not None and count >= max_count:
                break

            if oneline:
                summary = commit.message.split('\n')[0]
                click.echo(f"{Fore.YELLOW}{short(commit_hash)}{Style.RESET_ALL} {summary}")
                continue

            click.echo(f"{Fore.YELLOW}commit {commit_hash}{Style.RESET_ALL}")
            click.echo(f"Author: {commit.author}")
            click.echo(f"Date:   {format_timestamp(commit.timestamp)}")
            click.echo()
            for line in commit.message.split('\n'):
                click.echo(f"    {line}")
            click.echo()
    except StrataError as e:
        click.echo(error(str(e)))
        raise click.Abort()
