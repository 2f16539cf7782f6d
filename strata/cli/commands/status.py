"""Status command - show working tree status."""

import click
from colorama import Fore, Style
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import success, error, info, short

LABELS = {
    'new': 'new file:   ',
    'modified': 'modified:   ',
    'unchanged': 'unchanged:  ',
}


@click.command('status')
def status_cmd():
    """
    Show the working tree status.

    Displays:
    - Files staged for the next commit (everything in the index)
    - Changes not staged for commit (modified or deleted files)
    - Untracked files

    Examples:
        strata status
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    try:
        report = repo.status()
    except StrataError as e:
        click.echo(error(str(e)))
        raise click.Abort()

    if report.branch is None:
        head = repo.storage.head_commit_hash() or ''
        click.echo(f"{Fore.YELLOW}HEAD detached at {short(head)}{Style.RESET_ALL}")
    else:
        click.echo(f"On branch {Fore.CYAN}{report.branch}{Style.RESET_ALL}")
    click.echo()

    if report.staged:
        click.echo(Fore.GREEN + "Changes to be committed:" + Style.RESET_ALL)
        click.echo(info("  (use \"strata restore --staged <file>...\" to unstage)"))
        click.echo()
        for path in report.staged:
            label = LABELS[report.staged_changes[path]]
            click.echo(f"  {Fore.GREEN}{label}{path}{Style.RESET_ALL}")
        click.echo()

    if report.unstaged or report.deleted:
        click.echo(Fore.YELLOW + "Changes not staged for commit:" + Style.RESET_ALL)
        click.echo(info("  (use \"strata add <file>...\" to update what will be committed)"))
        click.echo()
        for path in report.unstaged:
            click.echo(f"  {Fore.YELLOW}modified:   {path}{Style.RESET_ALL}")
        for path in report.deleted:
            click.echo(f"  {Fore.YELLOW}deleted:    {path}{Style.RESET_ALL}")
        click.echo()

    if report.untracked:
        click.echo(Fore.RED + "Untracked files:" + Style.RESET_ALL)
        click.echo(info("  (use \"strata add <file>...\" to include in what will be committed)"))
        click.echo()
        for path in report.untracked:
            click.echo(f"  {Fore.RED}{path}{Style.RESET_ALL}")
        click.echo()

    if report.is_clean:
        click.echo(success("Nothing to commit, working tree clean"))
    elif not report.staged:
        click.echo(info("No changes added to commit (use \"strata add\")"))
