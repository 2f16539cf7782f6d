"""Initialize a new Strata repository."""

import click
from pathlib import Path
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import success, error, info


@click.command('init')
@click.argument('path', default='.')
@click.option('-b', '--initial-branch', default='master', show_default=True,
              help='Name of the first branch')
def init_cmd(path, initial_branch):
    """
    Initialize a new Strata repository.

    Creates a .strata directory with the object store, refs, HEAD and
    an empty index.

    Examples:
        strata init                 # Initialize in current directory
        strata init my-project      # Initialize in my-project directory
    """
    repo_path = Path(path).resolve()

    try:
        repo = Repository.init(str(repo_path), default_branch=initial_branch)
    except StrataError as e:
        click.echo(error(str(e)))
        raise click.Abort()
    except PermissionError:
        click.echo(error(f"Permission denied: Cannot create repository at {path}"))
        raise click.Abort()

    click.echo(success(f"Initialized empty Strata repository in {repo.meta_dir}"))
    click.echo(info(f"On branch {initial_branch} (no commits yet)"))
