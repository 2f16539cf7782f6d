"""Checkout command - switch branches."""

import click
from strata.core.errors import StrataError
from strata.core.repository import Repository
from strata.cli.output import success, error, info


@click.command('checkout')
@click.argument('branch')
@click.option('--materialize', is_flag=True,
              help="Also rewrite working tree files to match the branch")
def checkout_cmd(branch, materialize):
    """
    Switch HEAD to another branch.

    Without --materialize only HEAD moves; working tree files are left
    as they are.

    Examples:
        strata checkout feature
        strata checkout master --materialize
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    try:
        repo.checkout(branch, materialize=materialize)
    except StrataError as e:
        click.echo(error(str(e)))
        raise click.Abort()

    click.echo(success(f"Switched to branch '{branch}'"))
    if not materialize:
        click.echo(info("Working tree left unchanged (use --materialize to update files)"))
