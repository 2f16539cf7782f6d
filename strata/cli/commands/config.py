"""Config command - manage repository configuration."""

import click
from strata.core.config import Config
from strata.core.repository import Repository
from strata.cli.output import success, error, info


def split_key(key):
    """Split 'section.option' into its parts; bare keys go to 'core'."""
    return key.split('.', 1) if '.' in key else ('core', key)


def load_config(is_global, require_repo=False):
    repo = None if is_global else Repository.find()
    if require_repo and not is_global and not repo:
        click.echo(error("Not a strata repository (use --global for global config)"))
        raise click.Abort()
    if repo:
        return Config(repo.config_file)
    return Config()


@click.group('config')
def config_cmd():
    """Get and set repository or global options."""
    pass


@config_cmd.command('set')
@click.argument('key')
@click.argument('value')
@click.option('--global', 'is_global', is_flag=True, help='Set global config')
def config_set(key, value, is_global):
    """
    Set a config value.

    Examples:
        strata config set user.name "Your Name"
        strata config set --global user.email "you@example.com"
    """
    config = load_config(is_global, require_repo=True)
    section, option = split_key(key)
    config.set(section, option, value, global_config=is_global)

    scope = "global" if is_global else "repository"
    click.echo(success(f"Set {scope} config: {key} = {value}"))


@config_cmd.command('get')
@click.argument('key')
@click.option('--global', 'is_global', is_flag=True, help='Get global config only')
def config_get(key, is_global):
    """
    Get a config value.

    Examples:
        strata config get user.name
    """
    config = load_config(is_global)
    section, option = split_key(key)
    value = config.get(section, option)

    if value is None:
        click.echo(error(f"Config key not found: {key}"))
        raise click.Abort()
    click.echo(value)


@config_cmd.command('unset')
@click.argument('key')
@click.option('--global', 'is_global', is_flag=True, help='Unset in global config')
def config_unset(key, is_global):
    """Remove a config value."""
    config = load_config(is_global, require_repo=True)
    section, option = split_key(key)

    if not config.unset(section, option, global_config=is_global):
        click.echo(error(f"Config key not found: {key}"))
        raise click.Abort()
    click.echo(success(f"Unset {key}"))


@config_cmd.command('list')
@click.option('--global', 'is_global', is_flag=True, help='List global config only')
def config_list(is_global):
    """
    List all config values; repository values override global ones.

    Examples:
        strata config list
        strata config list --global
    """
    values = load_config(is_global).list_all()

    if not values:
        click.echo(info("No configuration set"))
        return

    for section, options in values.items():
        for key, value in options.items():
            click.echo(f"{section}.{key}={value}")
