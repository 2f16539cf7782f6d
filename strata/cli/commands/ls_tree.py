"""Plumbing commands - inspect stored objects."""

import click
from strata.core.errors import StrataError
from strata.core.objects import Blob, Tree, Commit
from strata.core.repository import Repository
from strata.cli.output import error


@click.command('cat-file')
@click.argument('object_hash')
@click.option('-t', 'show_type', is_flag=True, help='Show object type')
@click.option('-s', 'show_size', is_flag=True, help='Show payload size')
def cat_file_cmd(object_hash, show_type, show_size):
    """
    Show the content, type or size of a stored object.

    Examples:
        strata cat-file <hash>
        strata cat-file -t <hash>
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    try:
        obj = repo.read_object(object_hash)
    except StrataError as e:
        click.echo(error(str(e)))
        raise click.Abort()

    if show_type:
        click.echo(obj.type)
    elif show_size:
        click.echo(len(obj.serialize()))
    elif isinstance(obj, Blob):
        click.echo(obj.data, nl=False)
    elif isinstance(obj, Tree):
        for entry in obj.entries:
            kind = 'tree' if entry.is_directory else 'blob'
            click.echo(f"{entry.mode} {kind} {entry.hash}\t{entry.name}")
    elif isinstance(obj, Commit):
        click.echo(obj.serialize().decode())


@click.command('ls-tree')
@click.argument('tree_ish', default='HEAD')
@click.option('-r', '--recursive', is_flag=True, help='Recurse into subtrees')
def ls_tree_cmd(tree_ish, recursive):
    """
    List the contents of a tree, a commit's tree, or HEAD.

    Examples:
        strata ls-tree
        strata ls-tree -r <commit-hash>
    """
    repo = Repository.find()
    if not repo:
        click.echo(error("Not a strata repository"))
        raise click.Abort()

    try:
        if tree_ish == 'HEAD':
            obj_hash = repo.storage.head_commit_hash()
            if obj_hash is None:
                click.echo(error("HEAD does not point to a commit yet"))
                raise click.Abort()
        elif repo.storage.has_object(tree_ish):
            obj_hash = tree_ish
        else:
            obj_hash = repo.storage.get_ref(tree_ish)

        obj = repo.read_object(obj_hash)
        tree_hash = obj.tree if isinstance(obj, Commit) else obj_hash

        if recursive:
            for path, blob_hash in sorted(repo.read_tree_files(tree_hash).items()):
                click.echo(f"100644 blob {blob_hash}\t{path}")
            return

        tree = repo.read_object(tree_hash)
        if not isinstance(tree, Tree):
            click.echo(error(f"{tree_ish} is not a tree"))
            raise click.Abort()
        for entry in tree.entries:
            kind = 'tree' if entry.is_directory else 'blob'
            click.echo(f"{entry.mode} {kind} {entry.hash}\t{entry.name}")
    except StrataError as e:
        click.echo(error(str(e)))
        raise click.Abort()
