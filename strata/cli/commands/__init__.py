"""CLI commands for Strata."""

from strata.cli.commands.init import init_cmd
from strata.cli.commands.add import add_cmd
from strata.cli.commands.commit import commit_cmd
from strata.cli.commands.branch import branch_cmd
from strata.cli.commands.checkout import checkout_cmd
from strata.cli.commands.status import status_cmd
from strata.cli.commands.restore import restore_cmd
from strata.cli.commands.log import log_cmd
from strata.cli.commands.ls_tree import cat_file_cmd, ls_tree_cmd
from strata.cli.commands.config import config_cmd

__all__ = ['init_cmd', 'add_cmd', 'commit_cmd', 'branch_cmd', 'checkout_cmd',
           'status_cmd', 'restore_cmd', 'log_cmd', 'cat_file_cmd', 'ls_tree_cmd',
           'config_cmd']
