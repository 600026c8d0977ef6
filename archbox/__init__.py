# flake8: noqa
import logging
from typing import Any, Dict, List, Optional, Tuple

from archbox.backup import (
    BackupStrategy,
    MysqlBackup,
    PostgresBackup,
    backup,
    get_strategy,
    register_strategy,
)
from archbox.config import config_context, get_config, set_config
from archbox.configurator import configure, validate_backups, validate_private_keys
from archbox.context import ProvisioningContext
from archbox.errors import (
    ArchboxBackupError,
    ArchboxEmptyPrivateKeysError,
    ArchboxError,
    ArchboxFilePathError,
    ArchboxPrivateKeyError,
    ArchboxPrivateKeyNotFoundError,
    ArchboxSettingsError,
)
from archbox.provider import Archlinux, Machine
from archbox.provider import check as vagrant_check
from archbox.settings import Settings
from archbox.vagrantfile import render

from .version import __source__, __version__

INFO = f"""
- archbox {__version__}
- Source: [{__source__}]({__source__})
"""


def _check_statuses() -> List[Tuple[str, Optional[bool], str]]:
    try:
        return vagrant_check()
    except Exception as e:
        return [("access", False, str(e))]


def _print_check_table(statuses: List[Tuple[str, Optional[bool], str]], console):
    from rich.table import Table

    table = Table(title="Vagrant check")
    table.add_column("Key")
    table.add_column("Status", justify="center")
    table.add_column("Hint", no_wrap=True, width=40)

    for (key, status_ok, hint) in statuses:
        if status_ok is None:
            status_str = "❔"
        elif status_ok:
            status_str = "✅"
        else:
            status_str = "❌"
        table.add_row(key, status_str, hint)

    console.print(table)


def check():
    """Check that Vagrant and its optional plugins are usable."""
    from rich.console import Console
    from rich.markdown import Markdown

    console = Console()
    console.print(Markdown(INFO))
    _print_check_table(_check_statuses(), console)


def init_logging(level=logging.INFO, **kwargs):
    """Enable Rich display of log messages.

    kwargs: kwargs passed to RichHandler.
      archbox chooses some defaults for you
        show_time=False,
    """
    from rich.logging import RichHandler

    default_kwargs: Dict[str, Any] = dict(
        show_time=False,
    )

    default_kwargs.update(**kwargs)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(**default_kwargs)],
    )

    return logging
