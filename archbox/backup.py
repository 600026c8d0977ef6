"""Database backups.

A backup is an on-demand shell provisioner: it is never run by ``vagrant up``
and has to be triggered explicitly, e.g.::

    vagrant provision --provision-with backup-mysql-app

Strategies are looked up by database kind, new ones can be plugged with
:py:func:`register_strategy`.
"""
import logging
import posixpath
import shlex
from abc import ABCMeta, abstractmethod
from typing import Dict, Tuple

from .context import Provision, ProvisioningContext
from .errors import ArchboxBackupError

logger = logging.getLogger(__name__)


class BackupStrategy(metaclass=ABCMeta):
    kind: str = ""
    aliases: Tuple[str, ...] = ()

    @abstractmethod
    def dump(self, database: str) -> str:
        """Shell command writing the dump of ``database`` on stdout."""
        pass

    def provision_name(self, database: str) -> str:
        return f"backup-{self.kind}-{database}"

    def command(self, database: str, directory: str) -> str:
        target = posixpath.join(directory, f"{database}.sql")
        return (
            f"mkdir -p {shlex.quote(directory)} && "
            f"{self.dump(database)} > {shlex.quote(target)}"
        )

    def register(
        self, database: str, directory: str, context: ProvisioningContext
    ) -> Provision:
        name = self.provision_name(database)
        logger.debug("Registering %s (dump to %s)", name, directory)
        return context.vm.provision(
            "shell",
            name=name,
            run="never",
            inline=self.command(database, directory),
        )


class MysqlBackup(BackupStrategy):
    kind = "mysql"
    aliases = ("mariadb",)

    def dump(self, database: str) -> str:
        return f"mysqldump --routines --single-transaction {shlex.quote(database)}"


class PostgresBackup(BackupStrategy):
    kind = "postgres"
    aliases = ("postgresql",)

    def dump(self, database: str) -> str:
        return f"sudo -u postgres pg_dump {shlex.quote(database)}"


_STRATEGIES: Dict[str, BackupStrategy] = {}


def register_strategy(strategy: BackupStrategy):
    for kind in (strategy.kind,) + tuple(strategy.aliases):
        _STRATEGIES[kind.lower()] = strategy


def get_strategy(kind: str) -> BackupStrategy:
    try:
        return _STRATEGIES[kind.lower()]
    except KeyError:
        raise ArchboxBackupError(kind) from None


def backup(
    kind: str, database: str, directory: str, context: ProvisioningContext
) -> Provision:
    return get_strategy(kind).register(database, directory, context)


register_strategy(MysqlBackup())
register_strategy(PostgresBackup())
