import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence

import vagrant

from .config import get_config
from .configurator import SettingsLike, _as_settings, configure
from .constants import BINDFS_PLUGIN, VAGRANT_DEFAULT_PROVIDER
from .context import ProvisioningContext
from .vagrantfile import write

logger = logging.getLogger(__name__)


def check():
    if vagrant.get_vagrant_executable() is None:
        return [("access", False, "Vagrant executable not found")]
    statuses = [("access", True, "Looks good so far")]
    try:
        plugins = _detect_plugins(os.getcwd())
    except Exception as e:
        return statuses + [("plugins", False, str(e))]
    if BINDFS_PLUGIN in plugins:
        statuses.append((BINDFS_PLUGIN, True, "NFS folders will be rebound"))
    else:
        statuses.append(
            (BINDFS_PLUGIN, None, f"vagrant plugin install {BINDFS_PLUGIN}")
        )
    return statuses


def _detect_plugins(root: str) -> List[str]:
    v = vagrant.Vagrant(root=root)
    return [p.name for p in v.plugin_list()]


@dataclass(unsafe_hash=True)
class Machine:
    """SSH coordinates of the running guest."""

    alias: str
    address: str
    port: Optional[int] = None
    user: Optional[str] = None
    keyfile: Optional[str] = None


class Archlinux:
    """Bring an Arch Linux guest up with Vagrant.

    The provider turns the settings into a Vagrantfile written in ``root``
    and drives Vagrant from there.

    Example:

        .. code-block:: python

            settings = Settings.from_file("archbox.yaml")
            provider = Archlinux(settings)
            machine = provider.init()

            # run a backup registered in the settings
            provider.provision(["backup-mysql-app"])

            provider.destroy()

    Args:
        settings: :py:class:`~archbox.settings.Settings` or a mapping
        root: directory holding the Vagrantfile (default: current directory)
    """

    def __init__(self, settings: SettingsLike, root: Optional[str] = None):
        self.settings = _as_settings(settings)
        self.root = os.path.abspath(root or os.getcwd())
        self.context: Optional[ProvisioningContext] = None

    @property
    def vagrantfile(self) -> str:
        return os.path.join(self.root, get_config()["vagrantfile"])

    def build(self) -> ProvisioningContext:
        """Configure a fresh context and write the Vagrantfile."""
        plugins = get_config()["plugins"]
        if plugins is None:
            plugins = _detect_plugins(self.root)
        logger.debug("Vagrant plugins: %s", plugins)

        context = ProvisioningContext(plugins=plugins)
        configure(context, self.settings)
        write(context, self.vagrantfile)
        self.context = context
        return context

    def _vagrant(self, quiet_stderr: Optional[bool] = None) -> vagrant.Vagrant:
        config = get_config()
        # Build env for Vagrant with a copy of env variables (needed by
        # subprocess opened by vagrant)
        v_env = dict(os.environ)
        if self.context is not None:
            v_env[VAGRANT_DEFAULT_PROVIDER] = self.context.default_provider
        else:
            v_env[VAGRANT_DEFAULT_PROVIDER] = self.settings.provider
        return vagrant.Vagrant(
            root=self.root,
            quiet_stdout=config["quiet_stdout"],
            quiet_stderr=config["quiet_stderr"] if quiet_stderr is None else quiet_stderr,
            env=v_env,
        )

    def init(self, force_deploy: bool = False) -> Machine:
        """Write the Vagrantfile and boot the guest.

        Args:
            force_deploy: destroy the guest first

        Returns:
            The SSH coordinates of the guest
        """
        context = self.build()
        v = self._vagrant()
        if force_deploy:
            v.destroy()
        v.up()

        machine = Machine(
            alias=context.vm.hostname,
            address=v.hostname(),
            port=int(v.port()),
            user=v.user(),
            keyfile=v.keyfile(),
        )
        logger.debug(machine)
        return machine

    def provision(self, names: Optional[Sequence[str]] = None):
        """Run the provisioners again, or only those named in ``names``.

        On-demand provisioners (backups) only run when named.
        """
        v = self._vagrant()
        if names:
            v.provision(provision_with=list(names))
        else:
            v.provision()

    def destroy(self):
        """Destroy the guest."""
        v = self._vagrant(quiet_stderr=True)
        v.destroy()
