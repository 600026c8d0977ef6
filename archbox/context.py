"""Recording counterpart of Vagrant's ``config`` object.

A :py:class:`ProvisioningContext` exposes the subset of the Vagrantfile API
the configurator needs (``config.vm.network``, ``config.vm.provider``,
``config.vm.provision``, ``config.vm.synced_folder``,
``config.bindfs.bind_folder``) and records every call, in order. The
recorded declarations are later rendered into a Vagrantfile by
:py:mod:`archbox.vagrantfile`.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class Symbol:
    """A Ruby symbol (e.g ``:id`` in ``v.customize``)."""

    name: str

    def __str__(self):
        return f":{self.name}"


#: placeholder VirtualBox substitutes with the VM uuid
ID = Symbol("id")


@dataclass
class Network:
    type: str
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ProviderBlock:
    name: str
    vm_name: Optional[str] = None
    memory: Optional[Any] = None
    cpus: Optional[Any] = None
    gui: bool = False
    customizations: List[List[Any]] = field(default_factory=list)

    def customize(self, args: List[Any]):
        self.customizations.append(list(args))


@dataclass
class Provision:
    kind: str
    name: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SyncedFolder:
    source: str
    destination: str
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BindFolder:
    source: str
    destination: str


class VMConfig:
    """Mirrors ``config.vm``."""

    def __init__(self):
        self.box: Optional[str] = None
        self.hostname: Optional[str] = None
        self.networks: List[Network] = []
        self.providers: Dict[str, ProviderBlock] = {}
        self.provisions: List[Provision] = []
        self.synced_folders: List[SyncedFolder] = []

    def network(self, network_type: str, **options) -> Network:
        network = Network(network_type, options)
        self.networks.append(network)
        return network

    def provider(self, name: str) -> ProviderBlock:
        """Get the provider block, created on first access.

        Like Vagrant, declaring the same provider twice amends one block.
        """
        return self.providers.setdefault(name, ProviderBlock(name))

    def provision(self, kind: str, name: Optional[str] = None, **options) -> Provision:
        provision = Provision(kind, name, options)
        self.provisions.append(provision)
        return provision

    def synced_folder(self, source: str, destination: str, **options) -> SyncedFolder:
        folder = SyncedFolder(source, destination, options)
        self.synced_folders.append(folder)
        return folder

    @property
    def forwarded_ports(self) -> List[Network]:
        return [n for n in self.networks if n.type == "forwarded_port"]


class BindfsConfig:
    """Mirrors ``config.bindfs`` (vagrant-bindfs plugin)."""

    def __init__(self):
        self.binds: List[BindFolder] = []

    def bind_folder(self, source: str, destination: str) -> BindFolder:
        bind = BindFolder(source, destination)
        self.binds.append(bind)
        return bind


class ProvisioningContext:
    """Mutation target of the configurator.

    Args:
        plugins: names of the Vagrant plugins available on the host. They
            gate optional declarations (see :py:meth:`has_plugin`).
    """

    def __init__(self, plugins: Optional[Iterable[str]] = None):
        self.default_provider: Optional[str] = None
        self.vm = VMConfig()
        self.bindfs = BindfsConfig()
        self.plugins = set(plugins or [])

    def has_plugin(self, name: str) -> bool:
        return name in self.plugins

    def declarations(self) -> List[Any]:
        """Everything that has been declared, grouped by kind."""
        return (
            list(self.vm.networks)
            + list(self.vm.providers.values())
            + list(self.vm.provisions)
            + list(self.vm.synced_folders)
            + list(self.bindfs.binds)
        )
