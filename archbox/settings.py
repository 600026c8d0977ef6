import json
import logging
import os
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Union

import jsonschema
import yaml
from netaddr import valid_ipv4

from .constants import (
    DEFAULT_BOX,
    DEFAULT_CPUS,
    DEFAULT_HOSTNAME,
    DEFAULT_IP,
    DEFAULT_MEMORY,
    DEFAULT_NAME,
    DEFAULT_NATDNSHOSTRESOLVER,
    DEFAULT_NETMASK,
    DEFAULT_PROTOCOL,
    DEFAULT_PROVIDER,
    DHCP,
    SMB_CREDENTIALS,
)
from .errors import ArchboxFilePathError, ArchboxSettingsError
from .schema import SCHEMA

logger = logging.getLogger(__name__)


class Settings:
    """Settings of an Arch Linux guest.

    Every default is resolved once, when the object is built, and written
    back on the object itself. Later reads (e.g. checking whether a custom
    port overrides a default one) see the filled-in values, and
    :py:meth:`to_dict` gives the normalized record.

    Examples:

        .. code-block:: python

            settings = Settings.from_dictionary(
                {"ip": "dhcp", "ports": [{"guest": 80, "host": 8080}]}
            )
            settings.ports[0].protocol
            # 'tcp'

        or programmatically

        .. code-block:: python

            settings = (
                Settings()
                .set(hostname="devbox", memory=4096)
                .add_port(guest=80, host=8080)
                .add_folder(map="~/code", to="/home/vagrant/code", type="nfs")
                .finalize()
            )
    """

    _SCHEMA = SCHEMA

    def __init__(self):
        self.provider = DEFAULT_PROVIDER
        self.box = DEFAULT_BOX
        self.hostname = DEFAULT_HOSTNAME
        self.ip = DEFAULT_IP
        self.name = DEFAULT_NAME
        self.memory: Union[int, str] = DEFAULT_MEMORY
        self.cpus: Union[int, str] = DEFAULT_CPUS
        self.natdnshostresolver = DEFAULT_NATDNSHOSTRESOLVER
        self.gui = False
        self.default_ssh_port: Optional[Union[int, str]] = None
        self.default_ports = True
        self.pubkey: Optional[str] = None
        # None means the key is absent, [] that it's present but empty
        self.privkeys: Optional[List[str]] = None

        self.networks: List[NetworkConfiguration] = []
        self.ports: List[PortConfiguration] = []
        self.copy: List[CopyConfiguration] = []
        self.folders: List[FolderConfiguration] = []
        self.backups: List[BackupConfiguration] = []

    @classmethod
    def from_dictionary(cls, dictionary: Mapping, validate: bool = True) -> "Settings":
        """Alternative constructor. Build the settings from a dictionary."""
        if validate:
            cls.validate(dictionary)

        unknown = sorted(set(dictionary) - set(cls._SCHEMA["properties"]))
        if unknown:
            logger.debug("Ignoring unknown settings %s", unknown)

        self = cls()
        for key in [
            "provider",
            "box",
            "hostname",
            "ip",
            "name",
            "memory",
            "cpus",
            "natdnshostresolver",
            "gui",
            "default_ssh_port",
            "default_ports",
            "pubkey",
        ]:
            value = dictionary.get(key)
            if value is not None:
                setattr(self, key, value)

        if "privkeys" in dictionary:
            self.privkeys = list(dictionary["privkeys"] or [])

        self.networks = [
            NetworkConfiguration.from_dictionary(n)
            for n in dictionary.get("networks", [])
        ]
        self.ports = [
            PortConfiguration.from_dictionary(p) for p in dictionary.get("ports", [])
        ]
        self.copy = [
            CopyConfiguration.from_dictionary(c) for c in dictionary.get("copy", [])
        ]
        self.folders = [
            FolderConfiguration.from_dictionary(f)
            for f in dictionary.get("folders", [])
        ]
        self.backups = [
            BackupConfiguration.from_dictionary(b)
            for b in dictionary.get("backups", [])
        ]

        self.finalize()
        return self

    @classmethod
    def from_file(cls, path: str) -> "Settings":
        """Alternative constructor. Build the settings from a YAML file.

        JSON documents are valid YAML, so ``settings.json`` works as well.
        """
        path = os.path.expanduser(path)
        if not os.path.isfile(path):
            raise ArchboxFilePathError(path, f"{path} is not a file")
        with open(path) as f:
            dictionary = yaml.safe_load(f) or {}
        logger.debug("Settings loaded from %s", path)
        return cls.from_dictionary(dictionary)

    @classmethod
    def validate(cls, dictionary: Mapping):
        try:
            jsonschema.validate(dictionary, cls._SCHEMA)
        except jsonschema.exceptions.ValidationError as e:
            raise ArchboxSettingsError(e.message, error=e) from e

        ips = []
        if dictionary.get("ip", DHCP) != DHCP:
            ips.append(dictionary["ip"])
        for network in dictionary.get("networks", []):
            ips.extend(
                network[k] for k in ["ip", "netmask"] if network.get(k) is not None
            )
        for ip in ips:
            if not valid_ipv4(ip):
                raise ArchboxSettingsError(f"{ip} is not a valid IPv4 address")

    def finalize(self) -> "Settings":
        if isinstance(self.natdnshostresolver, bool):
            self.natdnshostresolver = "on" if self.natdnshostresolver else "off"
        d = self.to_dict()
        logger.debug(json.dumps(d, indent=4))
        self.validate(d)
        return self

    def set(self, **kwargs) -> "Settings":
        for k, v in kwargs.items():
            setattr(self, k, v)
        return self

    def add_network(self, **kwargs) -> "Settings":
        self.networks.append(NetworkConfiguration(**kwargs))
        return self

    def add_port(self, **kwargs) -> "Settings":
        self.ports.append(PortConfiguration(**kwargs))
        return self

    def add_copy(self, **kwargs) -> "Settings":
        self.copy.append(CopyConfiguration(**kwargs))
        return self

    def add_folder(self, **kwargs) -> "Settings":
        self.folders.append(FolderConfiguration(**kwargs))
        return self

    def add_backup(self, **kwargs) -> "Settings":
        self.backups.append(BackupConfiguration(**kwargs))
        return self

    @property
    def is_dhcp(self) -> bool:
        return self.ip == DHCP

    def to_dict(self) -> Dict:
        d: Dict = {}
        d.update(
            provider=self.provider,
            box=self.box,
            hostname=self.hostname,
            ip=self.ip,
            name=self.name,
            memory=self.memory,
            cpus=self.cpus,
            natdnshostresolver=self.natdnshostresolver,
            gui=self.gui,
            default_ports=self.default_ports,
            networks=[n.to_dict() for n in self.networks],
            ports=[p.to_dict() for p in self.ports],
            copy=[c.to_dict() for c in self.copy],
            folders=[f.to_dict() for f in self.folders],
            backups=[b.to_dict() for b in self.backups],
        )
        if self.default_ssh_port is not None:
            d.update(default_ssh_port=self.default_ssh_port)
        if self.pubkey is not None:
            d.update(pubkey=self.pubkey)
        if self.privkeys is not None:
            d.update(privkeys=list(self.privkeys))
        return d

    def __repr__(self) -> str:
        r = f"Settings@{hex(id(self))}\n"
        r += json.dumps(self.to_dict(), indent=4)
        return r


class NetworkConfiguration:
    def __init__(
        self,
        *,
        type: str = "",
        ip: Optional[str] = None,
        bridge: Optional[str] = None,
        netmask: str = DEFAULT_NETMASK,
    ):
        self.type = type
        self.ip = ip
        self.bridge = bridge
        self.netmask = netmask

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "NetworkConfiguration":
        kwargs: MutableMapping = {}
        kwargs.update(type=dictionary["type"], ip=dictionary.get("ip"))
        kwargs.update(bridge=dictionary.get("bridge"))
        netmask = dictionary.get("netmask")
        if netmask is not None:
            kwargs.update(netmask=netmask)
        return cls(**kwargs)

    def to_dict(self) -> Dict:
        d: Dict = {}
        d.update(type=self.type, bridge=self.bridge, netmask=self.netmask)
        if self.ip is not None:
            d.update(ip=self.ip)
        return d


class PortConfiguration:
    def __init__(self, *, guest: int, host: int, protocol: str = DEFAULT_PROTOCOL):
        self.guest = guest
        self.host = host
        self.protocol = protocol

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "PortConfiguration":
        return cls(
            guest=dictionary["guest"],
            host=dictionary["host"],
            protocol=dictionary.get("protocol") or DEFAULT_PROTOCOL,
        )

    def to_dict(self) -> Dict:
        return dict(guest=self.guest, host=self.host, protocol=self.protocol)


class CopyConfiguration:
    def __init__(self, *, source: str, destination: str):
        self.source = source
        self.destination = destination

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "CopyConfiguration":
        return cls(source=dictionary["from"], destination=dictionary["to"])

    def to_dict(self) -> Dict:
        return {"from": self.source, "to": self.destination}


class FolderConfiguration:
    def __init__(
        self,
        *,
        map: str,
        to: str,
        type: Optional[str] = None,
        mount_options: Optional[List[str]] = None,
        smb_host: Optional[str] = None,
        smb_username: Optional[str] = None,
        smb_password: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        self.map = map
        self.to = to
        self.type = type
        self.mount_options = mount_options
        self.smb_host = smb_host
        self.smb_username = smb_username
        self.smb_password = smb_password
        self.options = options if options is not None else {}

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "FolderConfiguration":
        kwargs: MutableMapping = {}
        kwargs.update(map=dictionary["map"], to=dictionary["to"])
        for key in ["type", "mount_options", "options"] + SMB_CREDENTIALS:
            value = dictionary.get(key)
            if value is not None:
                kwargs[key] = value
        return cls(**kwargs)

    @property
    def smb_credentials(self) -> Dict[str, str]:
        credentials = {}
        for key in SMB_CREDENTIALS:
            value = getattr(self, key)
            if value is not None:
                credentials[key] = value
        return credentials

    def to_dict(self) -> Dict:
        d: Dict = {}
        d.update(map=self.map, to=self.to, type=self.type)
        if self.mount_options is not None:
            d.update(mount_options=list(self.mount_options))
        if self.options:
            d.update(options=dict(self.options))
        d.update(self.smb_credentials)
        return d


class BackupConfiguration:
    def __init__(self, *, kind: str, database: str, to: str):
        self.kind = kind
        self.database = database
        self.to = to

    @classmethod
    def from_dictionary(cls, dictionary: Mapping) -> "BackupConfiguration":
        return cls(
            kind=dictionary["kind"], database=dictionary["database"], to=dictionary["to"]
        )

    def to_dict(self) -> Dict:
        return dict(kind=self.kind, database=self.database, to=self.to)
