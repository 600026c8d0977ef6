import os
from typing import Any, Dict, Mapping, Union

from .backup import backup, get_strategy
from .constants import (
    BINDFS_PLUGIN,
    DEFAULT_PORTS,
    FOLDER_NFS,
    FOLDER_SMB,
    FORWARDED_PORT,
    MISSING_FOLDER_SCRIPT,
    NFS_MOUNT_OPTIONS,
    OS_TYPE,
    PRIVATE_NETWORK,
    PRIVKEY_SCRIPT,
    PROVIDER_HYPERV,
    PROVIDER_VIRTUALBOX,
    PUBKEY_SCRIPT,
    SMB_MOUNT_OPTIONS,
    SSH_GUEST_PORT,
    SSH_PORT_ID,
)
from .context import ID, ProvisioningContext
from .errors import ArchboxEmptyPrivateKeysError, ArchboxPrivateKeyNotFoundError
from .log import getLogger
from .settings import FolderConfiguration, Settings

SettingsLike = Union[Settings, Mapping]


def _as_settings(settings: SettingsLike) -> Settings:
    if isinstance(settings, Settings):
        return settings
    return Settings.from_dictionary(settings)


def _read(path: str) -> str:
    with open(path) as f:
        return f.read().rstrip("\n")


def validate_private_keys(settings: SettingsLike):
    """Check the private keys before anything is declared.

    Raises:
        ArchboxEmptyPrivateKeysError: ``privkeys`` is set but empty
        ArchboxPrivateKeyNotFoundError: a key file doesn't exist
    """
    settings = _as_settings(settings)
    if settings.privkeys is None:
        return
    if len(settings.privkeys) == 0:
        raise ArchboxEmptyPrivateKeysError()
    for key in settings.privkeys:
        path = os.path.expanduser(key)
        if not os.path.exists(path):
            raise ArchboxPrivateKeyNotFoundError(path)


def validate_backups(settings: SettingsLike):
    """Check every backup has a strategy before anything is declared.

    Raises:
        ArchboxBackupError: no strategy for a backup kind
    """
    settings = _as_settings(settings)
    for b in settings.backups:
        get_strategy(b.kind)


def configure(context: ProvisioningContext, settings: SettingsLike):
    """Declare the Arch Linux guest described by ``settings`` on ``context``.

    The declarations are issued in a fixed order: box and networks first,
    then the VirtualBox tuning, the forwarded ports, the provisioners (SSH
    material, file copies), the synced folders and finally the on-demand
    backups.

    Args:
        context: the provisioning context to fill
        settings: a :py:class:`~archbox.settings.Settings` or a mapping
            (validated and normalized on the fly)

    Raises:
        ArchboxPrivateKeyError: the private keys are misconfigured.
        ArchboxBackupError: a backup kind has no strategy.

        Nothing has been declared on ``context`` in these cases.
    """
    settings = _as_settings(settings)
    validate_private_keys(settings)
    validate_backups(settings)

    logger = getLogger(__name__, tags=[settings.hostname])

    context.default_provider = settings.provider
    context.vm.box = settings.box
    context.vm.hostname = settings.hostname

    _configure_networks(context, settings, logger)
    _configure_virtualbox(context, settings)
    _configure_ports(context, settings, logger)
    _configure_keys(context, settings, logger)

    for c in settings.copy:
        source = os.path.expanduser(c.source)
        destination = f"{c.destination.rstrip('/')}/{os.path.basename(source)}"
        logger.debug("Copying %s to %s", source, destination)
        context.vm.provision("file", source=source, destination=destination)

    for folder in settings.folders:
        _configure_folder(context, settings, folder, logger)

    for b in settings.backups:
        backup(b.kind, b.database, b.to, context)


def _configure_networks(context, settings, logger):
    if settings.is_dhcp:
        context.vm.network(PRIVATE_NETWORK, type="dhcp")
    else:
        context.vm.network(PRIVATE_NETWORK, ip=settings.ip)
    logger.debug("Private network on %s", settings.ip)

    for net in settings.networks:
        context.vm.network(net.type, ip=net.ip, bridge=net.bridge, netmask=net.netmask)


def _configure_virtualbox(context, settings):
    v = context.vm.provider(PROVIDER_VIRTUALBOX)
    v.vm_name = settings.name
    v.memory = settings.memory
    v.cpus = settings.cpus

    # DNS proxy in NAT mode
    v.customize(["modifyvm", ID, "--natdnsproxy1", "on"])
    v.customize(["modifyvm", ID, "--natdnshostresolver1", settings.natdnshostresolver])
    v.customize(["modifyvm", ID, "--ostype", OS_TYPE])

    if settings.gui:
        v.gui = True


def _configure_ports(context, settings, logger):
    if settings.default_ssh_port is not None:
        # a collision on the ssh port must fail
        context.vm.network(
            FORWARDED_PORT,
            guest=SSH_GUEST_PORT,
            host=settings.default_ssh_port,
            auto_correct=False,
            id=SSH_PORT_ID,
        )

    if settings.default_ports is not False:
        custom = {p.guest for p in settings.ports}
        for guest, host in DEFAULT_PORTS.items():
            if guest in custom:
                logger.debug("Default port %s overridden", guest)
                continue
            context.vm.network(FORWARDED_PORT, guest=guest, host=host, auto_correct=True)

    for port in settings.ports:
        context.vm.network(
            FORWARDED_PORT,
            guest=port.guest,
            host=port.host,
            protocol=port.protocol,
            auto_correct=True,
        )


def _configure_keys(context, settings, logger):
    if settings.pubkey is not None:
        path = os.path.expanduser(settings.pubkey)
        if os.path.isfile(path) and os.access(path, os.R_OK):
            context.vm.provision("shell", inline=PUBKEY_SCRIPT, args=[_read(path)])
        else:
            logger.warning("Public key %s can't be read, skipping it", path)

    for key in settings.privkeys or []:
        path = os.path.expanduser(key)
        context.vm.provision(
            "shell",
            privileged=False,
            inline=PRIVKEY_SCRIPT,
            args=[_read(path), os.path.basename(path)],
        )


def _mount_options(settings: Settings, folder: FolderConfiguration):
    folder_type = folder.type
    if settings.provider == PROVIDER_HYPERV:
        folder_type = FOLDER_SMB

    options: Dict[str, Any] = {"type": folder_type}
    options.update((str(k), v) for k, v in folder.options.items() if k != "type")
    if folder_type == FOLDER_NFS:
        options["mount_options"] = folder.mount_options or list(NFS_MOUNT_OPTIONS)
    elif folder_type == FOLDER_SMB:
        options["mount_options"] = folder.mount_options or list(SMB_MOUNT_OPTIONS)
        options.update(folder.smb_credentials)
    elif folder.mount_options:
        options["mount_options"] = list(folder.mount_options)
    return folder_type, options


def _configure_folder(context, settings, folder, logger):
    if not os.path.exists(os.path.expanduser(folder.map)):
        logger.warning("Folder %s doesn't exist, it won't be mounted", folder.map)
        context.vm.provision("shell", inline=MISSING_FOLDER_SCRIPT)
        return

    folder_type, options = _mount_options(settings, folder)
    context.vm.synced_folder(folder.map, folder.to, **options)
    logger.debug("Synced folder %s -> %s (%s)", folder.map, folder.to, folder_type)

    # Fix the permissions of NFS shares
    if folder_type == FOLDER_NFS and context.has_plugin(BINDFS_PLUGIN):
        context.bindfs.bind_folder(folder.to, folder.to)
