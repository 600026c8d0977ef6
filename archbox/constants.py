import os

ARCHBOX_PATH = os.path.abspath(os.path.dirname(os.path.realpath(__file__)))
TEMPLATE_DIR = ARCHBOX_PATH
TEMPLATE_NAME = "Vagrantfile.j2"

# Providers
PROVIDER_VIRTUALBOX = "virtualbox"
PROVIDER_HYPERV = "hyperv"
DEFAULT_PROVIDER = PROVIDER_VIRTUALBOX

# Box (rolling release, no version pin)
DEFAULT_BOX = "archlinux/archlinux"

DEFAULT_HOSTNAME = "archlinux"
DEFAULT_NAME = "archlinux"

# Networking
DHCP = "dhcp"
PRIVATE_NETWORK = "private_network"
FORWARDED_PORT = "forwarded_port"
DEFAULT_IP = "192.168.10.25"
DEFAULT_NETMASK = "255.255.255.0"
DEFAULT_PROTOCOL = "tcp"
SSH_GUEST_PORT = 22
SSH_PORT_ID = "ssh"

#: guest port -> host port forwarded unless ``default_ports`` is false
DEFAULT_PORTS = {
    80: 8000,
    443: 44300,
    3306: 33060,
    4040: 4040,
    5432: 54320,
    8025: 8025,
    9600: 9600,
    27017: 27017,
}

# VirtualBox tuning
DEFAULT_MEMORY = 2048
DEFAULT_CPUS = 1
DEFAULT_NATDNSHOSTRESOLVER = "on"
OS_TYPE = "ArchLinux_64"

# Shared folders
FOLDER_NFS = "nfs"
FOLDER_SMB = "smb"
NFS_MOUNT_OPTIONS = ["actimeo=1", "nolock"]
SMB_MOUNT_OPTIONS = ["vers=3.02", "mfsymlinks"]
SMB_CREDENTIALS = ["smb_host", "smb_username", "smb_password"]
BINDFS_PLUGIN = "vagrant-bindfs"

# Guest side SSH material
GUEST_SSH_DIR = "/home/vagrant/.ssh"
AUTHORIZED_KEYS = f"{GUEST_SSH_DIR}/authorized_keys"

PUBKEY_SCRIPT = (
    f'grep -qxF "$1" {AUTHORIZED_KEYS} || '
    f"printf '\\n%s\\n' \"$1\" | tee -a {AUTHORIZED_KEYS}"
)
PRIVKEY_SCRIPT = (
    f'echo "$1" > {GUEST_SSH_DIR}/$2 && chmod 600 {GUEST_SSH_DIR}/$2'
)
MISSING_FOLDER_SCRIPT = (
    '>&2 echo "Unable to mount one of your folders. '
    'Please check your folders in your settings file"'
)

VAGRANTFILE = "Vagrantfile"
VAGRANT_DEFAULT_PROVIDER = "VAGRANT_DEFAULT_PROVIDER"
