import os

import archbox.constants as constants
from archbox.configurator import configure, validate_backups, validate_private_keys
from archbox.context import ID, ProvisioningContext
from archbox.errors import (
    ArchboxBackupError,
    ArchboxEmptyPrivateKeysError,
    ArchboxPrivateKeyNotFoundError,
)
from archbox.settings import Settings
from archbox.tests.unit import ArchboxTest


def _forwarded(context):
    return [n.options for n in context.vm.forwarded_ports]


def _configure(settings, plugins=None):
    context = ProvisioningContext(plugins=plugins)
    configure(context, settings)
    return context


class TestDefaults(ArchboxTest):
    def test_defaults(self):
        context = _configure({})
        self.assertEqual(constants.DEFAULT_PROVIDER, context.default_provider)
        self.assertEqual("archlinux/archlinux", context.vm.box)
        self.assertEqual("archlinux", context.vm.hostname)

        network = context.vm.networks[0]
        self.assertEqual("private_network", network.type)
        self.assertEqual({"ip": "192.168.10.25"}, network.options)

        v = context.vm.providers["virtualbox"]
        self.assertEqual("archlinux", v.vm_name)
        self.assertEqual(2048, v.memory)
        self.assertEqual(1, v.cpus)
        self.assertFalse(v.gui)
        self.assertEqual(
            [
                ["modifyvm", ID, "--natdnsproxy1", "on"],
                ["modifyvm", ID, "--natdnshostresolver1", "on"],
                ["modifyvm", ID, "--ostype", "ArchLinux_64"],
            ],
            v.customizations,
        )
        self.assertEqual([], context.vm.provisions)
        self.assertEqual([], context.vm.synced_folders)

    def test_custom_values(self):
        context = _configure(
            {
                "provider": "libvirt",
                "box": "archlinux/archlinux",
                "hostname": "devbox",
                "name": "devbox-vm",
                "memory": 4096,
                "cpus": 4,
                "natdnshostresolver": "off",
                "gui": True,
            }
        )
        self.assertEqual("libvirt", context.default_provider)
        self.assertEqual("devbox", context.vm.hostname)
        v = context.vm.providers["virtualbox"]
        self.assertEqual("devbox-vm", v.vm_name)
        self.assertEqual(4096, v.memory)
        self.assertEqual(4, v.cpus)
        self.assertTrue(v.gui)
        self.assertIn(["modifyvm", ID, "--natdnshostresolver1", "off"], v.customizations)

    def test_default_provider_not_in_environment(self):
        before = os.environ.get(constants.VAGRANT_DEFAULT_PROVIDER)
        _configure({"provider": "hyperv"})
        self.assertEqual(before, os.environ.get(constants.VAGRANT_DEFAULT_PROVIDER))


class TestNetworks(ArchboxTest):
    def test_dhcp(self):
        context = _configure({"ip": "dhcp"})
        network = context.vm.networks[0]
        self.assertEqual("private_network", network.type)
        self.assertEqual({"type": "dhcp"}, network.options)

    def test_static_ip(self):
        context = _configure({"ip": "192.168.56.10"})
        self.assertEqual({"ip": "192.168.56.10"}, context.vm.networks[0].options)

    def test_additional_networks(self):
        context = _configure(
            {
                "networks": [
                    {"type": "public_network", "ip": "10.0.0.2", "bridge": "eth0"},
                    {
                        "type": "private_network",
                        "ip": "172.16.0.2",
                        "netmask": "255.255.0.0",
                    },
                ]
            }
        )
        public, private = context.vm.networks[1:3]
        self.assertEqual("public_network", public.type)
        self.assertEqual(
            {"ip": "10.0.0.2", "bridge": "eth0", "netmask": "255.255.255.0"},
            public.options,
        )
        self.assertEqual(
            {"ip": "172.16.0.2", "bridge": None, "netmask": "255.255.0.0"},
            private.options,
        )


class TestPorts(ArchboxTest):
    def test_default_ports(self):
        context = _configure({})
        self.assertEqual(
            [
                {"guest": guest, "host": host, "auto_correct": True}
                for guest, host in constants.DEFAULT_PORTS.items()
            ],
            _forwarded(context),
        )

    def test_default_ports_disabled(self):
        context = _configure({"default_ports": False})
        self.assertEqual([], _forwarded(context))

    def test_custom_port_overrides_default(self):
        context = _configure({"ports": [{"guest": 80, "host": 8080}]})
        forwarded = _forwarded(context)
        guests = [p["guest"] for p in forwarded]
        self.assertEqual(1, guests.count(80))
        self.assertNotIn({"guest": 80, "host": 8000, "auto_correct": True}, forwarded)
        for guest in constants.DEFAULT_PORTS:
            self.assertIn(guest, guests)
        self.assertEqual(
            {"guest": 80, "host": 8080, "protocol": "tcp", "auto_correct": True},
            forwarded[-1],
        )

    def test_custom_port_protocol(self):
        context = _configure(
            {
                "default_ports": False,
                "ports": [
                    {"guest": 53, "host": 5353, "protocol": "udp"},
                    {"guest": 3000, "host": 3000},
                ],
            }
        )
        protocols = [p["protocol"] for p in _forwarded(context)]
        self.assertEqual(["udp", "tcp"], protocols)

    def test_ssh_port(self):
        context = _configure({"default_ssh_port": 2223, "default_ports": False})
        self.assertEqual(
            [
                {
                    "guest": 22,
                    "host": 2223,
                    "auto_correct": False,
                    "id": "ssh",
                }
            ],
            _forwarded(context),
        )


class TestKeys(ArchboxTest):
    def test_pubkey(self):
        path = self.write("id_rsa.pub", "ssh-rsa AAAA user@host\n")
        context = _configure({"pubkey": path})
        self.assertEqual(1, len(context.vm.provisions))
        provision = context.vm.provisions[0]
        self.assertEqual("shell", provision.kind)
        self.assertEqual(["ssh-rsa AAAA user@host"], provision.options["args"])
        self.assertNotIn("privileged", provision.options)
        # don't append twice
        self.assertIn("grep -qxF", provision.options["inline"])
        self.assertIn(constants.AUTHORIZED_KEYS, provision.options["inline"])
        # the key starts on its own line
        self.assertIn("printf '\\n%s\\n' \"$1\"", provision.options["inline"])

    def test_pubkey_missing_is_skipped(self):
        context = _configure({"pubkey": f"{self.tmpdir}/nope.pub"})
        self.assertEqual([], context.vm.provisions)

    def test_privkeys(self):
        first = self.write("keys/id_rsa", "PRIVATE1\n")
        second = self.write("keys/deploy", "PRIVATE2")
        context = _configure({"privkeys": [first, second]})
        self.assertEqual(2, len(context.vm.provisions))
        for provision, (content, name) in zip(
            context.vm.provisions, [("PRIVATE1", "id_rsa"), ("PRIVATE2", "deploy")]
        ):
            self.assertFalse(provision.options["privileged"])
            self.assertEqual([content, name], provision.options["args"])
            self.assertIn("chmod 600", provision.options["inline"])

    def test_privkeys_empty(self):
        context = ProvisioningContext()
        with self.assertRaises(ArchboxEmptyPrivateKeysError):
            configure(context, {"privkeys": []})
        self.assertEqual([], context.declarations())
        self.assertIsNone(context.vm.box)

    def test_privkeys_not_found(self):
        existing = self.write("id_rsa", "PRIVATE")
        context = ProvisioningContext()
        with self.assertRaises(ArchboxPrivateKeyNotFoundError) as ctx:
            configure(context, {"privkeys": [existing, "/nonexistent/path"]})
        self.assertEqual("/nonexistent/path", ctx.exception.filepath)
        # fail fast: not even the existing key is provisioned
        self.assertEqual([], context.declarations())

    def test_validate_private_keys(self):
        validate_private_keys({})
        validate_private_keys(Settings.from_dictionary({}))
        with self.assertRaises(ArchboxEmptyPrivateKeysError):
            validate_private_keys({"privkeys": None})


class TestCopy(ArchboxTest):
    def test_copy(self):
        source = self.write("dotfiles/.bashrc", "alias ll='ls -l'")
        context = _configure(
            {"copy": [{"from": source, "to": "/home/vagrant/"}]}
        )
        provision = context.vm.provisions[0]
        self.assertEqual("file", provision.kind)
        self.assertEqual(
            {"source": source, "destination": "/home/vagrant/.bashrc"},
            provision.options,
        )


class TestFolders(ArchboxTest):
    def test_nfs_default_mount_options(self):
        context = _configure({"folders": [{"map": self.tmpdir, "to": "/code", "type": "nfs"}]})
        folder = context.vm.synced_folders[0]
        self.assertEqual(self.tmpdir, folder.source)
        self.assertEqual("/code", folder.destination)
        self.assertEqual("nfs", folder.options["type"])
        self.assertEqual(["actimeo=1", "nolock"], folder.options["mount_options"])
        # no bindfs plugin
        self.assertEqual([], context.bindfs.binds)

    def test_nfs_bindfs(self):
        context = _configure(
            {"folders": [{"map": self.tmpdir, "to": "/code", "type": "nfs"}]},
            plugins=["vagrant-bindfs"],
        )
        self.assertEqual(1, len(context.bindfs.binds))
        bind = context.bindfs.binds[0]
        self.assertEqual(("/code", "/code"), (bind.source, bind.destination))

    def test_nfs_custom_mount_options(self):
        context = _configure(
            {
                "folders": [
                    {
                        "map": self.tmpdir,
                        "to": "/code",
                        "type": "nfs",
                        "mount_options": ["vers=4"],
                    }
                ]
            }
        )
        self.assertEqual(["vers=4"], context.vm.synced_folders[0].options["mount_options"])

    def test_smb(self):
        context = _configure(
            {
                "folders": [
                    {
                        "map": self.tmpdir,
                        "to": "/code",
                        "type": "smb",
                        "smb_username": "me",
                        "smb_password": "secret",
                        "options": {"owner": "vagrant"},
                    }
                ]
            },
            plugins=["vagrant-bindfs"],
        )
        folder = context.vm.synced_folders[0]
        self.assertEqual(
            {
                "type": "smb",
                "owner": "vagrant",
                "mount_options": ["vers=3.02", "mfsymlinks"],
                "smb_username": "me",
                "smb_password": "secret",
            },
            folder.options,
        )
        self.assertEqual([], context.bindfs.binds)

    def test_hyperv_forces_smb(self):
        context = _configure(
            {"provider": "hyperv", "folders": [{"map": self.tmpdir, "to": "/code"}]}
        )
        folder = context.vm.synced_folders[0]
        self.assertEqual("smb", folder.options["type"])
        self.assertEqual(["vers=3.02", "mfsymlinks"], folder.options["mount_options"])

    def test_native_type(self):
        context = _configure({"folders": [{"map": self.tmpdir, "to": "/code"}]})
        self.assertEqual({"type": None}, context.vm.synced_folders[0].options)

    def test_missing_folder(self):
        context = _configure(
            {
                "folders": [
                    {"map": f"{self.tmpdir}/nope", "to": "/nope", "type": "nfs"},
                    {"map": self.tmpdir, "to": "/code"},
                ]
            }
        )
        self.assertEqual(1, len(context.vm.synced_folders))
        self.assertEqual("/code", context.vm.synced_folders[0].destination)
        provision = context.vm.provisions[0]
        self.assertEqual("shell", provision.kind)
        self.assertTrue(provision.options["inline"].startswith(">&2 echo"))


class TestBackups(ArchboxTest):
    def test_backups(self):
        context = _configure(
            {
                "backups": [
                    {"kind": "mysql", "database": "app", "to": "/vagrant/backup"},
                    {"kind": "postgresql", "database": "app", "to": "/vagrant/backup"},
                ]
            }
        )
        names = [p.name for p in context.vm.provisions]
        self.assertEqual(["backup-mysql-app", "backup-postgres-app"], names)
        for p in context.vm.provisions:
            self.assertEqual("never", p.options["run"])

    def test_unknown_backup(self):
        context = ProvisioningContext()
        with self.assertRaises(ArchboxBackupError):
            configure(
                context,
                {"backups": [{"kind": "oracle", "database": "a", "to": "/b"}]},
            )
        self.assertEqual([], context.declarations())
        self.assertIsNone(context.vm.box)

    def test_validate_backups(self):
        validate_backups({})
        validate_backups(
            {"backups": [{"kind": "mariadb", "database": "a", "to": "/b"}]}
        )
        with self.assertRaises(ArchboxBackupError):
            validate_backups(
                {"backups": [{"kind": "oracle", "database": "a", "to": "/b"}]}
            )


class TestIdempotence(ArchboxTest):
    def test_configure_twice(self):
        key = self.write("id_rsa", "PRIVATE")
        settings = Settings.from_dictionary(
            {
                "ports": [{"guest": 443, "host": 8443}],
                "privkeys": [key],
                "folders": [{"map": self.tmpdir, "to": "/code", "type": "nfs"}],
            }
        )
        first = _configure(settings, plugins=["vagrant-bindfs"])
        second = _configure(settings, plugins=["vagrant-bindfs"])
        self.assertEqual(first.declarations(), second.declarations())
        self.assertEqual(first.default_provider, second.default_provider)
