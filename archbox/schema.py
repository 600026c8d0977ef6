from .constants import (
    DEFAULT_BOX,
    DEFAULT_CPUS,
    DEFAULT_HOSTNAME,
    DEFAULT_IP,
    DEFAULT_MEMORY,
    DEFAULT_PROVIDER,
)

JSON_SCHEMA = "http://json-schema.org/draft-07/schema#"

SCHEMA = {
    "type": "object",
    "title": "Archlinux Settings Schema",
    "$schema": JSON_SCHEMA,
    "properties": {
        "provider": {
            "description": f"Vagrant provider to use (default: {DEFAULT_PROVIDER})",
            "type": "string",
        },
        "box": {
            "description": f"base image to use (default: {DEFAULT_BOX})",
            "type": "string",
        },
        "hostname": {
            "description": f"guest hostname (default: {DEFAULT_HOSTNAME})",
            "type": "string",
        },
        "ip": {
            "description": f"static IP or 'dhcp' (default: {DEFAULT_IP})",
            "type": "string",
        },
        "networks": {"type": "array", "items": {"$ref": "#/definitions/network"}},
        "name": {"description": "VirtualBox VM name", "type": "string"},
        "memory": {
            "description": f"memory in MB (default: {DEFAULT_MEMORY})",
            "type": ["integer", "string"],
        },
        "cpus": {
            "description": f"number of cpus (default: {DEFAULT_CPUS})",
            "type": ["integer", "string"],
        },
        # YAML reads an unquoted on/off as a boolean
        "natdnshostresolver": {
            "type": ["string", "boolean"],
            "enum": ["on", "off", True, False],
        },
        "gui": {"type": "boolean"},
        "default_ssh_port": {"type": ["integer", "string"]},
        "default_ports": {"type": "boolean"},
        "ports": {"type": "array", "items": {"$ref": "#/definitions/port"}},
        "pubkey": {"description": "public key file to authorize", "type": "string"},
        # an empty list is reported by the configurator, not here
        "privkeys": {"type": ["array", "null"], "items": {"type": "string"}},
        "copy": {"type": "array", "items": {"$ref": "#/definitions/copy"}},
        "folders": {"type": "array", "items": {"$ref": "#/definitions/folder"}},
        "backups": {"type": "array", "items": {"$ref": "#/definitions/backup"}},
    },
    "definitions": {
        "network": {
            "title": "Additional Network",
            "type": "object",
            "properties": {
                "type": {"type": "string"},
                "ip": {"type": "string"},
                "bridge": {"type": ["string", "null"]},
                "netmask": {"type": "string"},
            },
            "required": ["type"],
            "additionalProperties": False,
        },
        "port": {
            "title": "Forwarded Port",
            "type": "object",
            "properties": {
                "guest": {"type": "integer"},
                "host": {"type": "integer"},
                "protocol": {"type": "string", "enum": ["tcp", "udp"]},
            },
            "required": ["guest", "host"],
            "additionalProperties": False,
        },
        "copy": {
            "title": "File Copy",
            "type": "object",
            "properties": {"from": {"type": "string"}, "to": {"type": "string"}},
            "required": ["from", "to"],
            "additionalProperties": False,
        },
        "folder": {
            "title": "Shared Folder",
            "type": "object",
            "properties": {
                "map": {"type": "string"},
                "to": {"type": "string"},
                "type": {"type": ["string", "null"]},
                "mount_options": {"type": "array", "items": {"type": "string"}},
                "smb_host": {"type": "string"},
                "smb_username": {"type": "string"},
                "smb_password": {"type": "string"},
                "options": {"type": "object"},
            },
            "required": ["map", "to"],
            "additionalProperties": False,
        },
        "backup": {
            "title": "Database Backup",
            "type": "object",
            "properties": {
                "kind": {"type": "string"},
                "database": {"type": "string"},
                "to": {"type": "string"},
            },
            "required": ["kind", "database", "to"],
            "additionalProperties": False,
        },
    },
}
