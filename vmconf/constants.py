"""Static tables and environment-derived settings for vmconf."""

from __future__ import annotations

import os
import re

TRUTHY = {"1", "true", "yes", "on"}
MAC_ADDRESS_RE = re.compile(r"^[0-9a-f]{2}(:[0-9a-f]{2}){5}$")

CONFIG_ENV_VAR = "VMCONF_CONFIG"
_LOG_VERBOSE = os.environ.get("LOG_VERBOSE", "").lower() in TRUTHY

# Simulated slot count used by dry-run plans (VirtualBox ICH9 chipset maximum is 36, PIIX3 is 8).
DEFAULT_ADAPTER_COUNT = 8

STORAGE_BUSES = ("ide", "sata", "scsi", "sas")

CONTROLLER_TYPES_BY_BUS = {
    "ide": frozenset({"piix3", "piix4", "ich6"}),
    "sata": frozenset({"intel-ahci"}),
    "scsi": frozenset({"lsi-logic", "bus-logic"}),
    "sas": frozenset({"lsi-logic-sas"}),
}

# Legacy two-channel IDE: (slot, port) per device index.
IDE_COORDINATES = ((0, 0), (0, 1), (1, 0), (1, 1))

# Config key -> adapter attribute on the platform handle.
ADAPTER_PROPERTIES = {
    "adapter-type": "adapterType",
    "network": "internalNetwork",
    "host-interface": "bridgedInterface",
    "enabled": "enabled",
    "cable-connected": "cableConnected",
    "mac-address": "MACAddress",
    "line-speed": "lineSpeed",
}
UNSUPPORTED_ADAPTER_PROPERTIES = {"nat-driver"}
ATTACHMENT_TYPE_KEY = "attachment-type"

IMPLEMENTED_ATTACHMENTS = {"bridged"}
UNIMPLEMENTED_ATTACHMENTS = {"nat", "internal", "host-only", "shared-folder"}

# Top-level keys handled outside the generic setter table.
NETWORK_KEY = "network"
STORAGE_KEY = "storage"
RESERVED_MACHINE_KEYS = {STORAGE_KEY, "boot-mount-point"}

# IMedium access mode used when opening media by location.
ACCESS_MODE_READ_WRITE = 2
ACCESS_MODE_READ_ONLY = 1
READ_ONLY_DEVICE_TYPES = {"dvd"}

# Outcomes of a network attachment request.
ATTACHED = "attached"
UNSUPPORTED = "unsupported"
UNRECOGNIZED = "unrecognized"

# Diagnostic kinds.
UNKNOWN_SETTING = "unknown-setting"
UNKNOWN_PROPERTY = "unknown-property"
UNSUPPORTED_PROPERTY = "unsupported-property"
UNSUPPORTED_ATTACHMENT = "unsupported-attachment"
UNRECOGNIZED_ATTACHMENT = "unrecognized-attachment"
