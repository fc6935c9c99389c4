"""Symbolic key to VirtualBox enumeration value resolution."""

from __future__ import annotations

from typing import Any, Dict, Optional

from vmconf.utils import normalize_key

# family -> (constant prefix, {symbolic key: (constant suffix, built-in value)})
_FAMILIES: Dict[str, tuple] = {
    "storage-bus": (
        "StorageBus_",
        {
            "ide": ("IDE", 1),
            "sata": ("SATA", 2),
            "scsi": ("SCSI", 3),
            "floppy": ("Floppy", 4),
            "sas": ("SAS", 5),
        },
    ),
    "controller-type": (
        "StorageControllerType_",
        {
            "lsi-logic": ("LsiLogic", 1),
            "bus-logic": ("BusLogic", 2),
            "intel-ahci": ("IntelAhci", 3),
            "piix3": ("PIIX3", 4),
            "piix4": ("PIIX4", 5),
            "ich6": ("ICH6", 6),
            "i82078": ("I82078", 7),
            "lsi-logic-sas": ("LsiLogicSas", 8),
        },
    ),
    "device-type": (
        "DeviceType_",
        {
            "floppy": ("Floppy", 1),
            "dvd": ("DVD", 2),
            "hard-disk": ("HardDisk", 3),
            "disk": ("HardDisk", 3),
        },
    ),
    "adapter-type": (
        "NetworkAdapterType_",
        {
            "am79c970a": ("Am79C970A", 1),
            "am79c973": ("Am79C973", 2),
            "i82540em": ("I82540EM", 3),
            "i82543gc": ("I82543GC", 4),
            "i82545em": ("I82545EM", 5),
            "virtio": ("Virtio", 6),
        },
    ),
    "boot-device": (
        "DeviceType_",
        {
            "floppy": ("Floppy", 1),
            "dvd": ("DVD", 2),
            "hard-disk": ("HardDisk", 3),
            "disk": ("HardDisk", 3),
            "network": ("Network", 4),
        },
    ),
    "attachment-type": (
        "NetworkAttachmentType_",
        {
            "nat": ("NAT", 1),
            "bridged": ("Bridged", 2),
            "internal": ("Internal", 3),
            "host-only": ("HostOnly", 4),
        },
    ),
}


class EnumResolver:
    """Resolve symbolic keys (``sata``, ``intel-ahci``, ``dvd``) to platform values.

    Unknown keys resolve to ``None``; callers decide whether that is fatal.
    """

    def __init__(self, tables: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        if tables is None:
            tables = {
                family: {key: value for key, (_, value) in entries.items()}
                for family, (_, entries) in _FAMILIES.items()
            }
        self._tables = tables

    @classmethod
    def from_constants(cls, constants: Any) -> "EnumResolver":
        """Build a resolver from a ``vboxapi`` ``VirtualBoxManager.constants`` object."""
        tables: Dict[str, Dict[str, Any]] = {}
        for family, (prefix, entries) in _FAMILIES.items():
            table: Dict[str, Any] = {}
            for key, (suffix, _) in entries.items():
                value = getattr(constants, f"{prefix}{suffix}", None)
                if value is not None:
                    table[key] = value
            tables[family] = table
        return cls(tables)

    def resolve(self, family: str, key: Any) -> Optional[Any]:
        if not isinstance(key, str):
            return None
        return self._tables.get(family, {}).get(normalize_key(key))

    def storage_bus(self, key: Any) -> Optional[Any]:
        return self.resolve("storage-bus", key)

    def controller_type(self, key: Any) -> Optional[Any]:
        return self.resolve("controller-type", key)

    def device_type(self, key: Any) -> Optional[Any]:
        return self.resolve("device-type", key)

    def adapter_type(self, key: Any) -> Optional[Any]:
        return self.resolve("adapter-type", key)

    def attachment_type(self, key: Any) -> Optional[Any]:
        return self.resolve("attachment-type", key)

    def boot_device(self, key: Any) -> Optional[Any]:
        return self.resolve("boot-device", key)


DEFAULT_RESOLVER = EnumResolver()
