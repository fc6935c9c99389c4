"""Top-level machine configuration for vmconf."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional

from vmconf.config import as_list
from vmconf.constants import NETWORK_KEY, RESERVED_MACHINE_KEYS, STORAGE_KEY, UNKNOWN_SETTING
from vmconf.enums import DEFAULT_RESOLVER, EnumResolver
from vmconf.exceptions import INVALID_CONFIG, ConfigurationError
from vmconf.models import Diagnostic
from vmconf.network import AdapterCounter, configure_network, network_adapter_count
from vmconf.storage import MediumResolver, configure_storage, find_medium
from vmconf.utils import log, machine_label, normalize_key

Setter = Callable[[Any, Any], None]


def _attribute_setter(key: str, attribute: str, convert: Optional[Callable[[Any], Any]] = None) -> Setter:
    def setter(value: Any, machine: Any) -> None:
        if convert:
            try:
                value = convert(value)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    INVALID_CONFIG,
                    f"Invalid value {value!r} for {key}: {exc}",
                    {"key": key, "value": value},
                ) from exc
        setattr(machine, attribute, value)

    return setter


def _bios_setter(attribute: str) -> Setter:
    def setter(value: Any, machine: Any) -> None:
        setattr(machine.BIOSSettings, attribute, bool(value))

    return setter


def set_boot_order(value: Any, machine: Any, resolver: EnumResolver = DEFAULT_RESOLVER) -> None:
    """Assign boot positions 1..N from a list such as ``[dvd, hard-disk]``."""
    for position, device in enumerate(as_list(value, "boot-order"), start=1):
        device_value = resolver.boot_device(device)
        if device_value is None:
            raise ConfigurationError(
                INVALID_CONFIG,
                f"Unknown boot-order device '{device}'. Supported: floppy, dvd, hard-disk, network",
                {"device": device, "position": position},
            )
        machine.setBootOrder(position, device_value)


MACHINE_SETTERS: Dict[str, Setter] = {
    "name": _attribute_setter("name", "name", str),
    "description": _attribute_setter("description", "description", str),
    "os-type-id": _attribute_setter("os-type-id", "OSTypeId", str),
    "memory-size": _attribute_setter("memory-size", "memorySize", int),
    "cpu-count": _attribute_setter("cpu-count", "CPUCount", int),
    "vram-size": _attribute_setter("vram-size", "VRAMSize", int),
    "acpi-enabled": _bios_setter("ACPIEnabled"),
    "io-apic-enabled": _bios_setter("IOAPICEnabled"),
    "boot-order": set_boot_order,
}


def _lookup(config: Mapping, key: str) -> Any:
    for entry, value in config.items():
        if normalize_key(entry) == key:
            return value
    return None


def configure_machine(
    machine: Any,
    config: Mapping,
    setters: Optional[Mapping] = None,
    resolver: EnumResolver = DEFAULT_RESOLVER,
    adapter_counter: AdapterCounter = network_adapter_count,
) -> List[Diagnostic]:
    """Apply every top-level entry of ``config`` except storage.

    ``network`` goes to the network applier, ``storage`` and
    ``boot-mount-point`` are skipped, and anything else is looked up in
    ``setters`` (``MACHINE_SETTERS`` by default) and called as
    ``setter(value, machine)``. Keys without a setter are reported, not raised.
    Storage is applied separately through ``configure_machine_storage``.
    """
    if setters is None:
        setters = MACHINE_SETTERS
    log("DEBUG", f"Configuring machine {machine_label(machine)}: {dict(config)}")
    diagnostics: List[Diagnostic] = []
    for entry, value in config.items():
        key = normalize_key(entry)
        if key == NETWORK_KEY:
            diagnostics.extend(
                configure_network(
                    machine,
                    as_list(value, NETWORK_KEY),
                    resolver=resolver,
                    adapter_counter=adapter_counter,
                )
            )
            continue
        if key in RESERVED_MACHINE_KEYS:
            continue
        setter = setters.get(key)
        if setter is None:
            message = f"There is no such setting {entry} in a machine configuration"
            log("WARN", message)
            diagnostics.append(Diagnostic(UNKNOWN_SETTING, str(entry), message))
            continue
        setter(value, machine)
    return diagnostics


def configure_machine_storage(
    machine: Any,
    config: Mapping,
    resolver: EnumResolver = DEFAULT_RESOLVER,
    medium_resolver: MediumResolver = find_medium,
) -> None:
    """Apply the ``storage`` entry of ``config``, if there is one."""
    storage = _lookup(config, STORAGE_KEY)
    if storage:
        configure_storage(
            machine,
            as_list(storage, STORAGE_KEY),
            resolver=resolver,
            medium_resolver=medium_resolver,
        )


def attach_storage(
    machine: Any,
    config: Mapping,
    resolver: EnumResolver = DEFAULT_RESOLVER,
    medium_resolver: MediumResolver = find_medium,
) -> None:
    configure_machine_storage(machine, config, resolver=resolver, medium_resolver=medium_resolver)
