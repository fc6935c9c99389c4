"""Network adapter configuration for vmconf."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Callable, List, Optional, Sequence

from vmconf.config import parse_adapter
from vmconf.constants import (
    ADAPTER_PROPERTIES,
    ATTACHED,
    ATTACHMENT_TYPE_KEY,
    IMPLEMENTED_ATTACHMENTS,
    UNIMPLEMENTED_ATTACHMENTS,
    UNKNOWN_PROPERTY,
    UNRECOGNIZED,
    UNRECOGNIZED_ATTACHMENT,
    UNSUPPORTED,
    UNSUPPORTED_ADAPTER_PROPERTIES,
    UNSUPPORTED_ATTACHMENT,
    UNSUPPORTED_PROPERTY,
)
from vmconf.enums import DEFAULT_RESOLVER, EnumResolver
from vmconf.models import Diagnostic
from vmconf.utils import log, machine_label, normalize_key, normalize_mac

AdapterCounter = Callable[[Any], int]


def network_adapter_count(machine: Any) -> int:
    """Ask the platform how many adapter slots the machine's chipset provides."""
    system_properties = machine.parent.systemProperties
    return int(system_properties.getMaxNetworkAdapters(machine.chipsetType))


def set_adapter_property(
    adapter: Any,
    key: Any,
    value: Any,
    resolver: EnumResolver = DEFAULT_RESOLVER,
) -> Optional[Diagnostic]:
    """Set one scalar property on ``adapter``.

    ``None`` leaves the property untouched. Unsupported or unknown keys are
    logged and returned as a diagnostic instead of raising.
    """
    if value is None:
        return None
    key = normalize_key(key)
    if key == ATTACHMENT_TYPE_KEY:
        return None
    if key in UNSUPPORTED_ADAPTER_PROPERTIES:
        message = f"Setting {key} is not supported"
        log("ERROR", message)
        return Diagnostic(UNSUPPORTED_PROPERTY, str(key), message)
    attribute = ADAPTER_PROPERTIES.get(key) if isinstance(key, str) else None
    if attribute is None:
        message = f"set_adapter_property: unknown property {key}"
        log("ERROR", message)
        return Diagnostic(UNKNOWN_PROPERTY, str(key), message)

    if key == "adapter-type":
        resolved = resolver.adapter_type(value)
        value = value if resolved is None else resolved
    elif key == "mac-address":
        value = normalize_mac(value)
    setattr(adapter, attribute, value)
    return None


def configure_adapter_object(
    adapter: Any,
    properties: Mapping,
    resolver: EnumResolver = DEFAULT_RESOLVER,
) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []
    for key, value in properties.items():
        diagnostic = set_adapter_property(adapter, key, value, resolver=resolver)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
    return diagnostics


def attach_adapter(adapter: Any, attachment_type: Any, resolver: EnumResolver = DEFAULT_RESOLVER) -> str:
    """Wire ``adapter`` to its network backend.

    Returns ``ATTACHED`` when the adapter was changed, ``UNSUPPORTED`` for a
    known attachment type that cannot be configured (not implemented yet, or
    without a value in ``resolver``), and ``UNRECOGNIZED`` for anything else.
    Only the first case mutates the adapter.
    """
    kind = normalize_key(attachment_type) if isinstance(attachment_type, str) else None
    if kind in IMPLEMENTED_ATTACHMENTS:
        attachment_value = resolver.attachment_type(kind)
        if attachment_value is None:
            log("ERROR", f"Attachment type {kind} has no value on this platform")
            return UNSUPPORTED
        adapter.attachmentType = attachment_value
        return ATTACHED
    if kind in UNIMPLEMENTED_ATTACHMENTS:
        log("ERROR", f"Setting up {kind} interfaces is not yet supported")
        return UNSUPPORTED
    log("ERROR", f"configure_adapter: unrecognized attachment type {attachment_type}")
    return UNRECOGNIZED


def configure_adapter(
    machine: Any,
    slot: int,
    config: Any,
    resolver: EnumResolver = DEFAULT_RESOLVER,
) -> List[Diagnostic]:
    adapter_config = parse_adapter(config, f"network[{slot}]")
    log(
        "DEBUG",
        f"Configuring network adapter for machine '{machine_label(machine)}' slot {slot} with {adapter_config}",
    )
    adapter = machine.getNetworkAdapter(slot)
    subject = f"network[{slot}]"
    diagnostics = [
        replace(diagnostic, subject=f"{subject}.{diagnostic.subject}")
        for diagnostic in configure_adapter_object(adapter, adapter_config.properties, resolver=resolver)
    ]
    result = attach_adapter(adapter, adapter_config.attachment_type, resolver=resolver)
    if result == UNSUPPORTED:
        diagnostics.append(
            Diagnostic(
                UNSUPPORTED_ATTACHMENT,
                subject,
                f"Attachment type {adapter_config.attachment_type} is not supported",
            )
        )
    elif result == UNRECOGNIZED:
        diagnostics.append(
            Diagnostic(
                UNRECOGNIZED_ATTACHMENT,
                subject,
                f"Unrecognized attachment type {adapter_config.attachment_type}",
            )
        )
    return diagnostics


def configure_network(
    machine: Any,
    adapters: Sequence[Any],
    resolver: EnumResolver = DEFAULT_RESOLVER,
    adapter_counter: AdapterCounter = network_adapter_count,
) -> List[Diagnostic]:
    """Configure adapters slot by slot.

    Entries pair with slots ``0..count-1``; entries past the platform's slot
    count are dropped and ``None`` entries leave their slot alone.
    """
    log("DEBUG", f"Configuring network for machine {machine_label(machine)} with {adapters}")
    adapter_count = adapter_counter(machine)
    diagnostics: List[Diagnostic] = []
    for slot, adapter_config in zip(range(adapter_count), adapters):
        log("DEBUG", f"Configuring adapter {slot} with {adapter_config}")
        if adapter_config is None:
            continue
        diagnostics.extend(configure_adapter(machine, slot, adapter_config, resolver=resolver))
    return diagnostics
