"""Configuration loading and parsing for vmconf."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from vmconf.constants import ATTACHMENT_TYPE_KEY
from vmconf.exceptions import INVALID_CONFIG, ConfigurationError
from vmconf.models import AdapterConfig, ControllerConfig, DeviceDescriptor
from vmconf.utils import log, normalize_key


def _normalize(raw: Mapping) -> Dict[Any, Any]:
    return {normalize_key(key): value for key, value in raw.items()}


def _invalid(message: str, **details: Any) -> ConfigurationError:
    return ConfigurationError(INVALID_CONFIG, message, details)


def as_list(raw: Any, where: str) -> List[Any]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    raise _invalid(f"{where} must be a list (got {type(raw).__name__})", value=raw)


def load_machine_config(path: Path) -> Dict[Any, Any]:
    """Read a machine configuration from a YAML file.

    The document may either be the configuration mapping itself or a mapping
    with a single ``machine`` key holding it. Top-level keys are normalized to
    kebab-case; nested values are returned untouched.
    """
    if not path.exists():
        raise _invalid(f"Machine config missing: {path}", path=str(path))
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise _invalid(f"Machine config {path} contains invalid YAML: {exc}", path=str(path))
    if data is None:
        log("WARN", f"Machine config {path} is empty")
        return {}
    if isinstance(data, Mapping) and set(data.keys()) == {"machine"}:
        data = data["machine"]
    if not isinstance(data, Mapping):
        raise _invalid(
            f"Machine config {path} must contain a mapping, got {type(data).__name__}",
            path=str(path),
        )
    return _normalize(data)


def parse_device(raw: Any, where: str = "device") -> Optional[DeviceDescriptor]:
    if raw is None or isinstance(raw, DeviceDescriptor):
        return raw
    if not isinstance(raw, Mapping):
        raise _invalid(f"{where} must be a mapping (got {type(raw).__name__})", value=raw)
    entry = _normalize(raw)
    location = entry.get("location")
    if not location:
        raise _invalid(f"{where} is missing a location", value=dict(raw))
    device_type = entry.get("device-type", entry.get("device-kind"))
    return DeviceDescriptor(location=str(location), device_type=device_type)


def parse_controller(raw: Any, where: str = "controller") -> Optional[ControllerConfig]:
    if raw is None or isinstance(raw, ControllerConfig):
        return raw
    if not isinstance(raw, Mapping):
        raise _invalid(f"{where} must be a mapping (got {type(raw).__name__})", value=raw)
    entry = _normalize(raw)
    name = entry.get("name")
    bus = entry.get("bus")
    if not name:
        raise _invalid(f"{where} is missing a name", value=dict(raw))
    if not bus:
        raise _invalid(f"{where} '{name}' is missing a bus", value=dict(raw))
    devices = [
        parse_device(device, f"{where} '{name}' device {index}")
        for index, device in enumerate(as_list(entry.get("devices"), f"{where} '{name}' devices"))
    ]
    return ControllerConfig(
        name=str(name),
        bus=normalize_key(bus),
        controller_type=normalize_key(entry.get("type")),
        devices=devices,
    )


def parse_adapter(raw: Any, where: str = "adapter") -> Optional[AdapterConfig]:
    if raw is None or isinstance(raw, AdapterConfig):
        return raw
    if not isinstance(raw, Mapping):
        raise _invalid(f"{where} must be a mapping (got {type(raw).__name__})", value=raw)
    properties = _normalize(raw)
    attachment_type = properties.pop(ATTACHMENT_TYPE_KEY, None)
    return AdapterConfig(attachment_type=normalize_key(attachment_type), properties=properties)


def parse_storage(raw: Any) -> List[Optional[ControllerConfig]]:
    return [parse_controller(entry, f"storage[{index}]") for index, entry in enumerate(as_list(raw, "storage"))]


def parse_network(raw: Any) -> List[Optional[AdapterConfig]]:
    return [parse_adapter(entry, f"network[{index}]") for index, entry in enumerate(as_list(raw, "network"))]
