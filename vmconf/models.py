"""Data models for vmconf."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional


class Coordinate(NamedTuple):
    slot: int
    port: int


@dataclass(frozen=True)
class DeviceDescriptor:
    location: str
    device_type: Optional[str]  # hard-disk, dvd, floppy


@dataclass
class ControllerConfig:
    name: str
    bus: str  # ide, sata, scsi, sas
    controller_type: Optional[str] = None
    devices: List[Optional[DeviceDescriptor]] = field(default_factory=list)


@dataclass
class AdapterConfig:
    attachment_type: Optional[str] = None
    # Scalar adapter properties in the order they were declared, unknown keys included.
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem noticed while applying a configuration."""

    kind: str
    subject: str
    message: str
