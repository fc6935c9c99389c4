"""Storage controller creation and device placement for vmconf."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

from vmconf.config import parse_controller, parse_device
from vmconf.constants import (
    ACCESS_MODE_READ_ONLY,
    ACCESS_MODE_READ_WRITE,
    CONTROLLER_TYPES_BY_BUS,
    IDE_COORDINATES,
    READ_ONLY_DEVICE_TYPES,
)
from vmconf.enums import DEFAULT_RESOLVER, EnumResolver
from vmconf.exceptions import (
    INCOMPATIBLE_CONTROLLER,
    MISSING_DEVICE_TYPE,
    UNKNOWN_BUS,
    UNKNOWN_CONTROLLER_TYPE,
    ConfigurationError,
)
from vmconf.models import Coordinate, DeviceDescriptor
from vmconf.utils import log, machine_label, normalize_key

MediumResolver = Callable[[Any, str, Optional[str], Any], Any]


def is_compatible(bus: Any, controller_type: Any) -> bool:
    """Return True if ``controller_type`` may drive a controller on ``bus``."""
    if not isinstance(bus, str) or not isinstance(controller_type, str):
        return False
    allowed = CONTROLLER_TYPES_BY_BUS.get(normalize_key(bus), frozenset())
    return normalize_key(controller_type) in allowed


def find_medium(machine: Any, location: str, device_type: Optional[str], device_type_value: Any) -> Any:
    """Open the medium at ``location`` through the machine's VirtualBox object."""
    access_mode = ACCESS_MODE_READ_ONLY if device_type in READ_ONLY_DEVICE_TYPES else ACCESS_MODE_READ_WRITE
    return machine.parent.openMedium(location, device_type_value, access_mode, False)


def _ide_coordinates(count: int) -> List[Coordinate]:
    if count > len(IDE_COORDINATES):
        log(
            "WARN",
            f"IDE controllers hold at most {len(IDE_COORDINATES)} devices; "
            f"ignoring {count - len(IDE_COORDINATES)} extra device(s)",
        )
    return [Coordinate(slot, port) for slot, port in IDE_COORDINATES[:count]]


def _sequential_coordinates(count: int) -> List[Coordinate]:
    return [Coordinate(0, port) for port in range(count)]


PLACEMENT_POLICIES: Dict[str, Callable[[int], List[Coordinate]]] = {
    "ide": _ide_coordinates,
    "sata": _sequential_coordinates,
    "scsi": _sequential_coordinates,
    "sas": _sequential_coordinates,
}


def device_coordinates(bus: str, count: int) -> List[Coordinate]:
    """Return the (slot, port) coordinate for each of ``count`` devices on ``bus``."""
    policy = PLACEMENT_POLICIES.get(normalize_key(bus)) if isinstance(bus, str) else None
    if policy is None:
        raise ConfigurationError(
            UNKNOWN_BUS,
            f"Unknown storage bus '{bus}'. Supported: {', '.join(sorted(PLACEMENT_POLICIES))}",
            {"bus": bus},
        )
    return policy(count)


def add_storage_controller(
    machine: Any,
    name: str,
    bus: str,
    controller_type: Optional[str] = None,
    resolver: EnumResolver = DEFAULT_RESOLVER,
) -> Any:
    """Create storage controller ``name`` on ``bus``, optionally setting its chipset.

    Validation happens before the machine is touched: an incompatible
    bus/controller pair or an unknown bus creates no controller.
    """
    if controller_type and not is_compatible(bus, controller_type):
        raise ConfigurationError(
            INCOMPATIBLE_CONTROLLER,
            f"Bus of type {bus} is not compatible with controller {controller_type}",
            {"bus": bus, "controller": controller_type},
        )
    storage_bus = resolver.storage_bus(bus)
    if storage_bus is None or normalize_key(bus) not in CONTROLLER_TYPES_BY_BUS:
        raise ConfigurationError(UNKNOWN_BUS, f"Unknown storage bus '{bus}'", {"bus": bus})
    controller_value = None
    if controller_type:
        controller_value = resolver.controller_type(controller_type)
        if controller_value is None:
            raise ConfigurationError(
                UNKNOWN_CONTROLLER_TYPE,
                f"Controller type {controller_type} has no value on this platform",
                {"bus": bus, "controller": controller_type},
            )
    log("DEBUG", f"Adding storage controller '{name}' on bus {bus} to {machine_label(machine)}")
    controller = machine.addStorageController(name, storage_bus)
    if controller_type:
        controller.controllerType = controller_value
    return controller


def attach_device(
    machine: Any,
    controller_name: str,
    device: DeviceDescriptor,
    port: int,
    slot: int,
    resolver: EnumResolver = DEFAULT_RESOLVER,
    medium_resolver: MediumResolver = find_medium,
) -> None:
    log(
        "DEBUG",
        f"Attaching {device.location} in controller {controller_name} slot {slot} port {port} "
        f"for machine {machine_label(machine)}",
    )
    device_type_value = resolver.device_type(device.device_type)
    if device_type_value is None:
        raise ConfigurationError(
            MISSING_DEVICE_TYPE,
            f"Failed to attach {device.location}; it is missing a valid device-type entry "
            f"(got {device.device_type!r})",
            {
                "location": device.location,
                "device_type": device.device_type,
                "controller": controller_name,
                "port": port,
                "slot": slot,
            },
        )
    medium = medium_resolver(machine, device.location, normalize_key(device.device_type), device_type_value)
    machine.attachDevice(controller_name, port, slot, device_type_value, medium)


def attach_devices(
    machine: Any,
    bus: str,
    controller_name: str,
    devices: Sequence[Any],
    resolver: EnumResolver = DEFAULT_RESOLVER,
    medium_resolver: MediumResolver = find_medium,
) -> List[Coordinate]:
    """Attach ``devices`` in index order using the placement policy for ``bus``.

    ``None`` entries are empty bays and produce no call. Returns the
    coordinates that received a device.
    """
    log("DEBUG", f"Attaching devices to {machine_label(machine)} in controller {controller_name}: {devices}")
    coordinates = device_coordinates(bus, len(devices))
    attached: List[Coordinate] = []
    for index, coordinate in enumerate(coordinates):
        device = parse_device(devices[index], f"controller '{controller_name}' device {index}")
        if device is None:
            continue
        attach_device(
            machine,
            controller_name,
            device,
            port=coordinate.port,
            slot=coordinate.slot,
            resolver=resolver,
            medium_resolver=medium_resolver,
        )
        attached.append(coordinate)
    return attached


def configure_controller(
    machine: Any,
    config: Any,
    resolver: EnumResolver = DEFAULT_RESOLVER,
    medium_resolver: MediumResolver = find_medium,
) -> List[Coordinate]:
    controller = parse_controller(config)
    log("DEBUG", f"Configuring controller for machine '{machine_label(machine)}': {controller}")
    add_storage_controller(machine, controller.name, controller.bus, controller.controller_type, resolver=resolver)
    return attach_devices(
        machine,
        controller.bus,
        controller.name,
        controller.devices,
        resolver=resolver,
        medium_resolver=medium_resolver,
    )


def configure_storage(
    machine: Any,
    controllers: Sequence[Any],
    resolver: EnumResolver = DEFAULT_RESOLVER,
    medium_resolver: MediumResolver = find_medium,
) -> None:
    """Create each controller in order and attach its devices.

    ``None`` entries are skipped. The first failure aborts the remaining
    controllers; anything created before it stays on the machine.
    """
    log("DEBUG", f"Configuring storage for machine {machine_label(machine)}: {controllers}")
    for index, entry in enumerate(controllers):
        if entry is None:
            continue
        configure_controller(
            machine,
            parse_controller(entry, f"storage[{index}]"),
            resolver=resolver,
            medium_resolver=medium_resolver,
        )
