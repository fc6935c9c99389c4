"""Dry-run planning: record the calls a configuration would make on a machine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional

from vmconf.constants import DEFAULT_ADAPTER_COUNT
from vmconf.enums import DEFAULT_RESOLVER, EnumResolver
from vmconf.machine import configure_machine, configure_machine_storage
from vmconf.models import Diagnostic


class PlannedCall(NamedTuple):
    target: str
    operation: str
    args: tuple
    assignment: bool = False

    def describe(self) -> str:
        if self.assignment:
            return f"{self.target}.{self.operation} = {self.args[0]!r}"
        return f"{self.target}.{self.operation}({', '.join(repr(arg) for arg in self.args)})"


class RecordingObject:
    """Stand-in for a platform handle that records every attribute assignment."""

    def __init__(self, label: str, calls: List[PlannedCall]) -> None:
        object.__setattr__(self, "_label", label)
        object.__setattr__(self, "calls", calls)

    def __setattr__(self, name: str, value: Any) -> None:
        self.calls.append(PlannedCall(self._label, name, (value,), assignment=True))
        object.__setattr__(self, name, value)

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append(PlannedCall(self._label, operation, args))


class RecordingMachine(RecordingObject):
    """In-memory machine handle; mutations are recorded in call order."""

    def __init__(self, name: str = "machine") -> None:
        super().__init__("machine", [])
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "BIOSSettings", RecordingObject("machine.BIOSSettings", self.calls))
        object.__setattr__(self, "_adapters", {})

    def addStorageController(self, name: str, bus: Any) -> RecordingObject:
        self._record("addStorageController", name, bus)
        return RecordingObject(f"controller[{name}]", self.calls)

    def attachDevice(self, controller_name: str, port: int, slot: int, device_type: Any, medium: Any) -> None:
        self._record("attachDevice", controller_name, port, slot, device_type, medium)

    def getNetworkAdapter(self, slot: int) -> RecordingObject:
        if slot not in self._adapters:
            self._adapters[slot] = RecordingObject(f"adapter[{slot}]", self.calls)
        return self._adapters[slot]

    def setBootOrder(self, position: int, device: Any) -> None:
        self._record("setBootOrder", position, device)


def planned_medium(machine: Any, location: str, device_type: Optional[str], device_type_value: Any) -> str:
    return f"medium:{location}"


@dataclass
class Plan:
    calls: List[PlannedCall] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def plan_machine_config(
    config: Mapping,
    machine: Optional[RecordingMachine] = None,
    adapter_count: int = DEFAULT_ADAPTER_COUNT,
    setters: Optional[Dict[str, Any]] = None,
    resolver: EnumResolver = DEFAULT_RESOLVER,
) -> Plan:
    """Run the machine and storage appliers against a recording machine.

    Pass ``machine`` to keep access to the calls recorded before a
    ``ConfigurationError`` interrupts the run.
    """
    if machine is None:
        machine = RecordingMachine()
    diagnostics = configure_machine(
        machine,
        config,
        setters=setters,
        resolver=resolver,
        adapter_counter=lambda _machine: adapter_count,
    )
    configure_machine_storage(machine, config, resolver=resolver, medium_resolver=planned_medium)
    return Plan(calls=list(machine.calls), diagnostics=diagnostics)
