"""Tests for vmconf.machine module."""

from __future__ import annotations

from unittest.mock import MagicMock, call, patch

import pytest

from vmconf.constants import UNKNOWN_SETTING, UNSUPPORTED_ATTACHMENT
from vmconf.enums import DEFAULT_RESOLVER
from vmconf.exceptions import INCOMPATIBLE_CONTROLLER, INVALID_CONFIG, ConfigurationError
from vmconf.machine import (
    MACHINE_SETTERS,
    attach_storage,
    configure_machine,
    configure_machine_storage,
    set_boot_order,
)


class TestConfigureMachine:
    def test_routes_network(self, machine, adapters):
        with patch("vmconf.network.log"):
            diagnostics = configure_machine(
                machine,
                {"network": [{"attachment-type": "bridged", "host-interface": "eth0"}]},
                setters={},
            )
        assert diagnostics == []
        assert adapters[0].bridgedInterface == "eth0"

    def test_storage_and_boot_mount_point_are_noops(self, machine):
        setters = {"storage": MagicMock(), "boot-mount-point": MagicMock()}
        diagnostics = configure_machine(
            machine,
            {"storage": [{"name": "SATA", "bus": "sata"}], "boot-mount-point": "/mnt"},
            setters=setters,
        )
        assert diagnostics == []
        machine.addStorageController.assert_not_called()
        setters["storage"].assert_not_called()
        setters["boot-mount-point"].assert_not_called()

    def test_generic_setter_called_with_value_then_machine(self, machine):
        setter = MagicMock()
        configure_machine(machine, {"memory-size": 1024}, setters={"memory-size": setter})
        setter.assert_called_once_with(1024, machine)

    def test_unknown_key_reported_and_processing_continues(self, machine):
        first, last = MagicMock(), MagicMock()
        with patch("vmconf.machine.log") as mock_log:
            diagnostics = configure_machine(
                machine,
                {"first": 1, "flux-capacitor": True, "last": 2},
                setters={"first": first, "last": last},
            )
        first.assert_called_once_with(1, machine)
        last.assert_called_once_with(2, machine)
        assert len(diagnostics) == 1
        assert diagnostics[0].kind == UNKNOWN_SETTING
        assert diagnostics[0].subject == "flux-capacitor"
        mock_log.assert_called_with(
            "WARN", "There is no such setting flux-capacitor in a machine configuration"
        )
        machine.addStorageController.assert_not_called()
        machine.getNetworkAdapter.assert_not_called()

    def test_keys_are_normalized(self, machine):
        setter = MagicMock()
        configure_machine(machine, {"CPU_Count": 2}, setters={"cpu-count": setter})
        setter.assert_called_once_with(2, machine)

    def test_collects_network_diagnostics(self, machine):
        with patch("vmconf.network.log"), patch("vmconf.machine.log"):
            diagnostics = configure_machine(
                machine,
                {"network": [{"attachment-type": "nat"}], "nope": 1},
                setters={},
            )
        assert [d.kind for d in diagnostics] == [UNSUPPORTED_ATTACHMENT, UNKNOWN_SETTING]

    def test_uses_default_setter_table(self, machine):
        configure_machine(machine, {"memory-size": "2048", "cpu-count": 4, "name": "db-01"})
        assert machine.memorySize == 2048
        assert machine.CPUCount == 4
        assert machine.name == "db-01"

    def test_empty_network_is_fine(self, machine):
        assert configure_machine(machine, {"network": None}, setters={}) == []
        machine.getNetworkAdapter.assert_not_called()

    def test_network_must_be_a_list(self, machine):
        with pytest.raises(ConfigurationError) as exc:
            configure_machine(machine, {"network": {"attachment-type": "bridged"}}, setters={})
        assert exc.value.kind == INVALID_CONFIG

    def test_injected_adapter_counter(self, machine):
        with patch("vmconf.network.log"):
            configure_machine(
                machine,
                {"network": [{"enabled": True}] * 3},
                setters={},
                adapter_counter=lambda _m: 1,
            )
        assert machine.getNetworkAdapter.call_count == 1


class TestDefaultSetters:
    def test_bios_flags(self, machine):
        MACHINE_SETTERS["acpi-enabled"](1, machine)
        MACHINE_SETTERS["io-apic-enabled"](0, machine)
        assert machine.BIOSSettings.ACPIEnabled is True
        assert machine.BIOSSettings.IOAPICEnabled is False

    @pytest.mark.parametrize("key,value", [("memory-size", "lots"), ("cpu-count", None), ("vram-size", [16])])
    def test_unconvertible_value_is_invalid_config(self, machine, key, value):
        with pytest.raises(ConfigurationError) as exc:
            MACHINE_SETTERS[key](value, machine)
        assert exc.value.kind == INVALID_CONFIG
        assert exc.value.details == {"key": key, "value": value}

    def test_bad_value_stops_routing(self, machine):
        later = MagicMock()
        with pytest.raises(ConfigurationError) as exc:
            configure_machine(
                machine,
                {"memory-size": "lots", "later": 1},
                setters={"memory-size": MACHINE_SETTERS["memory-size"], "later": later},
            )
        assert exc.value.kind == INVALID_CONFIG
        later.assert_not_called()

    def test_os_type(self, machine):
        MACHINE_SETTERS["os-type-id"]("Ubuntu_64", machine)
        assert machine.OSTypeId == "Ubuntu_64"

    def test_boot_order(self, machine):
        set_boot_order(["dvd", "hard-disk", "network"], machine)
        assert machine.setBootOrder.call_args_list == [
            call(1, DEFAULT_RESOLVER.boot_device("dvd")),
            call(2, DEFAULT_RESOLVER.boot_device("hard-disk")),
            call(3, DEFAULT_RESOLVER.boot_device("network")),
        ]

    def test_boot_order_unknown_device(self, machine):
        with pytest.raises(ConfigurationError) as exc:
            set_boot_order(["dvd", "usb-stick"], machine)
        assert exc.value.kind == INVALID_CONFIG
        assert exc.value.details == {"device": "usb-stick", "position": 2}
        machine.setBootOrder.assert_called_once()


class TestConfigureMachineStorage:
    def test_applies_storage(self, machine, medium_resolver, sample_config):
        configure_machine_storage(machine, sample_config, medium_resolver=medium_resolver)
        names = [c.args[0] for c in machine.addStorageController.call_args_list]
        assert names == ["IDE Controller", "SATA Controller"]
        dvd = DEFAULT_RESOLVER.device_type("dvd")
        disk = DEFAULT_RESOLVER.device_type("hard-disk")
        assert machine.attachDevice.call_args_list == [
            call("IDE Controller", 0, 1, dvd, "medium:/isos/install.iso"),
            call("SATA Controller", 0, 0, disk, "medium:/vms/web-01.vdi"),
        ]

    def test_ignores_everything_but_storage(self, machine, sample_config):
        sample_config.pop("storage")
        configure_machine_storage(machine, sample_config)
        assert machine.mock_calls == []

    def test_missing_or_empty_storage(self, machine):
        configure_machine_storage(machine, {})
        configure_machine_storage(machine, {"storage": []})
        machine.addStorageController.assert_not_called()

    def test_errors_propagate(self, machine):
        with pytest.raises(ConfigurationError) as exc:
            configure_machine_storage(machine, {"storage": [{"name": "x", "bus": "scsi", "type": "piix3"}]})
        assert exc.value.kind == INCOMPATIBLE_CONTROLLER

    def test_attach_storage_matches(self, machine, medium_resolver, sample_config):
        attach_storage(machine, sample_config, medium_resolver=medium_resolver)
        assert machine.addStorageController.call_count == 2
        assert machine.attachDevice.call_count == 2

    def test_routing_and_storage_are_separate_steps(self, machine, medium_resolver, sample_config):
        with patch("vmconf.network.log"):
            configure_machine(machine, sample_config, setters={"name": MagicMock(), "memory-size": MagicMock()})
        machine.addStorageController.assert_not_called()
        configure_machine_storage(machine, sample_config, medium_resolver=medium_resolver)
        assert machine.addStorageController.call_count == 2
