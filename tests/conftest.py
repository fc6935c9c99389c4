"""Shared test fixtures: mocked VirtualBox machine handles and sample configs."""

from __future__ import annotations

import textwrap
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def adapters():
    """Per-slot adapter mocks handed out by the ``machine`` fixture."""
    return {}


@pytest.fixture
def machine(adapters):
    """Return a MagicMock shaped like an IMachine from vboxapi."""
    m = MagicMock(name="machine")
    m.name = "test-vm"

    def _get_adapter(slot):
        if slot not in adapters:
            adapters[slot] = MagicMock(name=f"adapter{slot}")
        return adapters[slot]

    m.getNetworkAdapter.side_effect = _get_adapter
    m.parent.systemProperties.getMaxNetworkAdapters.return_value = 8
    return m


@pytest.fixture
def medium_resolver():
    """Medium lookup that hands back a tagged string per location."""
    return MagicMock(side_effect=lambda machine, location, device_type, value: f"medium:{location}")


@pytest.fixture
def sample_config():
    return {
        "name": "web-01",
        "memory-size": 2048,
        "network": [
            {"attachment-type": "bridged", "host-interface": "eth0", "enabled": True},
            None,
        ],
        "storage": [
            {
                "name": "IDE Controller",
                "bus": "ide",
                "type": "piix4",
                "devices": [None, None, {"location": "/isos/install.iso", "device-type": "dvd"}],
            },
            {
                "name": "SATA Controller",
                "bus": "sata",
                "devices": [{"location": "/vms/web-01.vdi", "device-type": "hard-disk"}],
            },
        ],
        "boot-mount-point": "/mnt",
    }


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML machine configuration and return its path."""
    path = tmp_path / "machine.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            name: web-01
            memory_size: 2048
            network:
              - attachment-type: bridged
                host-interface: eth0
              - attachment-type: nat
            storage:
              - name: SATA Controller
                bus: sata
                type: intel-ahci
                devices:
                  - location: /vms/web-01.vdi
                    device-type: hard-disk
                  - null
                  - location: /isos/tools.iso
                    device-type: dvd
            """
        )
    )
    return path
