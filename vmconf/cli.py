"""CLI entry points for vmconf."""

from __future__ import annotations

import argparse
from collections.abc import Mapping
from pathlib import Path
from typing import List, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from vmconf.config import load_machine_config
from vmconf.constants import CONFIG_ENV_VAR, DEFAULT_ADAPTER_COUNT
from vmconf.exceptions import ConfigurationError
from vmconf.plan import PlannedCall, RecordingMachine, plan_machine_config
from vmconf.utils import get_env, log


def show_config(config: Mapping) -> None:
    """Print the loaded machine configuration."""
    print(yaml.safe_dump(dict(config), sort_keys=False, default_flow_style=False).rstrip(), flush=True)


def print_plan(calls: List[PlannedCall]) -> None:
    for index, call in enumerate(calls, start=1):
        print(f"  {index:>3}. {call.describe()}", flush=True)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Plan the VirtualBox calls a machine configuration makes")
    parser.add_argument(
        "config",
        nargs="?",
        default=None,
        help=f"Path to a YAML machine configuration (default: ${CONFIG_ENV_VAR})",
    )
    parser.add_argument("--show-config", action="store_true", help="Show the loaded configuration and exit")
    parser.add_argument(
        "--adapter-count",
        type=int,
        default=DEFAULT_ADAPTER_COUNT,
        metavar="N",
        help=f"Network adapter slots the simulated machine exposes (default: {DEFAULT_ADAPTER_COUNT})",
    )
    args = parser.parse_args(argv)

    config_path = args.config or get_env(CONFIG_ENV_VAR)
    if not config_path:
        log("ERROR", f"No machine configuration given (pass a path or set {CONFIG_ENV_VAR})")
        return 1
    if args.adapter_count < 0:
        log("ERROR", f"--adapter-count must be >= 0 (got {args.adapter_count})")
        return 1

    try:
        config = load_machine_config(Path(config_path))
    except ConfigurationError as exc:
        log("ERROR", str(exc))
        return 1

    if args.show_config:
        show_config(config)
        return 0

    machine = RecordingMachine(name=str(config.get("name", "machine")))
    try:
        plan = plan_machine_config(config, machine=machine, adapter_count=args.adapter_count)
    except ConfigurationError as exc:
        print_plan(machine.calls)
        log("ERROR", f"{exc} [{exc.kind}]")
        if machine.calls:
            log("WARN", f"The {len(machine.calls)} call(s) above ran before the failure and are not rolled back")
        return 1

    log("INFO", f"=== Plan for {machine.name} ===")
    print_plan(plan.calls)
    if plan.diagnostics:
        subjects = ", ".join(diagnostic.subject for diagnostic in plan.diagnostics)
        log("WARN", f"{len(plan.diagnostics)} setting(s) skipped: {subjects}")
    log("SUCCESS", f"Planned {len(plan.calls)} call(s)")
    return 0
