"""Custom exceptions for vmconf."""

from __future__ import annotations

from typing import Any, Dict, Optional

INCOMPATIBLE_CONTROLLER = "incompatible-controller"
MISSING_DEVICE_TYPE = "missing-device-type"
UNKNOWN_BUS = "unknown-bus"
UNKNOWN_CONTROLLER_TYPE = "unknown-controller-type"
INVALID_CONFIG = "invalid-config"


class ConfigurationError(RuntimeError):
    """Raised when a configuration cannot be applied to a machine.

    ``kind`` names the rule that failed and ``details`` carries the offending
    values, so callers can branch on them instead of matching message text.
    """

    def __init__(self, kind: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.details: Dict[str, Any] = dict(details or {})
