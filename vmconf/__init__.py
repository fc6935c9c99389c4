"""vmconf package."""

__all__ = [
    "cli",
    "config",
    "constants",
    "enums",
    "exceptions",
    "machine",
    "models",
    "network",
    "plan",
    "storage",
    "utils",
]
