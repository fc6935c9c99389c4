"""Module entry point: ``python -m vmconf``."""

from vmconf.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
