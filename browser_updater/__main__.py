"""Entry point for ``python -m browser_updater``."""

from browser_updater.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
