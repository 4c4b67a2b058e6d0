"""Allows ``python -m steamcli``."""

from steamcli.cli import main

if __name__ == "__main__":
    main()
