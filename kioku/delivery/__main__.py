"""
Entry point for running Kioku as a module.

Usage:
    python -m kioku.delivery study
    python -m kioku.delivery due
    python -m kioku.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
