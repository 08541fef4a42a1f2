"""Allows ``python -m stampcopy [CONFIG]``."""
from __future__ import annotations

from stampcopy.interfaces.cli import run

if __name__ == "__main__":
    run()
