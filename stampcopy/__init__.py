"""Timestamped backup copies of a configurable set of directories."""

__all__ = [
    "config",
    "infrastructure",
    "processing",
    "reporting",
    "interfaces",
]

__version__ = "0.3.0"
