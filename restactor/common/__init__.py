"""Shared infrastructure: configuration loading."""

from .config_loader import ConfigLoader

__all__ = [
    "ConfigLoader",
]
