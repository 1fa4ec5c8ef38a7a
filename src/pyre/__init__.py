"""Pyre - terminal dashboard for firewall management."""

__version__ = "0.1.0"
