"""Pyre TUI - Textual-based terminal interface."""

from pyre.tui.app import PyreApp

__all__ = ["PyreApp"]
