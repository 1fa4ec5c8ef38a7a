"""Row sources feeding the list views."""

from .base import CallableSource, RowSource, Snapshot, fetch_snapshot
from .demo import DemoFirewall

__all__ = ["CallableSource", "DemoFirewall", "RowSource", "Snapshot", "fetch_snapshot"]
