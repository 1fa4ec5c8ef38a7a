"""Data models for Pyre."""

from .schemas import (
    ARPEntry,
    ConnectionEntry,
    ConnectionType,
    GlobalProtectUser,
    Interface,
    IPSecTunnel,
    NATRule,
    RouteEntry,
    RuleAction,
    SecurityRule,
    Session,
    SourceTranslation,
    as_utc,
    utcnow,
)

__all__ = [
    "ARPEntry",
    "ConnectionEntry",
    "ConnectionType",
    "GlobalProtectUser",
    "Interface",
    "IPSecTunnel",
    "NATRule",
    "RouteEntry",
    "RuleAction",
    "SecurityRule",
    "Session",
    "SourceTranslation",
    "as_utc",
    "utcnow",
]
