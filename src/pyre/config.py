"""Pyre configuration management.

User settings live in ~/.pyre/config.yaml (or wherever PYRE_CONFIG points).
Connection usage history is kept separately in ~/.pyre/state.json so that
hand-edited config files are never rewritten just because a connection was used.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import yaml

from pyre.errors import ConfigError
from pyre.models import ConnectionType, as_utc, utcnow


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PYRE_CONFIG"

# Default configuration values
DEFAULT_THEME = "textual-dark"
DEFAULT_VIEW = "interfaces"  # any name from AVAILABLE_VIEWS
DEFAULT_REFRESH_INTERVAL = 30.0  # seconds, 0 disables auto refresh
DEFAULT_SESSION_PAGE_SIZE = 500

AVAILABLE_VIEWS = [
    ("interfaces", "Interfaces"),
    ("sessions", "Sessions"),
    ("tunnels", "IPSec Tunnels"),
    ("gp_users", "GlobalProtect"),
    ("connections", "Connections"),
    ("routes", "Routes"),
    ("policies", "Security Policies"),
    ("nat", "NAT Policies"),
]


def pyre_home() -> Path:
    return Path.home() / ".pyre"


@dataclass
class PyreConfig:
    """Pyre application configuration."""

    # Appearance
    theme: str = DEFAULT_THEME
    default_view: str = DEFAULT_VIEW

    # Data
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    session_page_size: int = DEFAULT_SESSION_PAGE_SIZE

    # Connections: host -> {"type": "firewall" | "panorama", "insecure": bool}
    connections: dict[str, dict[str, Any]] = field(default_factory=dict)
    default_connection: Optional[str] = None

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the config file."""
        override = os.environ.get(CONFIG_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return pyre_home() / "config.yaml"

    @classmethod
    def load(cls) -> "PyreConfig":
        """Load configuration from file, or return defaults if not found.

        Raises:
            ConfigError: The file exists but is not a YAML mapping.
        """
        config_path = cls.get_config_path()
        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping")

        # Only use known fields to avoid issues with old config versions
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        unknown = sorted(k for k in data if k not in known_fields)
        if unknown:
            logger.info("ignoring unknown config keys: %s", ", ".join(map(str, unknown)))
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        connections = filtered_data.get("connections") or {}
        if not isinstance(connections, dict):
            raise ConfigError(f"{config_path}: 'connections' must be a mapping of host to settings")
        filtered_data["connections"] = {
            str(host): dict(settings or {}) for host, settings in connections.items()
        }

        try:
            return cls(**filtered_data)
        except TypeError as exc:
            raise ConfigError(f"{config_path}: {exc}") from exc

    def save(self) -> None:
        """Save configuration to file."""
        config_path = self.get_config_path()

        # Ensure directory exists
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(asdict(self), f, sort_keys=False, default_flow_style=False)

    def reset(self) -> None:
        """Reset preferences to defaults, keeping configured connections."""
        self.theme = DEFAULT_THEME
        self.default_view = DEFAULT_VIEW
        self.refresh_interval = DEFAULT_REFRESH_INTERVAL
        self.session_page_size = DEFAULT_SESSION_PAGE_SIZE

    def add_connection(
        self,
        host: str,
        type: str = ConnectionType.FIREWALL.value,
        insecure: bool = False,
    ) -> None:
        self.connections[host] = {"type": type, "insecure": insecure}
        if self.default_connection is None:
            self.default_connection = host

    def remove_connection(self, host: str) -> bool:
        """Drop ``host``; returns False if it was not configured."""
        if host not in self.connections:
            return False
        del self.connections[host]
        if self.default_connection == host:
            self.default_connection = next(iter(self.connections), None)
        return True

    def set_default(self, host: str) -> None:
        if host not in self.connections:
            raise ConfigError(f"Unknown connection: {host}")
        self.default_connection = host


@dataclass
class ConnectionState:
    """Usage history for one connection."""

    last_connected: Optional[datetime] = None
    last_user: str = ""
    connect_count: int = 0


@dataclass
class ConnectionStateStore:
    """Per-host connection history persisted as JSON."""

    connections: dict[str, ConnectionState] = field(default_factory=dict)

    @classmethod
    def get_state_path(cls) -> Path:
        return pyre_home() / "state.json"

    @classmethod
    def load(cls) -> "ConnectionStateStore":
        """Load state from file; a missing or corrupt file starts fresh."""
        state_path = cls.get_state_path()
        if not state_path.exists():
            return cls()
        try:
            with open(state_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            connections = {}
            for host, entry in (data.get("connections") or {}).items():
                last = entry.get("last_connected")
                connections[host] = ConnectionState(
                    last_connected=as_utc(datetime.fromisoformat(last)) if last else None,
                    last_user=entry.get("last_user", ""),
                    connect_count=int(entry.get("connect_count", 0)),
                )
            return cls(connections=connections)
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as exc:
            logger.warning("discarding unreadable state file %s: %s", state_path, exc)
            return cls()

    def save(self) -> None:
        state_path = self.get_state_path()
        state_path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "connections": {
                host: {
                    "last_connected": entry.last_connected.isoformat() if entry.last_connected else None,
                    "last_user": entry.last_user,
                    "connect_count": entry.connect_count,
                }
                for host, entry in self.connections.items()
            }
        }
        with open(state_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, host: str) -> Optional[ConnectionState]:
        return self.connections.get(host)

    def record_connect(self, host: str, user: str = "", when: Optional[datetime] = None) -> ConnectionState:
        """Note a successful connection to ``host``."""
        entry = self.connections.setdefault(host, ConnectionState())
        entry.last_connected = when or utcnow()
        if user:
            entry.last_user = user
        entry.connect_count += 1
        return entry

    def forget(self, host: str) -> None:
        self.connections.pop(host, None)
