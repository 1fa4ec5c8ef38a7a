"""Shared fixtures for Pyre tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from pyre.models import Interface, Session


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ~ at a temporary directory so config and state files stay isolated."""
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    monkeypatch.delenv("PYRE_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def five_interfaces() -> list[Interface]:
    """Three up and two down interfaces."""
    return [
        Interface(name="ethernet1/1", state="up", zone="untrust", ip="203.0.113.1/24"),
        Interface(name="ethernet1/2", state="up", zone="trust", ip="192.168.1.1/24"),
        Interface(name="ethernet1/3", state="down", zone="dmz", ip="10.0.0.1/24"),
        Interface(name="ethernet1/4", state="up", zone="trust", ip="192.168.2.1/24"),
        Interface(name="ethernet1/5", state="down", zone="", ip=""),
    ]


@pytest.fixture
def ten_sessions() -> list[Session]:
    """Ten sessions, exactly one of them running the ssl application."""
    apps = ["web-browsing", "dns", "ssh", "ntp", "ssl", "zoom", "dns", "web-browsing", "ntp", "ssh"]
    return [
        Session(
            id=100 + n,
            application=app,
            source_ip=f"192.168.1.{10 + n}",
            dest_ip=f"8.8.{n}.8",
            source_zone="trust",
            dest_zone="untrust",
            bytes_in=1000 * (n + 1),
            bytes_out=10 * n,
            start_time=NOW - timedelta(minutes=n),
            rule="allow-outbound",
        )
        for n, app in enumerate(apps)
    ]


def make_interfaces(count: int) -> list[Interface]:
    return [
        Interface(name=f"ethernet1/{n:02d}", state="up" if n % 3 else "down", zone=f"zone{n % 4}")
        for n in range(count)
    ]
