"""Tests for row sources, the demo firewall and logging setup."""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from pyre.errors import UpstreamFetchError
from pyre.logging_setup import LOG_BACKUP_COUNT, setup_logging
from pyre.sources import CallableSource, DemoFirewall, fetch_snapshot
from pyre.views import InterfacesView

from conftest import NOW


class TestFetchSnapshot:
    """Tests for turning fetches into snapshots."""

    def test_success(self) -> None:
        """Test rows come back as a list."""
        snapshot = fetch_snapshot(CallableSource("numbers", lambda: (1, 2, 3)))
        assert snapshot.ok
        assert snapshot.entities == [1, 2, 3]
        assert snapshot.source == "numbers"

    def test_failure_is_wrapped(self) -> None:
        """Test exceptions become an error snapshot with the message intact."""

        def boom():
            raise TimeoutError("connection timed out")

        snapshot = fetch_snapshot(CallableSource("interfaces", boom))
        assert not snapshot.ok
        assert snapshot.entities is None
        assert isinstance(snapshot.error, UpstreamFetchError)
        assert isinstance(snapshot.error.cause, TimeoutError)
        assert snapshot.error.source == "interfaces"
        assert str(snapshot.error) == "connection timed out"

    def test_empty_message_uses_class_name(self) -> None:
        """Test errors without a message still render something."""

        def boom():
            raise ConnectionResetError()

        assert str(fetch_snapshot(CallableSource("x", boom)).error) == "ConnectionResetError"

    def test_error_snapshot_feeds_view(self) -> None:
        """Test a failed refresh keeps the rows already shown."""
        demo = DemoFirewall(now=NOW)
        view = InterfacesView()
        source = demo.sources()["interfaces"]

        snapshot = fetch_snapshot(source)
        view.set_data(snapshot.entities, snapshot.error)
        demo.fail_with = "503 Service Unavailable"
        snapshot = fetch_snapshot(source)
        view.set_data(snapshot.entities, snapshot.error)

        assert len(view.list.raw) == 13
        assert str(view.list.state.last_error) == "503 Service Unavailable"


class TestDemoFirewall:
    """Tests for the demo data source."""

    def test_sources(self) -> None:
        """Test there is one source per data set."""
        assert set(DemoFirewall().sources()) == {
            "interfaces",
            "arp",
            "routes",
            "policies",
            "nat",
            "sessions",
            "tunnels",
            "gp_users",
        }

    def test_interfaces(self) -> None:
        """Test the interface table has up and down links."""
        rows = DemoFirewall().interfaces()
        down = sorted(i.name for i in rows if not i.is_up)
        assert len(rows) == 13
        assert down == ["ethernet1/4", "ethernet1/6", "tunnel.3"]
        assert all(i.total_bytes == 0 for i in rows if not i.is_up)

    def test_sessions_deterministic(self) -> None:
        """Test the same seed and clock produce the same sessions."""
        first = DemoFirewall(seed=3, now=NOW).sessions()
        second = DemoFirewall(seed=3, now=NOW).sessions()
        assert first == second
        assert len(first) == 60
        assert len({s.id for s in first}) == 60
        assert all(s.start_time < NOW for s in first)

    def test_session_limit(self) -> None:
        """Test session_limit caps each fetch and 0 means no cap."""
        assert len(DemoFirewall(session_limit=25).sessions()) == 25
        assert len(DemoFirewall(session_limit=500).sessions()) == 60
        assert len(DemoFirewall(session_limit=0).sessions()) == 60

    def test_routes(self) -> None:
        """Test the routing table spans two virtual routers and every protocol."""
        routes = DemoFirewall().routes()
        assert len(routes) == 11
        assert {r.virtual_router for r in routes} == {"default", "guest-vr"}
        assert {r.protocol for r in routes} == {"static", "connected", "bgp", "ospf", "local"}

    def test_security_rules(self) -> None:
        """Test the disabled rule never has hits and positions follow rule order."""
        rules = DemoFirewall(now=NOW).security_rules()
        assert [r.position for r in rules] == list(range(1, 9))
        disabled = [r for r in rules if r.disabled]
        assert [r.name for r in disabled] == ["legacy-ftp"]
        assert disabled[0].hit_count == 0
        assert disabled[0].last_hit is None
        assert all(r.last_hit < NOW for r in rules if not r.disabled)

    def test_nat_rules(self) -> None:
        """Test NAT rules carry a source or destination translation."""
        rules = DemoFirewall().nat_rules()
        assert len(rules) == 5
        for rule in rules:
            assert rule.source_translation != "none" or rule.translated_dest

    def test_counters_grow(self) -> None:
        """Test traffic counters increase between fetches."""
        demo = DemoFirewall(now=NOW)
        before = sum(t.traffic for t in demo.tunnels())
        after = sum(t.traffic for t in demo.tunnels())
        assert after > before
        assert demo.fetches == 2

    def test_arp_only_for_live_interfaces(self) -> None:
        """Test ARP entries belong to up interfaces with addresses."""
        demo = DemoFirewall()
        up = {i.name for i in demo.interfaces() if i.is_up}
        entries = demo.arp_entries()
        assert entries
        assert {e.interface for e in entries} <= up

    def test_gp_users(self) -> None:
        """Test login times line up with durations."""
        users = DemoFirewall(now=NOW).gp_users()
        assert len(users) == 6
        for user in users:
            assert (NOW - user.login_time).total_seconds() == user.duration

    def test_fail_with(self) -> None:
        """Test a configured failure raises and leaves the counter alone."""
        demo = DemoFirewall()
        demo.fail_with = "connection refused"
        with pytest.raises(ConnectionError, match="refused"):
            demo.gp_users()
        assert demo.fetches == 0


class TestLogging:
    """Tests for logging setup."""

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        level = root.level
        yield
        for handler in list(root.handlers):
            if isinstance(handler, logging.FileHandler) or type(handler) is logging.StreamHandler:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)

    def test_file_handler(self, tmp_path: Path) -> None:
        """Test records go to the log file when one is given."""
        log_file = tmp_path / "logs" / "pyre.log"
        setup_logging("debug", log_file)
        logging.getLogger("pyre.test").info("hello from the test")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "pyre.test: hello from the test" in log_file.read_text()
        assert logging.getLogger().level == logging.DEBUG

    def test_log_file_rotates_daily(self, tmp_path: Path) -> None:
        """Test the log file rotates at midnight and keeps a week of backups."""
        setup_logging(logging.INFO, tmp_path / "pyre.log")
        (handler,) = logging.getLogger().handlers
        assert isinstance(handler, TimedRotatingFileHandler)
        assert handler.when == "MIDNIGHT"
        assert handler.backupCount == LOG_BACKUP_COUNT

    def test_replaces_handlers(self, tmp_path: Path) -> None:
        """Test repeated setup leaves exactly one handler."""
        setup_logging(logging.INFO, tmp_path / "a.log")
        setup_logging(logging.WARNING)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)
        assert root.level == logging.WARNING

    def test_unknown_level_falls_back(self) -> None:
        """Test an unknown level name means INFO."""
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO
