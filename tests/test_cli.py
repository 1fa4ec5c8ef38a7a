"""Tests for Pyre CLI."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from pyre.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


def body_lines(output: str) -> list[str]:
    """Table rows between the dashed rule and the summary line."""
    lines = output.splitlines()
    start = next(n for n, line in enumerate(lines) if line.startswith("---"))
    end = lines.index("", start)
    return lines[start + 1:end]


class TestCLI:
    """Tests for the main CLI."""

    def test_cli_version(self, runner: CliRunner) -> None:
        """Test CLI version option."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_cli_help(self, runner: CliRunner) -> None:
        """Test CLI help output."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Pyre" in result.output
        for group in ("dashboard", "interfaces", "routes", "policies", "nat", "sessions", "tunnels", "gp-users", "connections", "config"):
            assert group in result.output

    def test_dashboard_help_shows_shortcuts(self, runner: CliRunner) -> None:
        """Test that dashboard help shows keyboard shortcuts."""
        result = runner.invoke(cli, ["dashboard", "--help"])
        assert result.exit_code == 0
        assert "interactive TUI dashboard" in result.output
        assert "Keyboard shortcuts" in result.output
        assert "palette" in result.output


class TestListCommands:
    """Tests for the snapshot list commands."""

    def test_interfaces_list(self, runner: CliRunner) -> None:
        """Test the interface table is printed sorted by name."""
        result = runner.invoke(cli, ["interfaces", "list"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert len(rows) == 13
        assert rows[0].startswith("ae1")
        assert "10 up, 3 down" in result.output
        assert "sort: Name ↑" in result.output

    def test_interfaces_filter(self, runner: CliRunner) -> None:
        """Test --filter narrows the table."""
        result = runner.invoke(cli, ["interfaces", "list", "--filter", "UNTRUST"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert len(rows) == 1
        assert rows[0].startswith("ethernet1/1 ")
        assert "1 of 13 shown" in result.output

    def test_interfaces_filter_no_match(self, runner: CliRunner) -> None:
        """Test a filter matching nothing says so."""
        result = runner.invoke(cli, ["interfaces", "list", "-f", "no-such-zone"])
        assert result.exit_code == 0
        assert "No interfaces found." in result.output

    def test_interfaces_sort_by_state(self, runner: CliRunner) -> None:
        """Test --sort state puts down interfaces last, or first with --desc, names ascending."""
        result = runner.invoke(cli, ["interfaces", "list", "--sort", "state"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert rows[-1].startswith("tunnel.3")
        assert "sort: State ↑" in result.output

        result = runner.invoke(cli, ["interfaces", "list", "-s", "state", "--desc"])
        rows = body_lines(result.output)
        assert [row.split()[0] for row in rows[:3]] == ["ethernet1/4", "ethernet1/6", "tunnel.3"]
        assert "sort: State ↓" in result.output

    def test_invalid_sort_field(self, runner: CliRunner) -> None:
        """Test unknown sort fields are rejected."""
        result = runner.invoke(cli, ["interfaces", "list", "--sort", "bogus"])
        assert result.exit_code == 2

    def test_sessions_list(self, runner: CliRunner) -> None:
        """Test sessions default to newest id first."""
        result = runner.invoke(cli, ["sessions", "list"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert len(rows) == 60
        assert rows[0].split()[0] == "10177"
        assert "sort: ID ↓" in result.output

    def test_sessions_sort_by_app(self, runner: CliRunner) -> None:
        """Test each sort field has its own default direction."""
        result = runner.invoke(cli, ["sessions", "list", "--sort", "app"])
        assert result.exit_code == 0
        assert "sort: App ↑" in result.output

    def test_tunnels_list(self, runner: CliRunner) -> None:
        """Test the tunnel table and summary."""
        result = runner.invoke(cli, ["tunnels", "list"])
        assert result.exit_code == 0
        assert len(body_lines(result.output)) == 7
        assert "4/7 up" in result.output

    def test_gp_users_list(self, runner: CliRunner) -> None:
        """Test the GlobalProtect user table."""
        result = runner.invoke(cli, ["gp-users", "list", "--filter", "gw-eu"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert [row.split()[0] for row in rows] == ["dave", "frank"]

    def test_routes_list(self, runner: CliRunner) -> None:
        """Test routes print in address order across virtual routers."""
        result = runner.invoke(cli, ["routes", "list"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert len(rows) == 11
        assert rows[0].split()[0] == "0.0.0.0/0"
        assert rows[0].split()[-1] == "default"
        assert rows[1].split()[-1] == "guest-vr"
        assert "11 routes in 2 virtual routers" in result.output
        assert "sort: Destination ↑" in result.output

    def test_routes_sort_by_protocol(self, runner: CliRunner) -> None:
        """Test protocol sort groups routes and keeps addresses ascending."""
        result = runner.invoke(cli, ["routes", "list", "--sort", "protocol"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert [row.split()[0] for row in rows[:2]] == ["10.20.0.0/16", "10.30.0.0/16"]
        assert "sort: Protocol ↑" in result.output

    def test_policies_list(self, runner: CliRunner) -> None:
        """Test security rules print in rule order with the disabled count."""
        result = runner.invoke(cli, ["policies", "list"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert [row.split()[1] for row in rows[:2]] == ["allow-dns", "allow-outbound"]
        assert "legacy-ftp (disabled)" in result.output
        assert "8 rules, 1 disabled" in result.output
        assert "sort: # ↑" in result.output

    def test_policies_sort_by_hits(self, runner: CliRunner) -> None:
        """Test hit sort defaults to the busiest rule first."""
        result = runner.invoke(cli, ["policies", "list", "--sort", "hits"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert rows[0].split()[1] == "allow-outbound"
        assert rows[-1].split()[1] == "legacy-ftp"
        assert "sort: Hits ↓" in result.output

    def test_nat_list(self, runner: CliRunner) -> None:
        """Test NAT rules show their translations."""
        result = runner.invoke(cli, ["nat", "list", "--filter", "pat"])
        assert result.exit_code == 0
        rows = body_lines(result.output)
        assert [row.split()[1] for row in rows] == ["outbound-pat", "guest-pat"]
        assert "DIPP: ethernet1/1" in rows[0]
        assert "2 of 5 rules" in result.output


class TestConnectionsCommand:
    """Tests for the connections command group."""

    def test_connections_help(self, runner: CliRunner) -> None:
        """Test connections command group help."""
        result = runner.invoke(cli, ["connections", "--help"])
        assert result.exit_code == 0
        for command in ("list", "add", "remove", "default"):
            assert command in result.output

    def test_list_empty(self, runner: CliRunner, home: Path) -> None:
        """Test listing with nothing configured."""
        result = runner.invoke(cli, ["connections", "list"])
        assert result.exit_code == 0
        assert "No connections configured." in result.output

    def test_add_and_list(self, runner: CliRunner, home: Path) -> None:
        """Test adding connections and listing them."""
        result = runner.invoke(cli, ["connections", "add", "fw1.example.com"])
        assert result.exit_code == 0
        assert "✓ Added connection: fw1.example.com" in result.output

        result = runner.invoke(
            cli, ["connections", "add", "pano.example.com", "-t", "panorama", "--insecure", "--default"]
        )
        assert result.exit_code == 0

        result = runner.invoke(cli, ["connections", "list"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "* pano.example.com [panorama] (insecure) - never"
        assert lines[1] == "  fw1.example.com [firewall] - never"
        assert "Total: 2 connections" in result.output

    def test_list_with_naive_state_timestamp(self, runner: CliRunner, home: Path) -> None:
        """Test a state file timestamp without an offset still lists."""
        runner.invoke(cli, ["connections", "add", "fw1.example.com"])
        state_path = home / ".pyre" / "state.json"
        state_path.write_text('{"connections": {"fw1.example.com": {"last_connected": "2026-01-01T00:00:00"}}}')

        result = runner.invoke(cli, ["connections", "list"])
        assert result.exit_code == 0
        assert result.output.splitlines()[0].startswith("* fw1.example.com [firewall] - ")
        assert result.output.splitlines()[0].endswith(" ago")

    def test_add_duplicate(self, runner: CliRunner, home: Path) -> None:
        """Test adding a duplicate connection fails."""
        runner.invoke(cli, ["connections", "add", "fw1.example.com"])
        result = runner.invoke(cli, ["connections", "add", "fw1.example.com"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_default(self, runner: CliRunner, home: Path) -> None:
        """Test switching the default connection."""
        runner.invoke(cli, ["connections", "add", "fw1.example.com"])
        runner.invoke(cli, ["connections", "add", "fw2.example.com"])
        result = runner.invoke(cli, ["connections", "default", "fw2.example.com"])
        assert result.exit_code == 0
        assert "✓ Default connection: fw2.example.com" in result.output

        result = runner.invoke(cli, ["connections", "list"])
        assert result.output.splitlines()[0].startswith("* fw2.example.com")

    def test_default_unknown(self, runner: CliRunner, home: Path) -> None:
        """Test only configured hosts can become the default."""
        result = runner.invoke(cli, ["connections", "default", "nope.example.com"])
        assert result.exit_code == 1
        assert "Unknown connection" in result.output

    def test_remove(self, runner: CliRunner, home: Path) -> None:
        """Test removing a connection with --yes."""
        runner.invoke(cli, ["connections", "add", "fw1.example.com"])
        result = runner.invoke(cli, ["connections", "remove", "fw1.example.com", "-y"])
        assert result.exit_code == 0
        assert "✓ Removed connection: fw1.example.com" in result.output

        result = runner.invoke(cli, ["connections", "list"])
        assert "No connections configured." in result.output

    def test_remove_asks_first(self, runner: CliRunner, home: Path) -> None:
        """Test declining the prompt keeps the connection."""
        runner.invoke(cli, ["connections", "add", "fw1.example.com"])
        result = runner.invoke(cli, ["connections", "remove", "fw1.example.com"], input="n\n")
        assert result.exit_code == 1
        result = runner.invoke(cli, ["connections", "list"])
        assert "fw1.example.com" in result.output

    def test_remove_not_found(self, runner: CliRunner, home: Path) -> None:
        """Test removing an unknown connection fails."""
        result = runner.invoke(cli, ["connections", "remove", "nope.example.com", "-y"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestConfigCommand:
    """Tests for the config command group."""

    def test_show(self, runner: CliRunner, home: Path) -> None:
        """Test the effective configuration is printed as YAML."""
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "theme: textual-dark" in result.output
        assert "refresh_interval: 30.0" in result.output

    def test_path(self, runner: CliRunner, home: Path) -> None:
        """Test the config path is under the home directory."""
        result = runner.invoke(cli, ["config", "path"])
        assert result.exit_code == 0
        assert result.output.strip() == str(home / ".pyre" / "config.yaml")

    def test_reset(self, runner: CliRunner, home: Path) -> None:
        """Test reset keeps connections."""
        config_path = home / ".pyre" / "config.yaml"
        config_path.parent.mkdir(parents=True)
        config_path.write_text("theme: nord\nconnections:\n  fw1.example.com: {type: firewall}\n")

        result = runner.invoke(cli, ["config", "reset", "--yes"])
        assert result.exit_code == 0
        assert "✓ Configuration reset" in result.output

        result = runner.invoke(cli, ["config", "show"])
        assert "theme: textual-dark" in result.output
        assert "fw1.example.com" in result.output

    def test_views(self, runner: CliRunner) -> None:
        """Test the view names are listed."""
        result = runner.invoke(cli, ["config", "views"])
        assert result.exit_code == 0
        assert "gp_users" in result.output

    def test_bad_config_file(self, runner: CliRunner, home: Path) -> None:
        """Test a malformed config file is reported, not a traceback."""
        config_path = home / ".pyre" / "config.yaml"
        config_path.parent.mkdir(parents=True)
        config_path.write_text("- not\n- a mapping\n")

        result = runner.invoke(cli, ["connections", "list"])
        assert result.exit_code == 1
        assert "must contain a mapping" in result.output
