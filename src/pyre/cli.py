"""Click CLI for Pyre."""

import logging
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Optional

import click
import yaml

from pyre import __version__
from pyre.config import AVAILABLE_VIEWS, ConnectionStateStore, PyreConfig
from pyre.errors import ConfigError
from pyre.formatting import format_ago, truncate
from pyre.logging_setup import default_log_file, setup_logging
from pyre.models import ConnectionType
from pyre.sources import DemoFirewall, fetch_snapshot
from pyre.tui.render import COLUMNS
from pyre.views import (
    ConnectionHubView,
    GPUsersView,
    InterfacesView,
    NATPoliciesView,
    RoutesView,
    SecurityPoliciesView,
    SessionsView,
    TunnelsView,
)
from pyre.views.base import ListView
from pyre.views.connection_hub import build_entries


logger = logging.getLogger(__name__)


def load_config() -> PyreConfig:
    """Load the user config, reporting problems as click errors."""
    try:
        return PyreConfig.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(version=__version__, prog_name="pyre")
def cli() -> None:
    """Pyre - terminal dashboard for firewall management.

    Browse interfaces, routes, policies, sessions, IPSec tunnels and
    GlobalProtect users with vim-style navigation, filtering and sorting.

    Quick start:
        pyre dashboard              Launch the interactive dashboard
        pyre interfaces list        Print the interface table
        pyre connections add HOST   Remember a firewall
    """


@cli.command()
@click.option("--demo/--no-demo", default=True, help="Connect to the built-in demo firewall on start")
@click.option("--host", help="Connect to a configured host on start")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Log file (default ~/.pyre/pyre.log)")
@click.option("--verbose", "-v", is_flag=True, help="Log debug messages")
def dashboard(demo: bool, host: Optional[str], log_file: Optional[Path], verbose: bool) -> None:
    """Launch the interactive TUI dashboard.

    Keyboard shortcuts:
        j/k     - Move down/up
        /       - Filter
        s / S   - Cycle sort / flip direction
        enter   - Details
        r       - Refresh
        ctrl+p  - Command palette
        :       - Switch connection
        ?       - Help
        q       - Quit
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file or default_log_file())
    config = load_config()
    state = ConnectionStateStore.load()

    from pyre.tui import PyreApp
    from pyre.tui.app import DEMO_HOST

    connect_to = host or (DEMO_HOST if demo else None)
    logger.info("starting dashboard (connect_to=%s)", connect_to)
    app = PyreApp(config=config, state=state, connect_to=connect_to)
    app.run()


# =============================================================================
# List Commands - Print a snapshot of one view
# =============================================================================


def print_view(view: ListView) -> None:
    columns = COLUMNS[view.name]
    rows = view.list.filtered
    if not rows:
        click.echo(f"No {view.spec.noun} found.")
        return
    click.echo("  ".join(column.header.ljust(column.width) for column in columns).rstrip())
    click.echo("  ".join("-" * column.width for column in columns))
    for entity in rows:
        cells = []
        for column in columns:
            value = truncate(column.value(entity), column.width)
            cells.append(value.rjust(column.width) if column.justify == "right" else value.ljust(column.width))
        click.echo("  ".join(cells).rstrip())
    click.echo(f"\n{view.summary()} | sort: {view.list.sort_label}")


def snapshot_command(group: click.Group, view_class: type[ListView], source_name: str) -> None:
    """Register ``<group> list`` printing a filtered, sorted demo snapshot."""
    sort_fields: type[Enum] = view_class.spec.sort_table.fields

    @group.command("list", help=f"List {view_class.spec.noun} from the demo firewall.")
    @click.option("--filter", "-f", "query", default="", help="Free-text filter")
    @click.option("--sort", "-s", "sort_by", type=click.Choice([f.value for f in sort_fields]), help="Sort field")
    @click.option("--desc/--asc", default=None, help="Sort direction (default depends on the field)")
    def list_command(query: str, sort_by: Optional[str], desc: Optional[bool]) -> None:
        view = view_class()
        snapshot = fetch_snapshot(DemoFirewall().sources()[source_name])
        if not snapshot.ok:
            raise click.ClickException(str(snapshot.error))
        view.set_data(snapshot.entities)
        if sort_by is not None or desc is not None:
            field = sort_fields(sort_by) if sort_by else view.list.state.sort_field
            view.list.set_sort(field, None if desc is None else not desc)
        if query:
            view.list.set_filter(query)
        print_view(view)


@cli.group()
def interfaces() -> None:
    """Network interfaces."""


@cli.group()
def sessions() -> None:
    """Active sessions."""


@cli.group()
def tunnels() -> None:
    """IPSec tunnels."""


@cli.group("gp-users")
def gp_users() -> None:
    """GlobalProtect users."""


@cli.group()
def routes() -> None:
    """Routing table."""


@cli.group()
def policies() -> None:
    """Security policies."""


@cli.group()
def nat() -> None:
    """NAT policies."""


snapshot_command(interfaces, InterfacesView, "interfaces")
snapshot_command(sessions, SessionsView, "sessions")
snapshot_command(tunnels, TunnelsView, "tunnels")
snapshot_command(gp_users, GPUsersView, "gp_users")
snapshot_command(routes, RoutesView, "routes")
snapshot_command(policies, SecurityPoliciesView, "policies")
snapshot_command(nat, NATPoliciesView, "nat")


# =============================================================================
# Connections Commands - Manage configured firewalls
# =============================================================================


@cli.group()
def connections() -> None:
    """Manage configured firewall connections."""


@connections.command("list")
def connections_list() -> None:
    """List configured connections, most recently used first."""
    config = load_config()
    entries = build_entries(config, ConnectionStateStore.load())
    if not entries:
        click.echo("No connections configured.")
        return
    hub = ConnectionHubView()
    hub.set_data(entries)
    for entry in hub.list.filtered:
        marker = "*" if entry.is_default else " "
        flags = " (insecure)" if entry.insecure else ""
        user = f" as {entry.last_user}" if entry.last_user else ""
        click.echo(f"{marker} {entry.host} [{entry.type}]{flags} - {format_ago(entry.last_connected)}{user}")
    click.echo(f"\nTotal: {len(entries)} connections")


@connections.command("add")
@click.argument("host")
@click.option(
    "--type",
    "-t",
    "conn_type",
    type=click.Choice([t.value for t in ConnectionType]),
    default=ConnectionType.FIREWALL.value,
    help="Device type",
)
@click.option("--insecure", is_flag=True, help="Skip TLS verification")
@click.option("--default", "make_default", is_flag=True, help="Make this the default connection")
def connections_add(host: str, conn_type: str, insecure: bool, make_default: bool) -> None:
    """Add a connection.

    HOST: Hostname or IP address of the firewall
    """
    config = load_config()
    if host in config.connections:
        click.echo(f"Error: Connection '{host}' already exists.", err=True)
        raise SystemExit(1)
    config.add_connection(host, conn_type, insecure)
    if make_default:
        config.set_default(host)
    config.save()
    click.echo(f"✓ Added connection: {host}")


@connections.command("remove")
@click.argument("host")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def connections_remove(host: str, yes: bool) -> None:
    """Remove a connection.

    HOST: Host of the connection to remove
    """
    config = load_config()
    if host not in config.connections:
        click.echo(f"Error: Connection '{host}' not found.", err=True)
        raise SystemExit(1)
    if not yes:
        click.confirm(f"Remove connection '{host}'?", abort=True)
    config.remove_connection(host)
    config.save()

    state = ConnectionStateStore.load()
    state.forget(host)
    state.save()
    click.echo(f"✓ Removed connection: {host}")


@connections.command("default")
@click.argument("host")
def connections_default(host: str) -> None:
    """Set the default connection."""
    config = load_config()
    try:
        config.set_default(host)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    config.save()
    click.echo(f"✓ Default connection: {host}")


# =============================================================================
# Config Commands
# =============================================================================


@cli.group("config")
def config_group() -> None:
    """Show or reset the configuration."""


@config_group.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    config = load_config()
    click.echo(yaml.safe_dump(asdict(config), sort_keys=False, default_flow_style=False).rstrip())


@config_group.command("path")
def config_path() -> None:
    """Print the config file location."""
    click.echo(str(PyreConfig.get_config_path()))


@config_group.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_reset(yes: bool) -> None:
    """Reset preferences to defaults (connections are kept)."""
    if not yes:
        click.confirm("Reset preferences to defaults?", abort=True)
    config = load_config()
    config.reset()
    config.save()
    click.echo("✓ Configuration reset")


@config_group.command("views")
def config_views() -> None:
    """List the views usable as default_view."""
    for name, label in AVAILABLE_VIEWS:
        click.echo(f"{name:<12} {label}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
