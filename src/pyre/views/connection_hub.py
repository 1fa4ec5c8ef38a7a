"""Connection hub: pick, add or remove the firewalls Pyre talks to."""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pyre.formatting import format_ago
from pyre.models import ConnectionEntry, ConnectionType
from pyre.views.base import ListView
from pyre.views.list_controller import Effect, ErrorPolicy, EventResult, KeyEvent, ListSpec
from pyre.views.sorting import SortColumn, SortTable

if TYPE_CHECKING:
    from pyre.config import ConnectionStateStore, PyreConfig


logger = logging.getLogger(__name__)


class ConnectionSort(Enum):
    RECENT = "recent"
    HOST = "host"
    TYPE = "type"


def recent_key(entry: ConnectionEntry) -> tuple:
    """Default connection first, then most recently used, then by host."""
    if entry.last_connected is None:
        return (not entry.is_default, 1, 0.0, entry.host.casefold())
    return (not entry.is_default, 0, -entry.last_connected.timestamp(), entry.host.casefold())


CONNECTION_SORT = SortTable(
    fields=ConnectionSort,
    columns={
        ConnectionSort.RECENT: SortColumn("Recent", recent_key),
        ConnectionSort.HOST: SortColumn("Host", lambda c: c.host.casefold()),
        ConnectionSort.TYPE: SortColumn("Type", lambda c: (c.type, c.host.casefold())),
    },
    default_ascending={
        ConnectionSort.RECENT: True,
        ConnectionSort.HOST: True,
        ConnectionSort.TYPE: True,
    },
)

CONNECTION_HUB_SPEC: ListSpec[ConnectionEntry] = ListSpec(
    name="connections",
    extractors=(
        lambda c: c.host,
        lambda c: c.type,
        lambda c: c.last_user,
    ),
    sort_table=CONNECTION_SORT,
    initial_sort=ConnectionSort.RECENT,
    overhead=6,
    expanded_overhead=0,
    error_policy=ErrorPolicy.CLEAR,
    placeholder="Filter connections...",
    noun="connections",
)


def build_entries(config: "PyreConfig", state: Optional["ConnectionStateStore"] = None) -> list[ConnectionEntry]:
    """Merge configured connections with their recorded usage."""
    entries = []
    for host, settings in config.connections.items():
        settings = settings or {}
        entry = ConnectionEntry(
            host=host,
            type=settings.get("type") or ConnectionType.FIREWALL.value,
            insecure=bool(settings.get("insecure", False)),
            is_default=host == config.default_connection,
        )
        if state is not None:
            usage = state.get(host)
            if usage is not None:
                entry.last_connected = usage.last_connected
                entry.last_user = usage.last_user
        entries.append(entry)
    return entries


class ConnectionHubView(ListView[ConnectionEntry]):
    spec = CONNECTION_HUB_SPEC
    title = "Connections"
    help_bindings = (
        ("j/k", "navigate"),
        ("enter", "connect"),
        ("d", "delete"),
        ("/", "filter"),
        ("s", "sort"),
    )

    def __init__(self) -> None:
        super().__init__()
        self.confirm_target: Optional[str] = None

    @property
    def is_confirming(self) -> bool:
        return self.confirm_target is not None

    def load(self, config: "PyreConfig", state: Optional["ConnectionStateStore"] = None) -> None:
        self.set_data(build_entries(config, state))
        logger.debug("connection hub loaded %d entries", len(self.list.raw))

    def ask_delete(self) -> bool:
        entry = self.selected
        if entry is None:
            return False
        self.confirm_target = entry.host
        return True

    def cancel_delete(self) -> None:
        self.confirm_target = None

    def handle_view_key(self, event: KeyEvent) -> Optional[EventResult]:
        state = self.list.state
        if self.is_confirming:
            if event.key == "y":
                host = self.confirm_target
                self.confirm_target = None
                return EventResult(state, effect=Effect.DELETE, payload=host)
            if event.key in ("n", "escape"):
                self.cancel_delete()
            # Everything else is swallowed while the prompt is open
            return EventResult(state)

        if event.key == "d":
            self.ask_delete()
            return EventResult(state)
        if event.key == "enter":
            entry = self.selected
            if entry is None:
                return EventResult(state)
            return EventResult(state, effect=Effect.CONNECT, payload=entry.host)
        return None

    def help_keys(self) -> str:
        if self.is_confirming:
            return f"Delete {self.confirm_target}?  y confirm  n cancel"
        return super().help_keys()

    def detail_lines(self, entry: ConnectionEntry) -> list[tuple[str, str]]:
        return [
            ("Host", entry.host),
            ("Type", entry.type),
            ("TLS verify", "off" if entry.insecure else "on"),
            ("Last user", entry.last_user),
            ("Last connected", format_ago(entry.last_connected)),
        ]
