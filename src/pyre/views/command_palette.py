"""Command palette.

A list controller variant with three differences from plain list views:

* commands are grouped by category, shown in ``CATEGORY_ORDER``, and a
  category header is only emitted when one of its commands is on screen;
* each command may carry an availability predicate; unavailable commands
  are dropped before the query is applied;
* vertical navigation wraps around instead of clamping.

The query is live: every keystroke refilters. An optional category scope
set at focus time is ANDed with the query.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, Iterable, Optional

from pyre.views.list_controller import (
    Effect,
    EventLike,
    EventResult,
    KeyEvent,
    ListController,
    ListSpec,
)
from pyre.views.sorting import SortColumn, SortTable


logger = logging.getLogger(__name__)

CATEGORY_ORDER = ("Monitor", "Analyze", "Tools", "Connections", "Actions", "System")

PAGE_JUMP = 10
QUERY_CHAR_LIMIT = 64


@dataclass(frozen=True)
class Command:
    """A command in the palette."""

    id: str
    label: str
    description: str = ""
    category: str = "Actions"
    shortcut: str = ""  # display only, e.g. "r"
    action: Optional[Callable[[], Any]] = None
    available: Optional[Callable[[], bool]] = None

    def is_available(self) -> bool:
        return self.available is None or bool(self.available())


@dataclass(frozen=True)
class PaletteRow:
    """A rendered palette line: a category header or a command entry."""

    kind: str  # "header" or "entry"
    text: str
    index: int = -1  # position in the filtered list for entries
    command: Optional[Command] = None
    selected: bool = False


def category_rank(category: str) -> tuple[int, str]:
    """Known categories by priority, unknown ones after them alphabetically."""
    if category in CATEGORY_ORDER:
        return CATEGORY_ORDER.index(category), ""
    return len(CATEGORY_ORDER), category


class PaletteSort(Enum):
    CATEGORY = "category"


PALETTE_SORT = SortTable(
    fields=PaletteSort,
    columns={PaletteSort.CATEGORY: SortColumn("Category", lambda c: category_rank(c.category))},
)

PALETTE_SPEC: ListSpec[Command] = ListSpec(
    name="palette",
    extractors=(
        lambda c: c.label,
        lambda c: c.description,
        lambda c: c.category,
    ),
    sort_table=PALETTE_SORT,
    initial_sort=PaletteSort.CATEGORY,
    overhead=12,  # input, help line, borders
    expanded_overhead=0,
    min_visible=5,
    wrap=True,
    placeholder="Type to search...",
    noun="commands",
)


class CommandPalette:
    """Fuzzy-ish command launcher overlay."""

    KEYS: dict[str, str] = {
        "up": "move_up",
        "ctrl+p": "move_up",
        "down": "move_down",
        "ctrl+n": "move_down",
        "home": "jump_first",
        "ctrl+a": "jump_first",
        "end": "jump_last",
        "ctrl+e": "jump_last",
        "pageup": "page_up",
        "pagedown": "page_down",
    }

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self.list: ListController[Command] = ListController(PALETTE_SPEC)
        self.focused = False
        self._prefilter: Optional[str] = None
        self.list.set_predicate(self._admits)
        self.list.set_entities(list(commands))

    @property
    def query(self) -> str:
        return self.list.state.committed_filter

    @property
    def prefilter(self) -> Optional[str]:
        return self._prefilter

    @property
    def cursor(self) -> int:
        return self.list.cursor

    @property
    def filtered(self) -> list[Command]:
        return self.list.filtered

    @property
    def selected(self) -> Optional[Command]:
        return self.list.selected

    def _admits(self, command: Command) -> bool:
        if not command.is_available():
            return False
        return self._prefilter is None or command.category == self._prefilter

    def set_commands(self, commands: Iterable[Command]) -> None:
        self.list.set_entities(list(commands))

    def set_size(self, width: int, height: int) -> None:
        self.list.set_size(width, height)

    def focus(self, category: Optional[str] = None) -> None:
        """Open the palette, optionally scoped to one category.

        Focusing without a category drops any scope from a previous opening.
        """
        self.focused = True
        self._prefilter = category or None
        self.list.set_filter("")
        self.list.refresh_rows()
        self.list.jump_first()
        logger.debug("palette focused (scope=%s, %d commands)", self._prefilter, len(self.filtered))

    def blur(self) -> None:
        self.focused = False

    def set_query(self, text: str) -> None:
        text = text[:QUERY_CHAR_LIMIT]
        if text != self.query:
            self.list.set_filter(text, reset_position=False)

    def move_up(self) -> None:
        self.list.move_up()

    def move_down(self) -> None:
        self.list.move_down()

    def jump_first(self) -> None:
        self.list.jump_first()

    def jump_last(self) -> None:
        self.list.jump_last()

    def page_up(self) -> None:
        self.list.move_by(-PAGE_JUMP)

    def page_down(self) -> None:
        self.list.move_by(PAGE_JUMP)

    def handle_event(self, event: EventLike) -> EventResult:
        if isinstance(event, str):
            event = KeyEvent.of(event)
        state = self.list.state
        handler = self.KEYS.get(event.key)
        if handler is not None:
            getattr(self, handler)()
            return EventResult(state)

        if event.key == "escape":
            self.blur()
            return EventResult(state, effect=Effect.CLOSE)
        if event.key == "enter":
            command = self.selected
            if command is None or command.action is None:
                return EventResult(state)
            self.blur()
            return EventResult(state, effect=Effect.EXECUTE, payload=command)
        if event.key == "backspace":
            self.set_query(self.query[:-1])
        elif event.key == "ctrl+u":
            self.set_query("")
        elif event.is_printable:
            self.set_query(self.query + event.character)
        else:
            return EventResult(state, handled=False)
        return EventResult(state)

    def grouped(self) -> list[tuple[str, list[Command]]]:
        """Filtered commands per category, in display order, empty ones omitted."""
        groups: dict[str, list[Command]] = {}
        for command in self.filtered:
            groups.setdefault(command.category, []).append(command)
        return [(category, groups[category]) for category in sorted(groups, key=category_rank)]

    def render_rows(self) -> list[PaletteRow]:
        """Header and entry rows inside the current scroll window."""
        start = self.list.offset
        end = start + self.list.visible_rows
        rows: list[PaletteRow] = []
        index = 0
        for category, commands in self.grouped():
            first, last = index, index + len(commands)
            index = last
            if last <= start or first >= end:
                continue
            rows.append(PaletteRow("header", category))
            for i, command in enumerate(commands, start=first):
                if start <= i < end:
                    rows.append(
                        PaletteRow(
                            "entry",
                            command.label,
                            index=i,
                            command=command,
                            selected=i == self.cursor,
                        )
                    )
        return rows

    def position_label(self) -> str:
        """``"(3/14)"`` scroll indicator, empty when everything fits."""
        count = len(self.filtered)
        if count <= self.list.visible_rows:
            return ""
        return f"({self.cursor + 1}/{count})"


def default_commands(
    dispatch: Callable[[str], Any],
    current_host: Optional[str] = None,
    is_connected: Optional[Callable[[], bool]] = None,
) -> list[Command]:
    """The dashboard's command registry.

    Args:
        dispatch: Called with the command id when a command is executed.
        current_host: Host of the active connection, listed under Connections.
        is_connected: Availability predicate for commands needing a device.
    """

    def cmd(id: str, label: str, description: str, category: str, shortcut: str = "", needs_device: bool = False) -> Command:
        return Command(
            id=id,
            label=label,
            description=description,
            category=category,
            shortcut=shortcut,
            action=partial(dispatch, id),
            available=is_connected if needs_device else None,
        )

    commands = [
        # Monitor - at-a-glance status
        cmd("view-interfaces", "Network", "Interfaces, ARP", "Monitor", shortcut="1", needs_device=True),
        cmd("view-tunnels", "VPN", "IPSec tunnel status", "Monitor", needs_device=True),
        # Analyze - detailed data views
        cmd("view-sessions", "Sessions", "Active connections", "Analyze", shortcut="2", needs_device=True),
        cmd("view-interfaces", "Interfaces", "Network interfaces", "Analyze", needs_device=True),
        cmd("view-tunnels", "IPSec Tunnels", "VPN tunnels", "Analyze", shortcut="3", needs_device=True),
        cmd("view-gp-users", "GlobalProtect Users", "Connected VPN users", "Analyze", shortcut="4", needs_device=True),
        cmd("view-routes", "Routes", "Routing table", "Analyze", shortcut="6", needs_device=True),
        cmd("view-policies", "Security Policies", "Rules and hit counts", "Analyze", shortcut="7", needs_device=True),
        cmd("view-nat", "NAT Policies", "Address translation rules", "Analyze", shortcut="8", needs_device=True),
        # Tools
        cmd("toggle-theme", "Toggle theme", "Switch between dark and light", "Tools"),
        # Connections
        cmd("view-connections", "Connect to firewall...", "Switch device", "Connections", shortcut="5"),
        # Actions
        cmd("refresh", "Refresh", "Reload current view", "Actions", shortcut="r", needs_device=True),
        cmd("refresh-all", "Refresh all", "Reload every view", "Actions", needs_device=True),
        # System
        cmd("help", "Help", "Keyboard shortcuts", "System", shortcut="?"),
        cmd("quit", "Quit", "Exit application", "System", shortcut="q"),
    ]

    if current_host:
        commands.append(
            Command(
                id="conn-current",
                label=f"{current_host} (current)",
                description="Connected",
                category="Connections",
            )
        )

    return commands
