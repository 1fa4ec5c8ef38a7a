"""Pyre TUI - Textual dashboard for firewall management."""

import getpass
import logging
from functools import partial
from typing import Callable, Optional

from textual import events, on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.message import Message
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Markdown, Static, TabbedContent, TabPane

from pyre.config import ConnectionStateStore, PyreConfig
from pyre.sources import DemoFirewall, RowSource, Snapshot, fetch_snapshot
from pyre.tui.render import DEFAULT_CONTEXT, RenderContext, render_palette, render_view
from pyre.views import (
    CommandPalette,
    ConnectionHubView,
    Effect,
    EventResult,
    GPUsersView,
    InterfacesView,
    KeyEvent,
    NATPoliciesView,
    RoutesView,
    SecurityPoliciesView,
    SessionsView,
    TunnelsView,
    default_commands,
)
from pyre.views.base import ListView


logger = logging.getLogger(__name__)

DEMO_HOST = "demo-firewall"

# View name -> tab id, in tab order
TABS = {
    "interfaces": "tab-interfaces",
    "sessions": "tab-sessions",
    "tunnels": "tab-tunnels",
    "gp_users": "tab-gp-users",
    "connections": "tab-connections",
    "routes": "tab-routes",
    "policies": "tab-policies",
    "nat": "tab-nat",
}

SourceFactory = Callable[[str], dict[str, RowSource]]


def local_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def demo_sources(host: str, session_limit: int = 0) -> dict[str, RowSource]:
    """Row sources backed by the built-in demo firewall."""
    return DemoFirewall(session_limit=session_limit).sources()


def to_key_event(event: events.Key) -> KeyEvent:
    """Translate a Textual key press, using the typed character for printable keys ("slash" -> "/")."""
    if event.is_printable and event.character and event.character != " ":
        return KeyEvent(event.character, event.character)
    return KeyEvent(event.key, event.character)


class DataArrived(Message):
    """A fetch finished; carries one complete snapshot for one view."""

    def __init__(self, view_name: str, snapshot: Snapshot) -> None:
        super().__init__()
        self.view_name = view_name
        self.snapshot = snapshot


class ViewEffect(Message):
    """A view asked the app to do something it cannot do itself."""

    def __init__(self, view_name: str, result: EventResult) -> None:
        super().__init__()
        self.view_name = view_name
        self.result = result


class ListPane(Static, can_focus=True):
    """Renders one list view and feeds it key presses."""

    def __init__(self, view: ListView, ctx: RenderContext = DEFAULT_CONTEXT, **kwargs) -> None:
        super().__init__(**kwargs)
        self.view = view
        self.ctx = ctx

    def on_mount(self) -> None:
        self.redraw()

    def on_resize(self, event: events.Resize) -> None:
        self.view.set_size(event.size.width, event.size.height)
        self.redraw()

    def redraw(self) -> None:
        if self.is_mounted:
            self.update(render_view(self.view, self.ctx))

    def on_key(self, event: events.Key) -> None:
        result = self.view.handle_event(to_key_event(event))
        if not result.handled:
            return  # fall through to app bindings
        event.stop()
        event.prevent_default()
        self.redraw()
        if result.effect is not None:
            self.post_message(ViewEffect(self.view.name, result))


class PaletteOverlay(Static, can_focus=True):
    """Command palette overlay, hidden until opened."""

    def __init__(self, palette: CommandPalette, ctx: RenderContext = DEFAULT_CONTEXT, **kwargs) -> None:
        super().__init__(**kwargs)
        self.palette = palette
        self.ctx = ctx

    def redraw(self) -> None:
        self.update(render_palette(self.palette, self.ctx))

    def on_key(self, event: events.Key) -> None:
        result = self.palette.handle_event(to_key_event(event))
        if not result.handled:
            return
        event.stop()
        event.prevent_default()
        self.redraw()
        if result.effect is not None:
            self.post_message(ViewEffect("palette", result))


HELP_TEXT = """\
# Pyre keyboard shortcuts

## Lists
| Key | Action |
|-----|--------|
| `j` / `k`, arrows | Move down / up |
| `g` / `G` | First / last row |
| `ctrl+d` / `ctrl+u` | Page down / up |
| `/` | Filter (enter applies, esc cancels) |
| `esc` | Close details, then clear filter |
| `enter` | Toggle details |
| `s` / `S` | Cycle sort field / flip direction |
| `r` | Refresh |

## Routes
| Key | Action |
|-----|--------|
| `p` | Cycle protocol filter |

## Connections
| Key | Action |
|-----|--------|
| `enter` | Connect |
| `d` | Delete (confirm with `y`) |

## Global
| Key | Action |
|-----|--------|
| `ctrl+p` | Command palette |
| `:` | Switch connection |
| `1`-`8` | Switch tab |
| `?` | This help |
| `q` | Quit |
"""


class HelpScreen(ModalScreen):
    """Keyboard shortcut reference."""

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 64;
        height: 80%;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    #help-scroll {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("q", "close", "Close"),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            with VerticalScroll(id="help-scroll"):
                yield Markdown(HELP_TEXT)
            yield Button("Close", id="close-btn")

    @on(Button.Pressed, "#close-btn")
    def on_close(self) -> None:
        self.dismiss()

    def action_close(self) -> None:
        self.dismiss()


class PyreApp(App):
    """Main Pyre TUI application."""

    TITLE = "Pyre"
    SUB_TITLE = "Firewall dashboard"

    # ctrl+p opens Pyre's own palette
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        layout: vertical;
        layers: base overlay;
    }

    TabbedContent {
        height: 1fr;
    }

    ListPane {
        height: 1fr;
        padding: 0 1;
    }

    #palette {
        layer: overlay;
        display: none;
        width: 72;
        height: auto;
        max-height: 80%;
        margin: 2 4;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("ctrl+p", "open_palette", "Commands", show=True),
        Binding(":", "open_palette('Connections')", "Connect", show=True),
        Binding("?", "help", "Help", show=True),
        Binding("1", "show_view('interfaces')", "Interfaces", show=False),
        Binding("2", "show_view('sessions')", "Sessions", show=False),
        Binding("3", "show_view('tunnels')", "Tunnels", show=False),
        Binding("4", "show_view('gp_users')", "GlobalProtect", show=False),
        Binding("5", "show_view('connections')", "Connections", show=False),
        Binding("6", "show_view('routes')", "Routes", show=False),
        Binding("7", "show_view('policies')", "Policies", show=False),
        Binding("8", "show_view('nat')", "NAT", show=False),
    ]

    current_host: reactive[Optional[str]] = reactive(None)

    def __init__(
        self,
        config: Optional[PyreConfig] = None,
        state: Optional[ConnectionStateStore] = None,
        source_factory: Optional[SourceFactory] = None,
        connect_to: Optional[str] = None,
        ctx: RenderContext = DEFAULT_CONTEXT,
        persist: bool = True,
    ):
        super().__init__()
        self._config = config if config is not None else PyreConfig.load()
        self._state = state if state is not None else ConnectionStateStore.load()
        self._source_factory = source_factory or partial(demo_sources, session_limit=self._config.session_page_size)
        self._sources: dict[str, RowSource] = {}
        self._connect_to = connect_to
        self._persist = persist
        self.ctx = ctx
        self._panes: dict[str, ListPane] = {}

        self.views: dict[str, ListView] = {
            "interfaces": InterfacesView(),
            "sessions": SessionsView(),
            "tunnels": TunnelsView(),
            "gp_users": GPUsersView(),
            "connections": ConnectionHubView(),
            "routes": RoutesView(),
            "policies": SecurityPoliciesView(),
            "nat": NATPoliciesView(),
        }
        self.palette = CommandPalette()

    def compose(self) -> ComposeResult:
        yield Header()
        initial = TABS.get(self._config.default_view, TABS["interfaces"])
        with TabbedContent(initial=initial, id="views"):
            for name, tab_id in TABS.items():
                view = self.views[name]
                with TabPane(view.title, id=tab_id):
                    pane = ListPane(view, self.ctx, id=f"pane-{name}")
                    self._panes[name] = pane
                    yield pane
        yield PaletteOverlay(self.palette, self.ctx, id="palette")
        yield Footer()

    def on_mount(self) -> None:
        if self._config.theme in self.available_themes:
            self.theme = self._config.theme
        self.hub.load(self._config, self._state)
        self._rebuild_commands()
        if self._connect_to:
            self.connect(self._connect_to)
        else:
            self.action_show_view("connections")
        if self._config.refresh_interval > 0:
            self.set_interval(self._config.refresh_interval, self.action_refresh_all)
        self.call_after_refresh(self.active_pane.focus)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def hub(self) -> ConnectionHubView:
        return self.views["connections"]

    @property
    def active_view_name(self) -> str:
        active = self.query_one("#views", TabbedContent).active
        for name, tab_id in TABS.items():
            if tab_id == active:
                return name
        return "interfaces"

    @property
    def active_pane(self) -> ListPane:
        return self.pane(self.active_view_name)

    def pane(self, name: str) -> ListPane:
        """The pane showing ``name``, whether or not it is mounted yet."""
        return self._panes[name]

    def is_connected(self) -> bool:
        return self.current_host is not None

    # ------------------------------------------------------------------
    # Data flow
    # ------------------------------------------------------------------

    def refresh_view(self, name: str) -> None:
        """Start a background fetch for one view."""
        if name == "connections":
            self.hub.load(self._config, self._state)
            self.pane(name).redraw()
            return
        source = self._sources.get(name)
        if source is None:
            return
        self.views[name].list.set_loading(True)
        self.pane(name).redraw()
        self.fetch_rows(name, source)
        if name == "interfaces" and "arp" in self._sources:
            self.fetch_rows("arp", self._sources["arp"])

    @work(thread=True)
    def fetch_rows(self, name: str, source: RowSource) -> None:
        """Fetch in a worker thread and hand the snapshot back to the UI thread."""
        snapshot = fetch_snapshot(source)
        self.call_from_thread(self.post_message, DataArrived(name, snapshot))

    def on_data_arrived(self, message: DataArrived) -> None:
        snapshot = message.snapshot
        if message.view_name == "arp":
            if snapshot.entities is not None:
                self.views["interfaces"].set_arp(snapshot.entities)
                self.pane("interfaces").redraw()
            return

        view = self.views.get(message.view_name)
        if view is None:
            return
        view.set_data(snapshot.entities, snapshot.error)
        if not snapshot.ok:
            self.notify(f"{view.title}: {snapshot.error}", severity="error")
        self.pane(message.view_name).redraw()

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def on_view_effect(self, message: ViewEffect) -> None:
        result = message.result
        effect = result.effect
        if effect is Effect.REFRESH:
            self.refresh_view(message.view_name)
        elif effect is Effect.EXECUTE:
            self._hide_palette()
            command = result.payload
            logger.debug("executing command %s", command.id)
            command.action()
        elif effect is Effect.CLOSE:
            self._hide_palette()
        elif effect is Effect.CONNECT:
            self.connect(result.payload)
        elif effect is Effect.DELETE:
            self.delete_connection(result.payload)

    def connect(self, host: str) -> None:
        """Switch the dashboard to ``host`` and load every view."""
        logger.info("connecting to %s", host)
        self._sources = self._source_factory(host)
        self.current_host = host
        self._state.record_connect(host, local_user())
        if self._persist and host in self._config.connections:
            self._state.save()
        self.sub_title = host
        self._rebuild_commands()
        for name in TABS:
            self.refresh_view(name)
        if self.active_view_name == "connections":
            self.action_show_view("interfaces")
        self.notify(f"Connected to {host}")

    def delete_connection(self, host: str) -> None:
        if not self._config.remove_connection(host):
            self.notify(f"Unknown connection: {host}", severity="warning")
            return
        self._state.forget(host)
        if self._persist:
            self._config.save()
            self._state.save()
        self.refresh_view("connections")
        self.notify(f"Removed {host}")

    def dispatch_command(self, command_id: str) -> None:
        """Run a palette command by id."""
        if command_id.startswith("view-"):
            self.action_show_view(command_id[len("view-"):].replace("-", "_"))
        elif command_id == "refresh":
            self.refresh_view(self.active_view_name)
        elif command_id == "refresh-all":
            self.action_refresh_all()
        elif command_id == "toggle-theme":
            self.theme = "textual-light" if self.theme == "textual-dark" else "textual-dark"
        elif command_id == "help":
            self.action_help()
        elif command_id == "quit":
            self.exit()
        else:
            logger.warning("unknown command %s", command_id)

    def _rebuild_commands(self) -> None:
        self.palette.set_commands(
            default_commands(self.dispatch_command, self.current_host, self.is_connected)
        )

    def _hide_palette(self) -> None:
        self.palette.blur()
        self.query_one("#palette", PaletteOverlay).display = False
        self.active_pane.focus()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_open_palette(self, category: Optional[str] = None) -> None:
        overlay = self.query_one("#palette", PaletteOverlay)
        self.palette.set_size(self.size.width, self.size.height)
        self.palette.focus(category)
        overlay.display = True
        overlay.redraw()
        overlay.focus()

    def action_show_view(self, name: str) -> None:
        tab_id = TABS.get(name)
        if tab_id is None:
            return
        self.query_one("#views", TabbedContent).active = tab_id
        self.call_after_refresh(self.pane(name).focus)
        view = self.views[name]
        if name != "connections" and not view.list.has_data:
            self.refresh_view(name)

    def action_refresh_all(self) -> None:
        if self.current_host is None:
            return
        for name in TABS:
            self.refresh_view(name)

    def action_help(self) -> None:
        self.push_screen(HelpScreen())

    @on(TabbedContent.TabActivated, "#views")
    def on_tab_activated(self, event: TabbedContent.TabActivated) -> None:
        name = event.pane.id.removeprefix("tab-").replace("-", "_")
        pane = self._panes.get(name)
        if pane is not None:
            # Fires before the pane mounts on start
            self.call_after_refresh(pane.focus)
