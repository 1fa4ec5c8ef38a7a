"""Generic list controller shared by every tabular view.

The controller owns the cursor, scroll offset, filter text and filter mode,
sort state, the expanded flag and the loading/error flags for one view. The
concrete views (interfaces, sessions, tunnels, ...) hold one instance each,
supply a ``ListSpec`` describing their rows, and delegate key events to
``handle_event`` after overlaying their own bindings.

State machine::

    BROWSING --"/"-->      FILTER_EDITING
    FILTER_EDITING --enter--> BROWSING   (commit, refilter, cursor/offset = 0)
    FILTER_EDITING --escape-> BROWSING   (restore committed text)

Every public operation leaves these invariants true:

* ``0 <= cursor < max(1, len(filtered))``
* ``0 <= offset <= cursor < offset + visible_rows``
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar, Union

from pyre.models import utcnow
from pyre.views import viewport
from pyre.views.filtering import FieldExtractor, filter_rows
from pyre.views.sorting import SortTable


logger = logging.getLogger(__name__)

T = TypeVar("T")

FILTER_CHAR_LIMIT = 100


class ListMode(str, Enum):
    """Input modes of a list view."""

    BROWSING = "browsing"
    FILTER_EDITING = "filter_editing"


class Effect(str, Enum):
    """Follow-up actions the surrounding application must carry out."""

    REFRESH = "refresh"
    EXECUTE = "execute"  # run the selected palette command
    CLOSE = "close"  # dismiss an overlay
    CONNECT = "connect"  # open the selected connection
    DELETE = "delete"  # delete the confirmed connection


class ErrorPolicy(str, Enum):
    """What a view shows when a fetch fails without delivering rows."""

    RETAIN = "retain"  # keep the previous rows on screen under the error
    CLEAR = "clear"  # drop the previous rows


@dataclass(frozen=True)
class KeyEvent:
    """A key press, using Textual's key names (``"down"``, ``"ctrl+d"``, ``"a"``)."""

    key: str
    character: Optional[str] = None

    @classmethod
    def of(cls, key: str) -> "KeyEvent":
        """Build an event from a key name, inferring the typed character."""
        if key == "space":
            return cls(key, " ")
        if len(key) == 1:
            return cls(key, key)
        return cls(key, None)

    @property
    def is_printable(self) -> bool:
        return self.character is not None and len(self.character) == 1 and self.character.isprintable()


@dataclass
class ListState:
    """Mutable state of one list view."""

    sort_field: Any
    sort_ascending: bool = True
    cursor: int = 0
    offset: int = 0
    mode: ListMode = ListMode.BROWSING
    filter_text: str = ""  # in-progress text while editing, committed text otherwise
    committed_filter: str = ""
    expanded: bool = False
    loading: bool = False
    last_error: Optional[BaseException] = None
    width: int = 0
    height: int = 0
    last_refreshed: Optional[datetime] = None

    @property
    def filter_mode(self) -> bool:
        return self.mode is ListMode.FILTER_EDITING


@dataclass(frozen=True)
class EventResult:
    """Outcome of ``handle_event``.

    ``handled`` is False when the key means nothing to the list so the caller
    can fall through to its own bindings. ``payload`` carries effect data,
    such as the palette command to execute.
    """

    state: ListState
    effect: Optional[Effect] = None
    handled: bool = True
    payload: Any = None


@dataclass
class ListSpec(Generic[T]):
    """Everything a concrete view tells the controller about its rows."""

    name: str
    extractors: Sequence[FieldExtractor]
    sort_table: SortTable
    initial_sort: Any
    initial_ascending: bool = True
    overhead: int = 8  # header, filter bar, help line
    expanded_overhead: int = 14  # detail panel
    min_visible: int = 1
    wrap: bool = False  # only the command palette wraps
    error_policy: ErrorPolicy = ErrorPolicy.RETAIN
    placeholder: str = "Filter..."
    noun: str = "entries"


EventLike = Union[KeyEvent, str]


class ListController(Generic[T]):
    """Navigable, filterable, sortable, scrollable list of rows."""

    # Browsing key aliases -> handler names
    BROWSE_KEYS: dict[str, str] = {
        "j": "move_down",
        "down": "move_down",
        "k": "move_up",
        "up": "move_up",
        "g": "jump_first",
        "home": "jump_first",
        "G": "jump_last",
        "end": "jump_last",
        "ctrl+d": "page_down",
        "pagedown": "page_down",
        "ctrl+u": "page_up",
        "pageup": "page_up",
        "/": "start_filter",
        "enter": "toggle_expanded",
        "escape": "escape",
        "s": "cycle_sort",
        "S": "toggle_sort_direction",
    }

    def __init__(self, spec: ListSpec[T]) -> None:
        self.spec = spec
        self.state = ListState(sort_field=spec.initial_sort, sort_ascending=spec.initial_ascending)
        self._raw: Optional[list[T]] = None
        self._matched: list[T] = []  # filter result in source order
        self._filtered: list[T] = []  # matched rows in sort order
        self._predicate: Optional[Callable[[T], bool]] = None

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def raw(self) -> list[T]:
        return list(self._raw or [])

    @property
    def filtered(self) -> list[T]:
        return list(self._filtered)

    @property
    def has_data(self) -> bool:
        """True once a snapshot has been delivered."""
        return self._raw is not None

    @property
    def cursor(self) -> int:
        return self.state.cursor

    @property
    def offset(self) -> int:
        return self.state.offset

    @property
    def visible_rows(self) -> int:
        return max(
            self.spec.min_visible,
            viewport.visible_rows(
                self.state.height,
                self.spec.overhead,
                self.spec.expanded_overhead,
                self.state.expanded,
            ),
        )

    @property
    def filter_mode(self) -> bool:
        return self.state.filter_mode

    @property
    def filter_text(self) -> str:
        return self.state.filter_text

    @property
    def is_filtered(self) -> bool:
        return bool(self.state.committed_filter)

    @property
    def selected(self) -> Optional[T]:
        if 0 <= self.state.cursor < len(self._filtered):
            return self._filtered[self.state.cursor]
        return None

    @property
    def sort_label(self) -> str:
        return self.spec.sort_table.describe(self.state.sort_field, self.state.sort_ascending)

    @property
    def counts(self) -> tuple[int, int]:
        """(filtered, total) row counts."""
        return len(self._filtered), len(self._raw or [])

    def window(self) -> list[tuple[int, T]]:
        """Rows on screen with their index into ``filtered``."""
        return viewport.page_window(self._filtered, self.state.offset, self.visible_rows)

    def check_invariants(self) -> list[str]:
        """Describe every violated invariant; empty when the state is sound."""
        problems = []
        s = self.state
        count = len(self._filtered)
        if count == 0 and s.cursor != 0:
            problems.append(f"cursor {s.cursor} on empty list")
        if count and not 0 <= s.cursor < count:
            problems.append(f"cursor {s.cursor} outside [0, {count})")
        if s.offset < 0 or s.offset > s.cursor:
            problems.append(f"offset {s.offset} not in [0, cursor={s.cursor}]")
        if s.cursor >= s.offset + self.visible_rows:
            problems.append(f"cursor {s.cursor} below window {s.offset}+{self.visible_rows}")
        if any(row not in (self._raw or []) for row in self._filtered):
            problems.append("filtered row missing from raw")
        return problems

    # ------------------------------------------------------------------
    # Ingestion and flags
    # ------------------------------------------------------------------

    def set_entities(self, entities: Optional[Sequence[T]], error: Optional[BaseException] = None) -> None:
        """Apply a fetched snapshot.

        This is the only way rows enter the controller. The snapshot replaces
        the previous one wholesale; a failed fetch (``entities is None``)
        keeps or clears the previous rows according to the view's policy.
        """
        if entities is not None:
            self._raw = list(entities)
        elif error is not None and self.spec.error_policy is ErrorPolicy.CLEAR:
            self._raw = []
        elif self._raw is None and error is None:
            self._raw = []

        self.state.last_error = error
        self.state.loading = False
        self.state.last_refreshed = utcnow()

        if error is not None:
            logger.warning("%s: fetch failed: %s", self.spec.name, error)
        else:
            logger.debug("%s: received %d rows", self.spec.name, len(self._raw or []))

        self._refilter()
        self._clamp()

    def set_loading(self, loading: bool) -> None:
        self.state.loading = loading

    def set_predicate(self, predicate: Optional[Callable[[T], bool]]) -> None:
        """Exclude rows failing ``predicate`` before the text filter runs."""
        self._predicate = predicate
        self._refilter()
        self._clamp()

    def refresh_rows(self) -> None:
        """Re-evaluate the predicate and filter against the current rows."""
        self._refilter()
        self._clamp()

    def set_size(self, width: int, height: int) -> None:
        """Resize the viewport; valid in either mode."""
        self.state.width = max(0, width)
        self.state.height = max(0, height)
        self._clamp()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def move_down(self) -> None:
        count = len(self._filtered)
        if self.spec.wrap and count and self.state.cursor >= count - 1:
            self.state.cursor = 0
        else:
            self.state.cursor += 1
        self._clamp()

    def move_up(self) -> None:
        count = len(self._filtered)
        if self.spec.wrap and count and self.state.cursor <= 0:
            self.state.cursor = count - 1
        else:
            self.state.cursor -= 1
        self._clamp()

    def move_by(self, delta: int) -> None:
        """Move the cursor by ``delta`` rows, clamped at both ends."""
        self.state.cursor += delta
        self._clamp()

    def jump_first(self) -> None:
        self.state.cursor = 0
        self.state.offset = 0
        self._clamp()

    def jump_last(self) -> None:
        self.state.cursor = len(self._filtered) - 1
        self._clamp()

    def page_down(self) -> None:
        self.move_by(self.visible_rows)

    def page_up(self) -> None:
        self.move_by(-self.visible_rows)

    def select_index(self, index: int) -> None:
        self.state.cursor = index
        self._clamp()

    def toggle_expanded(self) -> None:
        self.state.expanded = not self.state.expanded
        self._clamp()

    def collapse(self) -> bool:
        """Collapse the detail panel; True if it was open."""
        if not self.state.expanded:
            return False
        self.state.expanded = False
        self._clamp()
        return True

    def escape(self) -> None:
        if not self.collapse():
            self.clear_filter()

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def cycle_sort(self) -> None:
        table = self.spec.sort_table
        self.state.sort_field = table.cycle(self.state.sort_field)
        self.state.sort_ascending = table.default_direction(self.state.sort_field, self.state.sort_ascending)
        logger.debug("%s: sort by %s", self.spec.name, self.sort_label)
        self._resort()
        self._reset_position()

    def toggle_sort_direction(self) -> None:
        self.state.sort_ascending = not self.state.sort_ascending
        self._resort()
        self._reset_position()

    def set_sort(self, sort_field: Any, ascending: Optional[bool] = None) -> None:
        """Select a sort field directly (e.g. from the command line)."""
        self.state.sort_field = sort_field
        if ascending is None:
            ascending = self.spec.sort_table.default_direction(sort_field, self.state.sort_ascending)
        self.state.sort_ascending = ascending
        self._resort()
        self._reset_position()

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def start_filter(self) -> None:
        """Enter filter editing; the visible rows stay as they are."""
        self.state.mode = ListMode.FILTER_EDITING
        self.state.filter_text = self.state.committed_filter

    def edit_filter(self, text: str) -> None:
        self.state.filter_text = text[:FILTER_CHAR_LIMIT]

    def filter_insert(self, character: str) -> None:
        self.edit_filter(self.state.filter_text + character)

    def filter_backspace(self) -> None:
        self.state.filter_text = self.state.filter_text[:-1]

    def filter_clear_input(self) -> None:
        self.state.filter_text = ""

    def confirm_filter(self) -> None:
        """Commit the edited text, refilter and go back to the top."""
        self.state.mode = ListMode.BROWSING
        self.state.committed_filter = self.state.filter_text
        logger.debug("%s: filter %r", self.spec.name, self.state.committed_filter)
        self._refilter()
        self._reset_position()

    def cancel_filter(self) -> None:
        """Leave filter editing without touching the committed query."""
        self.state.mode = ListMode.BROWSING
        self.state.filter_text = self.state.committed_filter

    def clear_filter(self) -> bool:
        """Drop the committed query; True if there was one."""
        if not self.state.committed_filter:
            return False
        self.set_filter("")
        return True

    def set_filter(self, text: str, reset_position: bool = True) -> None:
        """Commit ``text`` directly, outside of the editing flow."""
        text = text[:FILTER_CHAR_LIMIT]
        self.state.filter_text = text
        self.state.committed_filter = text
        self._refilter()
        if reset_position:
            self._reset_position()
        else:
            self._clamp()

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    def handle_event(self, event: EventLike) -> EventResult:
        """Apply one key event according to the current mode."""
        if isinstance(event, str):
            event = KeyEvent.of(event)
        if self.state.filter_mode:
            return self._handle_filter_key(event)
        if event.key == "r":
            return EventResult(self.state, effect=Effect.REFRESH)
        handler = self.BROWSE_KEYS.get(event.key)
        if handler is None:
            return EventResult(self.state, handled=False)
        getattr(self, handler)()
        return EventResult(self.state)

    def _handle_filter_key(self, event: KeyEvent) -> EventResult:
        if event.key == "enter":
            self.confirm_filter()
        elif event.key == "escape":
            self.cancel_filter()
        elif event.key == "backspace":
            self.filter_backspace()
        elif event.key == "ctrl+u":
            self.filter_clear_input()
        elif event.is_printable:
            self.filter_insert(event.character)
        else:
            return EventResult(self.state, handled=False)
        return EventResult(self.state)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _refilter(self) -> None:
        rows = self._raw or []
        if self._predicate is not None:
            rows = [row for row in rows if self._predicate(row)]
        self._matched = filter_rows(rows, self.state.committed_filter, self.spec.extractors)
        self._resort()

    def _resort(self) -> None:
        self._filtered = self.spec.sort_table.apply(
            self._matched, self.state.sort_field, self.state.sort_ascending
        )

    def _reset_position(self) -> None:
        self.state.cursor = 0
        self.state.offset = 0
        self._clamp()

    def _clamp(self) -> None:
        s = self.state
        s.cursor = viewport.clamp_cursor(s.cursor, len(self._filtered))
        s.offset = viewport.ensure_visible(s.cursor, s.offset, self.visible_rows)
