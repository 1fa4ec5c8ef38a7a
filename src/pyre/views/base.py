"""Common shell for the concrete list views."""

from typing import Generic, Optional, Sequence, TypeVar

from pyre.views.list_controller import EventLike, EventResult, KeyEvent, ListController, ListSpec


T = TypeVar("T")


class ListView(Generic[T]):
    """A titled view around one ``ListController``.

    Subclasses set ``spec`` and ``title`` and may override
    ``handle_view_key`` to claim keys before the shared list bindings see them.
    """

    spec: ListSpec
    title: str = ""
    help_bindings: tuple[tuple[str, str], ...] = (
        ("j/k", "navigate"),
        ("/", "filter"),
        ("s", "sort"),
        ("enter", "details"),
        ("r", "refresh"),
    )

    def __init__(self) -> None:
        self.list: ListController[T] = ListController(self.spec)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def selected(self) -> Optional[T]:
        return self.list.selected

    def set_data(self, entities: Optional[Sequence[T]], error: Optional[BaseException] = None) -> None:
        self.list.set_entities(entities, error)

    def set_size(self, width: int, height: int) -> None:
        self.list.set_size(width, height)

    def handle_view_key(self, event: KeyEvent) -> Optional[EventResult]:
        return None

    def handle_event(self, event: EventLike) -> EventResult:
        if isinstance(event, str):
            event = KeyEvent.of(event)
        if not self.list.filter_mode:
            result = self.handle_view_key(event)
            if result is not None:
                return result
        return self.list.handle_event(event)

    def summary(self) -> str:
        shown, total = self.list.counts
        if self.list.is_filtered:
            return f"{shown} of {total} {self.spec.noun}"
        return f"{total} {self.spec.noun}"

    def help_keys(self) -> str:
        if self.list.filter_mode:
            return "enter apply  esc cancel  ctrl+u clear"
        parts = [f"{key} {action}" for key, action in self.help_bindings]
        parts.append(f"sort: {self.list.sort_label}")
        return "  ".join(parts)

    def detail_lines(self, entity: T) -> list[tuple[str, str]]:
        """Label/value pairs for the expanded detail panel."""
        return []
