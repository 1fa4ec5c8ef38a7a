"""Sort tables for list views.

Each view declares an enum of sortable fields. A ``SortTable`` binds every
member to a key function and a display label, knows the cycle order and
the view's default direction for a freshly selected field.
"""

import ipaddress
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, TypeVar

from pyre.models import as_utc


T = TypeVar("T")
F = TypeVar("F", bound=Enum)

SortKey = Callable[[Any], Any]

# Lower rank sorts first when ascending
STATE_RANK = {"up": 0, "init": 1, "down": 3}


def state_rank(state: Optional[str]) -> int:
    """Rank a link/tunnel state: up, then init, then anything else, then down."""
    return STATE_RANK.get((state or "").strip().lower(), 2)


def ip_key(address: Optional[str]) -> tuple:
    """Order addresses numerically; blank or unparsable values go last.

    A prefix length (``10.0.0.1/24``) is ignored.
    """
    text = (address or "").split("/", 1)[0].strip()
    try:
        parsed = ipaddress.ip_address(text)
    except ValueError:
        return (1, 0, 0, text.casefold())
    return (0, parsed.version, int(parsed), "")


EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def time_key(moment: Optional[datetime]) -> datetime:
    """Comparable timestamp; unset times sort as the oldest."""
    return as_utc(moment) or EPOCH


def sort_rows(rows: Sequence[T], key: SortKey, ascending: bool = True) -> list[T]:
    """Return ``rows`` ordered by ``key``.

    The sort is stable in both directions: rows with equal keys keep their
    incoming order, so re-sorting an already sorted list is a no-op.
    """
    return sorted(rows, key=key, reverse=not ascending)


@dataclass(frozen=True)
class SortColumn:
    """One sortable field: how to compute its key and how to label it."""

    label: str
    key: SortKey
    # Orders rows with equal keys, ascending in both directions
    tiebreak: Optional[SortKey] = None


@dataclass
class SortTable(Generic[F]):
    """The sortable fields of one view."""

    fields: type[F]
    columns: Mapping[F, SortColumn]
    # Direction applied when cycling onto a field; absent fields keep the current one
    default_ascending: Mapping[F, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        missing = [f for f in self.fields if f not in self.columns]
        if missing:
            raise ValueError(f"No sort column for: {', '.join(m.name for m in missing)}")

    @property
    def order(self) -> list[F]:
        return list(self.fields)

    def key(self, sort_field: F) -> SortKey:
        return self.columns[sort_field].key

    def label(self, sort_field: F) -> str:
        return self.columns[sort_field].label

    def cycle(self, sort_field: F) -> F:
        """Advance to the next field, wrapping after the last one."""
        order = self.order
        return order[(order.index(sort_field) + 1) % len(order)]

    def default_direction(self, sort_field: F, current: bool) -> bool:
        return self.default_ascending.get(sort_field, current)

    def apply(self, rows: Sequence[T], sort_field: F, ascending: bool) -> list[T]:
        column = self.columns[sort_field]
        if column.tiebreak is not None:
            rows = sort_rows(rows, column.tiebreak)
        return sort_rows(rows, column.key, ascending)

    def describe(self, sort_field: F, ascending: bool) -> str:
        """Header label such as ``"Name ↑"``."""
        arrow = "↑" if ascending else "↓"
        return f"{self.label(sort_field)} {arrow}"
