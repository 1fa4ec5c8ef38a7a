"""Scroll window arithmetic.

All functions here are total: out-of-range inputs are clamped rather than
rejected, so the list controller can call them after any mutation.
"""

from typing import Sequence, TypeVar


T = TypeVar("T")


def visible_rows(height: int, overhead: int, expanded_overhead: int = 0, expanded: bool = False) -> int:
    """Number of list rows that fit in the viewport, never less than one.

    Args:
        height: Terminal height available to the view.
        overhead: Lines used by headers, filter bar and help line.
        expanded_overhead: Extra lines taken by the detail panel.
        expanded: Whether the detail panel is shown.
    """
    rows = height - overhead
    if expanded:
        rows -= expanded_overhead
    return max(1, rows)


def clamp_cursor(cursor: int, count: int) -> int:
    """Keep the cursor inside ``[0, count)``; 0 for an empty list."""
    if count <= 0:
        return 0
    return min(max(0, cursor), count - 1)


def ensure_visible(cursor: int, offset: int, visible: int) -> int:
    """Return the offset that brings ``cursor`` into the window, moving minimally."""
    visible = max(1, visible)
    offset = max(0, offset)
    if cursor < offset:
        return max(0, cursor)
    if cursor >= offset + visible:
        return cursor - visible + 1
    return offset


def page_window(rows: Sequence[T], offset: int, visible: int) -> list[tuple[int, T]]:
    """The rows currently on screen, paired with their absolute index."""
    start = max(0, offset)
    end = start + max(1, visible)
    return list(enumerate(rows[start:end], start=start))
