"""Row source boundary.

A row source returns one complete collection per call or raises. Views never
call sources directly: the application runs ``fetch_snapshot`` in a worker
and hands the resulting ``Snapshot`` to the view's ``set_data``.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Protocol, Sequence, TypeVar

from pyre.errors import UpstreamFetchError


logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class RowSource(Protocol[T_co]):
    """Anything that can produce a full collection of rows."""

    name: str

    def fetch(self) -> Sequence[T_co]: ...


@dataclass(frozen=True)
class Snapshot(Generic[T]):
    """Outcome of one fetch: either entities or the error that prevented them."""

    source: str
    entities: Optional[list[T]] = None
    error: Optional[UpstreamFetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CallableSource(Generic[T]):
    """Adapt a plain function to the ``RowSource`` protocol."""

    def __init__(self, name: str, func: Callable[[], Sequence[T]]):
        self.name = name
        self._func = func

    def fetch(self) -> Sequence[T]:
        return self._func()

    def __repr__(self) -> str:
        return f"CallableSource({self.name!r})"


def fetch_snapshot(source: RowSource[T]) -> Snapshot[T]:
    """Fetch from ``source``, turning any failure into an error snapshot."""
    name = getattr(source, "name", source.__class__.__name__)
    try:
        rows = list(source.fetch())
    except Exception as exc:
        logger.warning("fetch from %s failed: %s", name, exc)
        return Snapshot(source=name, error=UpstreamFetchError(exc, source=name))
    logger.debug("fetched %d rows from %s", len(rows), name)
    return Snapshot(source=name, entities=rows)
