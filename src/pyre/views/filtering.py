"""Free-text row filtering.

Every list view filters the same way: the query is case-folded and an
entity matches when the query is a substring of at least one of the view's
extracted fields. An empty query matches everything.
"""

from typing import Callable, Optional, Sequence, TypeVar


T = TypeVar("T")

FieldExtractor = Callable[[T], Optional[str]]


def matches(entity: T, query: str, extractors: Sequence[FieldExtractor]) -> bool:
    """Check whether a single entity satisfies the query."""
    needle = query.casefold()
    if not needle:
        return True
    for extract in extractors:
        value = extract(entity)
        if value and needle in str(value).casefold():
            return True
    return False


def filter_rows(
    raw: Sequence[T],
    query: str,
    extractors: Sequence[FieldExtractor],
) -> list[T]:
    """Reduce ``raw`` to the entities matching ``query``.

    Args:
        raw: Entities as delivered by the row source.
        query: Free-text query; case is ignored.
        extractors: Per-entity-type field accessors searched by the query.

    Returns:
        A new list holding the matching entities in their original order.
    """
    if not query:
        return list(raw)
    return [entity for entity in raw if matches(entity, query, extractors)]
