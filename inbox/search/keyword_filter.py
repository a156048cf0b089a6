"""
inbox/search/keyword_filter.py
Case-insensitive substring filter over text-bearing records.
Pure Python, no I/O. Used by the message search overlay and the
in-conversation search bar.
"""

from typing import Iterable, List, TypeVar

T = TypeVar('T')


def normalize_query(query: str) -> str:
    return (query or '').strip().lower()


def filter_by_keyword(
    records: Iterable[T],
    query:   str,
    field:   str = 'text',
) -> List[T]:
    """
    Return the records whose `field` contains the query, in input order.

    Empty or whitespace-only query returns every record unchanged.
    The query is matched as one contiguous substring; no tokenising.
    """
    items = list(records)
    needle = normalize_query(query)
    if not needle:
        return items

    return [
        r for r in items
        if needle in (getattr(r, field, '') or '').lower()
    ]
