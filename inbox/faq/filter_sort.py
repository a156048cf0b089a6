"""
inbox/faq/filter_sort.py
FAQ library view: free-text search, category filter, then a stable sort.

Three steps, always in this order:
  1. search   — question OR answer OR any keyword contains the query
  2. category — exact, case-insensitive category match unless 'all'
  3. sort     — usage / alphabetical / recent (default)

Python's sort is stable, so ties keep their pre-sort order for every
option, including the reversed ones. The input list is never mutated.
"""

import logging
import unicodedata
from typing import Iterable, List, Tuple

from inbox.models.record import FAQTemplate
from inbox.search.keyword_filter import normalize_query

logger = logging.getLogger(__name__)

FAQ_CATEGORIES = (
    'general',
    'pricing',
    'availability',
    'shipping',
    'refunds',
    'technical',
    'other',
)

ALL_CATEGORIES = 'all'

SORT_RECENT       = 'recent'
SORT_USAGE        = 'usage'
SORT_ALPHABETICAL = 'alphabetical'
SORT_OPTIONS      = (SORT_RECENT, SORT_USAGE, SORT_ALPHABETICAL)


def collation_key(text: str) -> Tuple[str, str, str]:
    """
    Locale-style sort key: base letters first (accents and case ignored),
    then accents, then case with lowercase ahead of uppercase.
    """
    text = text or ''
    decomposed = unicodedata.normalize('NFKD', text)
    base = ''.join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), text.casefold(), text.swapcase())


def normalize_sort(sort: str) -> str:
    value = (sort or '').strip().lower()
    if value not in SORT_OPTIONS:
        if value:
            logger.debug(f"Unknown FAQ sort {sort!r}, using {SORT_RECENT!r}")
        return SORT_RECENT
    return value


def matches_query(template: FAQTemplate, needle: str) -> bool:
    if needle in (template.question or '').lower():
        return True
    if needle in (template.answer or '').lower():
        return True
    return any(needle in (kw or '').lower() for kw in template.keywords)


def filter_and_sort(
    templates: Iterable[FAQTemplate],
    query:     str = '',
    category:  str = ALL_CATEGORIES,
    sort:      str = SORT_RECENT,
) -> List[FAQTemplate]:
    """Return a new list of templates filtered by query/category and sorted."""
    filtered = list(templates)

    needle = normalize_query(query)
    if needle:
        filtered = [t for t in filtered if matches_query(t, needle)]

    wanted = (category or ALL_CATEGORIES).strip().lower()
    if wanted != ALL_CATEGORIES:
        filtered = [t for t in filtered if (t.category or '').lower() == wanted]

    option = normalize_sort(sort)
    if option == SORT_USAGE:
        return sorted(filtered, key=lambda t: t.use_count or 0, reverse=True)
    if option == SORT_ALPHABETICAL:
        return sorted(filtered, key=lambda t: collation_key(t.question))
    return sorted(filtered, key=lambda t: t.created_at_ms or 0, reverse=True)
