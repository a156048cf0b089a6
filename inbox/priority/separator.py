"""
inbox/priority/separator.py
Priority grouping for the conversation list.

Conversations whose opportunity score is >= PRIORITY_THRESHOLD form the
"priority" group and are listed first; one separator row is drawn after
the last priority item when a regular item follows it.

Scores come from an external scoring service. A conversation missing
from the score map counts as 0. This module never mutates the map.
"""

from typing import Any, Iterable, List, Mapping, Sequence

from inbox.models.record import Conversation

PRIORITY_THRESHOLD = 70


def _item_id(item: Any) -> str:
    return item if isinstance(item, str) else item.id


def score_of(item: Any, scores: Mapping[str, float]) -> float:
    return scores.get(_item_id(item), 0) or 0


def is_high_value(score: float) -> bool:
    """Whether the opportunity badge / priority group applies."""
    return (score or 0) >= PRIORITY_THRESHOLD


def should_insert_separator(
    ordered_items: Sequence[Any],
    scores:        Mapping[str, float],
    index:         int,
) -> bool:
    """
    True exactly when items[index] is priority and items[index + 1] is not.
    Never true for the last index or for an index outside the list.
    """
    if index < 0 or index >= len(ordered_items) - 1:
        return False
    return (
        is_high_value(score_of(ordered_items[index], scores))
        and not is_high_value(score_of(ordered_items[index + 1], scores))
    )


def separator_flags(
    ordered_items: Sequence[Any],
    scores:        Mapping[str, float],
) -> List[bool]:
    return [
        should_insert_separator(ordered_items, scores, i)
        for i in range(len(ordered_items))
    ]


def sort_by_priority(
    conversations: Iterable[Conversation],
    scores:        Mapping[str, float],
) -> List[Conversation]:
    """
    Priority conversations first, then regular ones; each group newest
    first by last message time. Stable for equal timestamps.
    """
    return sorted(
        conversations,
        key=lambda c: (
            0 if is_high_value(score_of(c, scores)) else 1,
            -(c.last_message_timestamp_ms or 0),
        ),
    )
