"""
inbox/priority — opportunity-score grouping for the conversation list.
"""

from inbox.priority.separator import (
    PRIORITY_THRESHOLD,
    is_high_value,
    separator_flags,
    should_insert_separator,
    sort_by_priority,
)

__all__ = [
    "PRIORITY_THRESHOLD",
    "is_high_value",
    "separator_flags",
    "should_insert_separator",
    "sort_by_priority",
]
