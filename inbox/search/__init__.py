"""
inbox/search — message keyword filter and search result assembly.
"""

from inbox.search.keyword_filter import filter_by_keyword, normalize_query
from inbox.search.result_assembler import (
    UNKNOWN_CONVERSATION,
    UNKNOWN_SENDER,
    UNKNOWN_USER,
    GROUP_CHAT,
    assemble_search_results,
    conversation_display_name,
    conversation_photo_url,
    other_participant_id,
)

__all__ = [
    "UNKNOWN_CONVERSATION",
    "UNKNOWN_SENDER",
    "UNKNOWN_USER",
    "GROUP_CHAT",
    "assemble_search_results",
    "conversation_display_name",
    "conversation_photo_url",
    "filter_by_keyword",
    "normalize_query",
    "other_participant_id",
]
