"""
inbox/models — shared dataclass schema.
"""

from inbox.models.record import (
    Conversation,
    FAQTemplate,
    InboxSnapshot,
    Message,
    SearchResult,
    SelectionState,
    UserProfile,
    validate_conversation,
)

__all__ = [
    "Conversation",
    "FAQTemplate",
    "InboxSnapshot",
    "Message",
    "SearchResult",
    "SelectionState",
    "UserProfile",
    "validate_conversation",
]
