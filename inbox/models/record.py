"""
inbox/models/record.py
Shared dataclass schema. Parsers, the engine, the store and the API
all use these types. Data only, plus the one structural check on
conversations.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional

CONVERSATION_TYPES = ('direct', 'group')

# conversation id → opportunity score in [0, 100]; computed upstream
OpportunityScoreMap = Mapping[str, float]


@dataclass
class Message:
    """Read-only copy of a backend message."""
    id:               str
    conversation_id:  str
    sender_id:        str
    text:             str
    timestamp_ms:     int = 0


@dataclass
class Conversation:
    """Direct or group conversation as seen by the current user."""
    id:                         str
    type:                       str          # direct / group
    participant_ids:            List[str]
    group_name:                 Optional[str] = None
    group_photo_url:            Optional[str] = None
    last_message_timestamp_ms:  int           = 0
    archived_by:                Dict[str, bool] = field(default_factory=dict)
    deleted_by:                 Dict[str, bool] = field(default_factory=dict)


@dataclass
class UserProfile:
    uid:           str
    display_name:  str           = ''
    photo_url:     Optional[str] = None


@dataclass
class SearchResult:
    """Display-ready search hit. Built per search session, never stored."""
    message:            Message
    conversation_id:    str
    conversation_name:  str
    sender_name:        str
    sender_photo_url:   Optional[str] = None


@dataclass
class FAQTemplate:
    """Stored question/answer pair used for automatic FAQ responses."""
    id:               str
    question:         str
    answer:           str
    keywords:         List[str]     = field(default_factory=list)
    category:         str           = 'general'
    use_count:        int           = 0
    is_active:        bool          = True
    creator_id:       str           = ''
    created_at_ms:    Optional[int] = None
    updated_at_ms:    Optional[int] = None
    last_used_at_ms:  Optional[int] = None


@dataclass(frozen=True)
class SelectionState:
    """Snapshot of a list's multi-select state."""
    is_selection_mode:  bool            = False
    selected_ids:       FrozenSet[str]  = frozenset()


@dataclass
class InboxSnapshot:
    """Everything one screen needs, materialised in memory."""
    users:               Dict[str, UserProfile]  = field(default_factory=dict)
    conversations:       List[Conversation]      = field(default_factory=list)
    messages:            List[Message]           = field(default_factory=list)
    faq_templates:       List[FAQTemplate]       = field(default_factory=list)
    opportunity_scores:  Dict[str, float]        = field(default_factory=dict)


def validate_conversation(conv: Conversation) -> None:
    """Raise ValueError if the conversation breaks its structural invariant."""
    if conv.type not in CONVERSATION_TYPES:
        raise ValueError(f"Conversation {conv.id}: unknown type {conv.type!r}")
    if not conv.participant_ids:
        raise ValueError(f"Conversation {conv.id}: no participants")
    if conv.type == 'direct' and len(conv.participant_ids) != 2:
        raise ValueError(
            f"Conversation {conv.id}: direct conversation needs exactly 2 "
            f"participants, got {len(conv.participant_ids)}"
        )
