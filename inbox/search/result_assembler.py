"""
inbox/search/result_assembler.py
Joins raw message hits against conversation and participant lookups.

Missing reference data is not an error: every hit yields a renderable
SearchResult with documented fallback names. Output order always
matches hit order; ranking happens upstream.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from inbox.models.record import Conversation, Message, SearchResult, UserProfile

UNKNOWN_CONVERSATION = 'Unknown Conversation'
UNKNOWN_SENDER       = 'Unknown Sender'
UNKNOWN_USER         = 'Unknown User'
GROUP_CHAT           = 'Group Chat'


def other_participant_id(conversation: Conversation, current_user_id: str) -> str:
    """First participant that is not the current user; the user itself otherwise."""
    for uid in conversation.participant_ids:
        if uid != current_user_id:
            return uid
    return current_user_id


def conversation_display_name(
    conversation:     Conversation,
    participants:     Mapping[str, UserProfile],
    current_user_id:  str,
) -> str:
    if conversation.type == 'group':
        return conversation.group_name or GROUP_CHAT
    other = participants.get(other_participant_id(conversation, current_user_id))
    return (other.display_name if other else '') or UNKNOWN_USER


def conversation_photo_url(
    conversation:     Conversation,
    participants:     Mapping[str, UserProfile],
    current_user_id:  str,
) -> Optional[str]:
    if conversation.type == 'group':
        return conversation.group_photo_url or None
    other = participants.get(other_participant_id(conversation, current_user_id))
    return (other.photo_url if other else None) or None


def assemble_search_results(
    hits:             Iterable[Message],
    conversations:    Iterable[Conversation],
    participants:     Mapping[str, UserProfile],
    current_user_id:  str,
) -> List[SearchResult]:
    """Build one SearchResult per hit, in hit order."""
    by_id: Dict[str, Conversation] = {}
    for conv in conversations:
        by_id.setdefault(conv.id, conv)

    results: List[SearchResult] = []
    for message in hits:
        conversation = by_id.get(message.conversation_id)

        if conversation is None:
            results.append(SearchResult(
                message           = message,
                conversation_id   = message.conversation_id,
                conversation_name = UNKNOWN_CONVERSATION,
                sender_name       = UNKNOWN_SENDER,
            ))
            continue

        sender = participants.get(message.sender_id)
        results.append(SearchResult(
            message           = message,
            conversation_id   = conversation.id,
            conversation_name = conversation_display_name(
                conversation, participants, current_user_id
            ),
            sender_name       = (sender.display_name if sender else '') or UNKNOWN_SENDER,
            sender_photo_url  = (sender.photo_url if sender else None) or None,
        ))

    return results
