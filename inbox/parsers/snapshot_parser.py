"""
inbox/parsers/snapshot_parser.py
Parses a JSON export of the backend collections into an InboxSnapshot.

Expected top-level keys (all optional):
  users, conversations, messages, faq_templates, opportunity_scores

Each collection is either a list of documents or an object keyed by
document id. Field names follow the backend (camelCase); snake_case
aliases are accepted too. Timestamps may be epoch milliseconds, ISO-8601
strings, or {"seconds": ..., "nanoseconds": ...} objects.

Bad documents are logged and skipped; one malformed record never aborts
the whole import. Only ids and counts are logged, never message text.
"""

import json
import math
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from inbox.models.record import (
    Conversation,
    FAQTemplate,
    InboxSnapshot,
    Message,
    UserProfile,
    validate_conversation,
)

logger = logging.getLogger(__name__)

BOM_UTF8 = b'\xef\xbb\xbf'
MAX_TEXT_LEN = 50000


def parse_snapshot_file(path: Path) -> InboxSnapshot:
    """
    Read and parse one snapshot file.
    Raises ValueError when the file is not a JSON object.
    """
    raw = Path(path).read_bytes()
    if raw.startswith(BOM_UTF8):
        raw = raw[len(BOM_UTF8):]
    try:
        data = json.loads(raw.decode('utf-8', errors='replace'))
    except json.JSONDecodeError as e:
        raise ValueError(f"Snapshot {Path(path).name} is not valid JSON: {e}") from e

    snapshot = parse_snapshot(data)
    logger.info(
        f"Parsed snapshot {Path(path).name}: "
        f"{len(snapshot.users)} users | {len(snapshot.conversations)} conversations | "
        f"{len(snapshot.messages)} messages | {len(snapshot.faq_templates)} FAQ templates"
    )
    return snapshot


def parse_snapshot(data: Dict[str, Any]) -> InboxSnapshot:
    if not isinstance(data, dict):
        raise ValueError("Snapshot root must be a JSON object")

    users: Dict[str, UserProfile] = {}
    for doc in _documents(data.get('users')):
        user = _parse_user(doc)
        if user and user.uid not in users:
            users[user.uid] = user

    conversations = _dedup(_parse_conversation(d) for d in _documents(data.get('conversations')))
    messages      = _dedup(_parse_message(d) for d in _documents(data.get('messages')))
    templates     = _dedup(_parse_faq(d) for d in _documents(
        data.get('faq_templates', data.get('faqTemplates'))
    ))

    messages.sort(key=lambda m: m.timestamp_ms)

    return InboxSnapshot(
        users              = users,
        conversations      = conversations,
        messages           = messages,
        faq_templates      = templates,
        opportunity_scores = _parse_scores(
            data.get('opportunity_scores', data.get('opportunityScores'))
        ),
    )


# ── DOCUMENT PARSERS ─────────────────────────────────────────

def _parse_user(doc: Dict[str, Any]) -> Optional[UserProfile]:
    uid = _text(_get(doc, 'uid', 'id'))
    if not uid:
        logger.debug("Skipped user without uid")
        return None
    return UserProfile(
        uid          = uid,
        display_name = _text(_get(doc, 'displayName', 'display_name')),
        photo_url    = _text(_get(doc, 'photoURL', 'photo_url')) or None,
    )


def _parse_conversation(doc: Dict[str, Any]) -> Optional[Conversation]:
    try:
        conv = Conversation(
            id                        = _text(_get(doc, 'id')),
            type                      = _text(_get(doc, 'type')) or 'direct',
            participant_ids           = [_text(p) for p in _get(doc, 'participantIds', 'participant_ids') or []],
            group_name                = _text(_get(doc, 'groupName', 'group_name')) or None,
            group_photo_url           = _text(_get(doc, 'groupPhotoURL', 'group_photo_url')) or None,
            last_message_timestamp_ms = _to_ms(_get(
                doc, 'lastMessageTimestamp', 'last_message_timestamp_ms'
            )) or 0,
            archived_by               = _flag_map(_get(doc, 'archivedBy', 'archived_by')),
            deleted_by                = _flag_map(_get(doc, 'deletedBy', 'deleted_by')),
        )
        if not conv.id:
            raise ValueError("missing id")
        validate_conversation(conv)
        return conv
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Skipped conversation document: {e}")
        return None


def _parse_message(doc: Dict[str, Any]) -> Optional[Message]:
    msg_id  = _text(_get(doc, 'id'))
    conv_id = _text(_get(doc, 'conversationId', 'conversation_id'))
    if not msg_id or not conv_id:
        logger.debug("Skipped message without id or conversationId")
        return None
    try:
        return Message(
            id              = msg_id,
            conversation_id = conv_id,
            sender_id       = _text(_get(doc, 'senderId', 'sender_id')),
            text            = _sanitize(_text(_get(doc, 'text'))),
            timestamp_ms    = _to_ms(_get(doc, 'timestamp', 'timestamp_ms')) or 0,
        )
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Skipped message {msg_id}: {e}")
        return None


def _parse_faq(doc: Dict[str, Any]) -> Optional[FAQTemplate]:
    faq_id = _text(_get(doc, 'id'))
    if not faq_id:
        logger.debug("Skipped FAQ template without id")
        return None
    try:
        return FAQTemplate(
            id              = faq_id,
            question        = _text(_get(doc, 'question')),
            answer          = _text(_get(doc, 'answer')),
            keywords        = [_text(k) for k in _get(doc, 'keywords') or [] if k],
            category        = _text(_get(doc, 'category')) or 'general',
            use_count       = int(_get(doc, 'useCount', 'use_count') or 0),
            is_active       = bool(_get(doc, 'isActive', 'is_active', default=True)),
            creator_id      = _text(_get(doc, 'creatorId', 'creator_id')),
            created_at_ms   = _to_ms(_get(doc, 'createdAt', 'created_at_ms')),
            updated_at_ms   = _to_ms(_get(doc, 'updatedAt', 'updated_at_ms')),
            last_used_at_ms = _to_ms(_get(doc, 'lastUsedAt', 'last_used_at_ms')),
        )
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(f"Skipped FAQ template {faq_id}: {e}")
        return None


def _parse_scores(raw: Any) -> Dict[str, float]:
    scores: Dict[str, float] = {}
    if not isinstance(raw, dict):
        return scores
    for conv_id, value in raw.items():
        try:
            scores[str(conv_id)] = float(value)
        except (TypeError, ValueError):
            logger.debug(f"Skipped non-numeric opportunity score for {conv_id}")
    return scores


# ── HELPERS ──────────────────────────────────────────────────

def _documents(raw: Any) -> Iterable[Dict[str, Any]]:
    """Accept a list of docs or an {id: doc} mapping."""
    if raw is None:
        return []
    if isinstance(raw, dict):
        docs = []
        for doc_id, doc in raw.items():
            if isinstance(doc, dict):
                docs.append({'id': doc_id, **doc})
        return docs
    if isinstance(raw, list):
        return [d for d in raw if isinstance(d, dict)]
    logger.warning(f"Ignored collection of type {type(raw).__name__}")
    return []


def _dedup(records: Iterable[Any]) -> List[Any]:
    seen: Set[str] = set()
    out: List[Any] = []
    for rec in records:
        if rec is None or rec.id in seen:
            continue
        seen.add(rec.id)
        out.append(rec)
    return out


def _get(doc: Dict[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in doc and doc[name] is not None:
            return doc[name]
    return default


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value)


def _flag_map(raw: Any) -> Dict[str, bool]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): bool(v) for k, v in raw.items()}


def _to_ms(value: Any) -> Optional[int]:
    """Normalise the supported timestamp shapes to epoch milliseconds."""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"non-finite timestamp {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, dict):
        seconds = value.get('seconds', value.get('_seconds'))
        nanos   = value.get('nanoseconds', value.get('_nanoseconds', 0)) or 0
        if seconds is None:
            raise ValueError(f"timestamp object without seconds: {value!r}")
        return int(seconds) * 1000 + int(nanos) // 1_000_000
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        dt = datetime.fromisoformat(text.replace('Z', '+00:00'))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)
    raise TypeError(f"unsupported timestamp {value!r}")


def _sanitize(text: str, max_len: int = MAX_TEXT_LEN) -> str:
    if not text:
        return ''
    cleaned = ''.join(c for c in text if c.isprintable() or c in '\n\r\t')
    return cleaned[:max_len]
