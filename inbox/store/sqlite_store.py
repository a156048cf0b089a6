"""
inbox/store/sqlite_store.py
Local SQLite copy of the inbox snapshot, plus the mutation backend that
writes to it.

SCHEMA DESIGN NOTES:
- users, conversations, messages, faq_templates mirror backend documents
- list/map fields (participant ids, keywords, archived/deleted flags)
  are stored as JSON text
- opportunity_scores is a plain conversation_id → score table, written
  from upstream and read-only for the engine
- inbox_meta stores import runs and the schema version
- All timestamps stored as INTEGER milliseconds (Unix epoch * 1000)
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from inbox.models.record import (
    Conversation,
    FAQTemplate,
    InboxSnapshot,
    Message,
    UserProfile,
)
from inbox.store.base import InboxBackend

logger = logging.getLogger(__name__)

SCHEMA_VERSION = '1.0'


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")   # Safe concurrent reads
    return conn


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def save_snapshot(
    db_path:   Path,
    snapshot:  InboxSnapshot,
    run_label: str = '',
) -> Path:
    """
    Write the whole snapshot to SQLite.
    Re-importing replaces documents by id.
    Returns db_path.
    """
    db_path = Path(db_path)
    conn = _connect(db_path)
    try:
        create_schema(conn)
        _write_users(conn, list(snapshot.users.values()))
        _write_conversations(conn, snapshot.conversations)
        _write_messages(conn, snapshot.messages)
        _write_faq_templates(conn, snapshot.faq_templates)
        _write_scores(conn, snapshot.opportunity_scores)
        _write_meta(conn, snapshot, run_label)
        conn.commit()
        logger.info(
            f"Snapshot saved → {db_path}\n"
            f"  Users: {len(snapshot.users)} | Conversations: {len(snapshot.conversations)} | "
            f"Messages: {len(snapshot.messages)} | FAQ templates: {len(snapshot.faq_templates)}"
        )
    except Exception as e:
        conn.rollback()
        logger.error(f"Snapshot save failed: {e}")
        raise
    finally:
        conn.close()

    return db_path


def load_snapshot(db_path: Path) -> InboxSnapshot:
    """Read the stored snapshot. A missing database yields an empty snapshot."""
    db_path = Path(db_path)
    if not db_path.exists():
        return InboxSnapshot()

    conn = _connect(db_path)
    try:
        create_schema(conn)
        users = {
            r['uid']: UserProfile(uid=r['uid'], display_name=r['display_name'] or '',
                                  photo_url=r['photo_url'])
            for r in conn.execute("SELECT * FROM users")
        }
        conversations = [_row_to_conversation(r) for r in conn.execute(
            "SELECT * FROM conversations ORDER BY last_message_ts_ms DESC"
        )]
        messages = [_row_to_message(r) for r in conn.execute(
            "SELECT * FROM messages ORDER BY timestamp_ms"
        )]
        templates = [_row_to_faq(r) for r in conn.execute(
            "SELECT * FROM faq_templates ORDER BY rowid"
        )]
        scores = {
            r['conversation_id']: r['score']
            for r in conn.execute("SELECT * FROM opportunity_scores")
        }
    finally:
        conn.close()

    return InboxSnapshot(
        users              = users,
        conversations      = conversations,
        messages           = messages,
        faq_templates      = templates,
        opportunity_scores = scores,
    )


def get_meta(db_path: Path) -> Optional[Dict[str, Any]]:
    """Return the most recent import run, or None."""
    db_path = Path(db_path)
    if not db_path.exists():
        return None
    conn = _connect(db_path)
    try:
        create_schema(conn)
        row = conn.execute("SELECT * FROM inbox_meta ORDER BY id DESC LIMIT 1").fetchone()
    finally:
        conn.close()
    return dict(row) if row else None


# ── SCHEMA ───────────────────────────────────────────────────

def create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS inbox_meta (
            id                  INTEGER PRIMARY KEY AUTOINCREMENT,
            run_at              TEXT    NOT NULL,
            run_label           TEXT,
            schema_version      TEXT    NOT NULL,
            user_count          INTEGER DEFAULT 0,
            conversation_count  INTEGER DEFAULT 0,
            message_count       INTEGER DEFAULT 0,
            faq_count           INTEGER DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS users (
            uid             TEXT PRIMARY KEY,
            display_name    TEXT,
            photo_url       TEXT
        );

        CREATE TABLE IF NOT EXISTS conversations (
            id                  TEXT PRIMARY KEY,
            type                TEXT NOT NULL,
            participant_ids     TEXT NOT NULL,   -- JSON array
            group_name          TEXT,
            group_photo_url     TEXT,
            last_message_ts_ms  INTEGER DEFAULT 0,
            archived_by         TEXT,            -- JSON object
            deleted_by          TEXT             -- JSON object
        );

        CREATE TABLE IF NOT EXISTS messages (
            id                  TEXT PRIMARY KEY,
            conversation_id     TEXT NOT NULL,
            sender_id           TEXT,
            text                TEXT,
            timestamp_ms        INTEGER DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS faq_templates (
            id                  TEXT PRIMARY KEY,
            creator_id          TEXT,
            question            TEXT,
            answer              TEXT,
            keywords            TEXT,            -- JSON array
            category            TEXT DEFAULT 'general',
            use_count           INTEGER DEFAULT 0,
            is_active           INTEGER DEFAULT 1,
            created_at_ms       INTEGER,
            updated_at_ms       INTEGER,
            last_used_at_ms     INTEGER
        );

        CREATE TABLE IF NOT EXISTS opportunity_scores (
            conversation_id     TEXT PRIMARY KEY,
            score               REAL DEFAULT 0.0
        );

        CREATE INDEX IF NOT EXISTS idx_msg_conv ON messages(conversation_id);
        CREATE INDEX IF NOT EXISTS idx_msg_ts   ON messages(timestamp_ms);
        CREATE INDEX IF NOT EXISTS idx_conv_ts  ON conversations(last_message_ts_ms);
        CREATE INDEX IF NOT EXISTS idx_faq_cat  ON faq_templates(category);
    """)


# ── WRITERS ──────────────────────────────────────────────────

def _write_users(conn: sqlite3.Connection, users: List[UserProfile]) -> None:
    if not users:
        return
    conn.executemany("""
        INSERT OR REPLACE INTO users (uid, display_name, photo_url)
        VALUES (?,?,?)
    """, [(u.uid, u.display_name, u.photo_url) for u in users])
    logger.debug(f"Wrote {len(users)} user rows")


def _write_conversations(conn: sqlite3.Connection, conversations: List[Conversation]) -> None:
    if not conversations:
        return
    rows = [
        (
            c.id, c.type, json.dumps(c.participant_ids),
            c.group_name, c.group_photo_url, c.last_message_timestamp_ms,
            json.dumps(c.archived_by), json.dumps(c.deleted_by),
        )
        for c in conversations
    ]
    conn.executemany("""
        INSERT OR REPLACE INTO conversations
        (id, type, participant_ids, group_name, group_photo_url,
         last_message_ts_ms, archived_by, deleted_by)
        VALUES (?,?,?,?,?,?,?,?)
    """, rows)
    logger.debug(f"Wrote {len(rows)} conversation rows")


def _write_messages(conn: sqlite3.Connection, messages: List[Message]) -> None:
    if not messages:
        return
    rows = [
        (m.id, m.conversation_id, m.sender_id, m.text, m.timestamp_ms)
        for m in messages
    ]
    conn.executemany("""
        INSERT OR REPLACE INTO messages
        (id, conversation_id, sender_id, text, timestamp_ms)
        VALUES (?,?,?,?,?)
    """, rows)
    logger.debug(f"Wrote {len(rows)} message rows")


def _write_faq_templates(conn: sqlite3.Connection, templates: List[FAQTemplate]) -> None:
    if not templates:
        return
    rows = [
        (
            t.id, t.creator_id, t.question, t.answer, json.dumps(t.keywords),
            t.category, t.use_count, int(t.is_active),
            t.created_at_ms, t.updated_at_ms, t.last_used_at_ms,
        )
        for t in templates
    ]
    conn.executemany("""
        INSERT OR REPLACE INTO faq_templates
        (id, creator_id, question, answer, keywords, category, use_count,
         is_active, created_at_ms, updated_at_ms, last_used_at_ms)
        VALUES (?,?,?,?,?,?,?,?,?,?,?)
    """, rows)
    logger.debug(f"Wrote {len(rows)} FAQ template rows")


def _write_scores(conn: sqlite3.Connection, scores: Dict[str, float]) -> None:
    if not scores:
        return
    conn.executemany("""
        INSERT OR REPLACE INTO opportunity_scores (conversation_id, score)
        VALUES (?,?)
    """, list(scores.items()))
    logger.debug(f"Wrote {len(scores)} opportunity scores")


def _write_meta(conn: sqlite3.Connection, snapshot: InboxSnapshot, run_label: str) -> None:
    conn.execute("""
        INSERT INTO inbox_meta
        (run_at, run_label, schema_version, user_count,
         conversation_count, message_count, faq_count)
        VALUES (?,?,?,?,?,?,?)
    """, (
        datetime.now().isoformat(),
        run_label or 'snapshot-import',
        SCHEMA_VERSION,
        len(snapshot.users),
        len(snapshot.conversations),
        len(snapshot.messages),
        len(snapshot.faq_templates),
    ))


# ── READERS ──────────────────────────────────────────────────

def _json_field(value: Optional[str], default):
    if not value:
        return default
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return default


def _row_to_conversation(row: sqlite3.Row) -> Conversation:
    return Conversation(
        id                        = row['id'],
        type                      = row['type'],
        participant_ids           = _json_field(row['participant_ids'], []),
        group_name                = row['group_name'],
        group_photo_url           = row['group_photo_url'],
        last_message_timestamp_ms = row['last_message_ts_ms'] or 0,
        archived_by               = _json_field(row['archived_by'], {}),
        deleted_by                = _json_field(row['deleted_by'], {}),
    )


def _row_to_message(row: sqlite3.Row) -> Message:
    return Message(
        id              = row['id'],
        conversation_id = row['conversation_id'],
        sender_id       = row['sender_id'] or '',
        text            = row['text'] or '',
        timestamp_ms    = row['timestamp_ms'] or 0,
    )


def _row_to_faq(row: sqlite3.Row) -> FAQTemplate:
    return FAQTemplate(
        id              = row['id'],
        creator_id      = row['creator_id'] or '',
        question        = row['question'] or '',
        answer          = row['answer'] or '',
        keywords        = _json_field(row['keywords'], []),
        category        = row['category'] or 'general',
        use_count       = row['use_count'] or 0,
        is_active       = bool(row['is_active']),
        created_at_ms   = row['created_at_ms'],
        updated_at_ms   = row['updated_at_ms'],
        last_used_at_ms = row['last_used_at_ms'],
    )


# ── MUTATION BACKEND ─────────────────────────────────────────

class SqliteInboxBackend(InboxBackend):
    """
    InboxBackend over the local snapshot database.
    Each batch runs in one transaction: a missing conversation fails
    the whole batch and nothing is written.
    """

    def __init__(self, db_path: Path = Path('inbox.db')):
        self.db_path = Path(db_path)

    def archive_conversations(self, conversation_ids, user_id, archive):
        self._set_user_flag(conversation_ids, user_id, 'archived_by', archive)

    def delete_conversations(self, conversation_ids, user_id):
        self._set_user_flag(conversation_ids, user_id, 'deleted_by', True)

    def set_faq_active(self, template_id: str, is_active: bool) -> FAQTemplate:
        conn = _connect(self.db_path)
        try:
            create_schema(conn)
            row = conn.execute(
                "SELECT * FROM faq_templates WHERE id = ?", (template_id,)
            ).fetchone()
            if row is None:
                raise KeyError('FAQ template not found')
            conn.execute(
                "UPDATE faq_templates SET is_active = ?, updated_at_ms = ? WHERE id = ?",
                (int(is_active), _now_ms(), template_id),
            )
            conn.commit()
            updated = conn.execute(
                "SELECT * FROM faq_templates WHERE id = ?", (template_id,)
            ).fetchone()
        finally:
            conn.close()
        return _row_to_faq(updated)

    def _set_user_flag(
        self,
        conversation_ids: List[str],
        user_id:          str,
        column:           str,
        value:            bool,
    ) -> None:
        if column not in ('archived_by', 'deleted_by'):
            raise ValueError(f"Unknown flag column: {column}")

        conn = _connect(self.db_path)
        try:
            create_schema(conn)
            for conv_id in conversation_ids:
                row = conn.execute(
                    f"SELECT {column} FROM conversations WHERE id = ?", (conv_id,)
                ).fetchone()
                if row is None:
                    raise KeyError(f"Conversation not found: {conv_id}")
                flags = _json_field(row[column], {})
                flags[user_id] = value
                conn.execute(
                    f"UPDATE conversations SET {column} = ? WHERE id = ?",
                    (json.dumps(flags), conv_id),
                )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.debug(f"Set {column}[{user_id}]={value} on {len(conversation_ids)} conversations")
