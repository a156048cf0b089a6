"""
inbox/store — local snapshot storage and the mutation backend interface.
"""

from inbox.store.base import InboxBackend
from inbox.store.sqlite_store import (
    SqliteInboxBackend,
    get_meta,
    load_snapshot,
    save_snapshot,
)

__all__ = [
    "InboxBackend",
    "SqliteInboxBackend",
    "get_meta",
    "load_snapshot",
    "save_snapshot",
]
