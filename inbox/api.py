"""
inbox/api.py
─────────────────────────────────────────────────────────────────────────────
Inbox engine — Dual-mode API layer

TWO USAGE MODES:
  1. Importable module:
         from inbox.api import InboxAPI
         api = InboxAPI(db_path=Path("inbox.db"), current_user_id="u1")
         hits  = api.search_messages("pricing")
         convs = api.list_conversations()

  2. FastAPI HTTP server (local dashboards via fetch()):
         python -m inbox.api                      # default: port 8765
         python -m inbox.api --port 9000 --user u1
         uvicorn inbox.api:app --port 8765

ENDPOINTS:
  GET  /health                   — server status and db existence
  GET  /search?q=                — message search results with display names
  GET  /conversations            — priority-ordered list with separator flags
  GET  /faq?q=&category=&sort=   — filtered, sorted FAQ library
  GET  /faq/analytics            — usage totals, top FAQs, per-category usage
  POST /faq/{id}/toggle          — flip a template's active flag
  POST /conversations/archive    — batch archive / unarchive
  POST /conversations/delete     — batch delete for the current user
  POST /import                   — load a snapshot export into the database

ERRORS:
  ValueError → 400, KeyError (missing document) → 404, anything else → 500.

CORS: localhost-only (127.0.0.1 / ::1). Not exposed to network by default.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from inbox import __version__
from inbox.config import ensure_config
from inbox.faq.analytics import analytics_to_dict, build_faq_analytics
from inbox.faq.filter_sort import ALL_CATEGORIES, filter_and_sort, normalize_sort
from inbox.models.record import Conversation, InboxSnapshot
from inbox.mutations import MutationResult, batch_archive, batch_delete, toggle_faq_active
from inbox.parsers.snapshot_parser import parse_snapshot_file
from inbox.priority.separator import is_high_value, score_of, separator_flags, sort_by_priority
from inbox.search.keyword_filter import filter_by_keyword, normalize_query
from inbox.search.result_assembler import (
    assemble_search_results,
    conversation_display_name,
    conversation_photo_url,
)
from inbox.store.sqlite_store import SqliteInboxBackend, get_meta, load_snapshot, save_snapshot
from inbox.subscription import SnapshotFeed

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS
# ═══════════════════════════════════════════════════════════════════════════

class InboxAPI:
    """
    Pure-Python API over inbox.db for one signed-in user.
    No HTTP layer required — import and call directly.

    Every call reads a fresh snapshot from the database. Mutations go
    through SqliteInboxBackend and raise the underlying error on failure.
    FAQ changes are published on `faq_feed` for live listeners.
    """

    def __init__(
        self,
        db_path:          Path = Path("inbox.db"),
        current_user_id:  str  = "",
        faq_default_sort: str  = "recent",
    ):
        self.db_path          = Path(db_path)
        self.current_user_id  = current_user_id
        self.faq_default_sort = normalize_sort(faq_default_sort)
        self.backend          = SqliteInboxBackend(self.db_path)
        self.faq_feed         = SnapshotFeed(name="faq_templates")

    # ── INTERNAL ──────────────────────────────────────────────────────────

    def _snapshot(self) -> InboxSnapshot:
        return load_snapshot(self.db_path)

    def _visible(self, conv: Conversation, include_archived: bool) -> bool:
        uid = self.current_user_id
        if uid and uid not in conv.participant_ids:
            return False
        if conv.deleted_by.get(uid):
            return False
        if not include_archived and conv.archived_by.get(uid):
            return False
        return True

    @staticmethod
    def _settle(result: MutationResult) -> Any:
        if not result.ok:
            raise result.error
        return result.value

    # ── QUERY: SEARCH ─────────────────────────────────────────────────────

    def search_messages(self, query: str, conversation_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Search message text across the user's conversations, newest first.
        A blank query is "not searching" and returns no results.
        """
        if not normalize_query(query):
            return []

        snapshot = self._snapshot()
        visible = [c for c in snapshot.conversations if self._visible(c, include_archived=True)]
        visible_ids = {c.id for c in visible}

        messages = [m for m in snapshot.messages if m.conversation_id in visible_ids]
        if conversation_id:
            messages = [m for m in messages if m.conversation_id == conversation_id]
        messages.sort(key=lambda m: m.timestamp_ms, reverse=True)

        hits = filter_by_keyword(messages, query)
        results = assemble_search_results(hits, visible, snapshot.users, self.current_user_id)
        logger.debug(f"Search matched {len(results)} of {len(messages)} messages")

        return [
            {
                "message_id":        r.message.id,
                "conversation_id":   r.conversation_id,
                "conversation_name": r.conversation_name,
                "sender_id":         r.message.sender_id,
                "sender_name":       r.sender_name,
                "sender_photo_url":  r.sender_photo_url,
                "text":              r.message.text,
                "timestamp_ms":      r.message.timestamp_ms,
            }
            for r in results
        ]

    # ── QUERY: CONVERSATIONS ──────────────────────────────────────────────

    def list_conversations(self, include_archived: bool = False) -> List[Dict[str, Any]]:
        """
        Conversations priority-first, each group newest first, with the
        separator flag set on the last priority row.
        """
        snapshot = self._snapshot()
        scores   = snapshot.opportunity_scores
        visible  = [c for c in snapshot.conversations if self._visible(c, include_archived)]
        ordered  = sort_by_priority(visible, scores)
        flags    = separator_flags(ordered, scores)

        rows = []
        for conv, show_separator in zip(ordered, flags):
            score = score_of(conv, scores)
            rows.append({
                "id":                        conv.id,
                "type":                      conv.type,
                "name":                      conversation_display_name(conv, snapshot.users, self.current_user_id),
                "photo_url":                 conversation_photo_url(conv, snapshot.users, self.current_user_id),
                "participant_ids":           list(conv.participant_ids),
                "last_message_timestamp_ms": conv.last_message_timestamp_ms,
                "archived":                  bool(conv.archived_by.get(self.current_user_id)),
                "score":                     score,
                "is_high_value":             is_high_value(score),
                "show_separator":            show_separator,
            })
        return rows

    # ── QUERY: FAQ ────────────────────────────────────────────────────────

    def list_faq(
        self,
        query:    str = "",
        category: str = ALL_CATEGORIES,
        sort:     Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        templates = self._snapshot().faq_templates
        ordered = filter_and_sort(templates, query, category, sort or self.faq_default_sort)
        return [asdict(t) for t in ordered]

    def faq_analytics(self) -> Dict[str, Any]:
        return analytics_to_dict(build_faq_analytics(self._snapshot().faq_templates))

    def get_meta(self) -> Optional[Dict[str, Any]]:
        """Return the most recent import run, or None."""
        return get_meta(self.db_path)

    # ── MUTATIONS ─────────────────────────────────────────────────────────

    def toggle_faq(self, template_id: str) -> Dict[str, Any]:
        templates = self._snapshot().faq_templates
        updated, result = toggle_faq_active(self.backend, templates, template_id)
        server_copy = self._settle(result)
        self.faq_feed.publish(updated)
        return asdict(server_copy)

    def archive(self, conversation_ids: List[str], archive: bool = True) -> Dict[str, Any]:
        ids = self._settle(batch_archive(self.backend, conversation_ids, self.current_user_id, archive))
        return {"status": "ok", "archived": archive, "count": len(ids), "conversation_ids": ids}

    def delete(self, conversation_ids: List[str]) -> Dict[str, Any]:
        ids = self._settle(batch_delete(self.backend, conversation_ids, self.current_user_id))
        return {"status": "ok", "count": len(ids), "conversation_ids": ids}

    # ── IMPORT ────────────────────────────────────────────────────────────

    def import_snapshot(self, path: Path, run_label: str = "") -> Dict[str, Any]:
        """
        Parse a snapshot export and write it to the database.
        Raises ValueError if the path is not a readable JSON snapshot.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ValueError(f"Snapshot file does not exist: {path}")
        if not path.is_file():
            raise ValueError(f"Snapshot path is not a file: {path}")

        logger.info(f"Import started | file={path.name} | db={self.db_path}")
        snapshot = parse_snapshot_file(path)
        save_snapshot(self.db_path, snapshot, run_label=run_label or path.name)
        self.faq_feed.publish(snapshot.faq_templates)

        summary = {
            "status":        "ok",
            "users":         len(snapshot.users),
            "conversations": len(snapshot.conversations),
            "messages":      len(snapshot.messages),
            "faq_templates": len(snapshot.faq_templates),
            "scores":        len(snapshot.opportunity_scores),
            "db_path":       str(self.db_path),
        }
        logger.info(f"Import complete: {summary}")
        return summary


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# ═══════════════════════════════════════════════════════════════════════════

class BatchRequest(BaseModel):
    conversation_ids: List[str] = []
    archive:          bool = True


class ImportRequest(BaseModel):
    path:      str
    run_label: str = ""


def _http_error(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, KeyError):
        detail = str(exc.args[0]) if exc.args else "Not found"
        return HTTPException(status_code=404, detail=detail)
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    logger.error(f"{action} failed: {exc}", exc_info=True)
    return HTTPException(status_code=500, detail=f"{action} failed: {exc}")


def build_app(
    db_path:         Optional[Path] = None,
    current_user_id: Optional[str]  = None,
) -> FastAPI:
    """
    Build the FastAPI application. Unset arguments come from inbox_config.json.
    """
    config = ensure_config()
    _api = InboxAPI(
        db_path          = Path(db_path or config["db_path"]),
        current_user_id  = current_user_id if current_user_id is not None else config["current_user_id"],
        faq_default_sort = config["faq_default_sort"],
    )

    _app = FastAPI(
        title       = "Inbox API",
        description = "Local inbox engine: search, FAQ library, batch actions, priority list",
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = None,
    )
    _app.state.inbox = _api

    # CORS: only allow localhost origins
    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:8765",
            "http://127.0.0.1",
            "http://127.0.0.1:8765",
            "null",   # file:// origin
        ],
        allow_methods     = ["GET", "POST", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    # ── ENDPOINTS ───────────────────────────────────────────────────────

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":    "ok",
            "db_exists": _api.db_path.exists(),
            "db_path":   str(_api.db_path),
            "user_id":   _api.current_user_id,
            "version":   __version__,
        }

    @_app.get("/search", summary="Search message text")
    def search(
        q:               str           = Query("", description="Case-insensitive substring"),
        conversation_id: Optional[str] = Query(None, description="Limit to one conversation"),
    ):
        try:
            data = _api.search_messages(q, conversation_id=conversation_id)
        except Exception as exc:
            raise _http_error(exc, "Search")
        return {"count": len(data), "results": data}

    @_app.get("/conversations", summary="Priority-ordered conversation list")
    def conversations(include_archived: bool = Query(False)):
        try:
            data = _api.list_conversations(include_archived=include_archived)
        except Exception as exc:
            raise _http_error(exc, "Conversation list")
        return {"count": len(data), "conversations": data}

    @_app.get("/faq", summary="FAQ library")
    def faq(
        q:        str           = Query(""),
        category: str           = Query(ALL_CATEGORIES),
        sort:     Optional[str] = Query(None, description="recent, usage or alphabetical"),
    ):
        try:
            data = _api.list_faq(query=q, category=category, sort=sort)
        except Exception as exc:
            raise _http_error(exc, "FAQ list")
        return {"count": len(data), "templates": data}

    @_app.get("/faq/analytics", summary="FAQ usage analytics")
    def faq_analytics():
        try:
            return _api.faq_analytics()
        except Exception as exc:
            raise _http_error(exc, "FAQ analytics")

    @_app.post("/faq/{template_id}/toggle", summary="Toggle FAQ active flag")
    def toggle_faq(template_id: str):
        try:
            return _api.toggle_faq(template_id)
        except Exception as exc:
            raise _http_error(exc, "FAQ toggle")

    @_app.post("/conversations/archive", summary="Batch archive or unarchive")
    def archive(req: BatchRequest):
        try:
            return _api.archive(req.conversation_ids, archive=req.archive)
        except Exception as exc:
            raise _http_error(exc, "Archive")

    @_app.post("/conversations/delete", summary="Batch delete")
    def delete(req: BatchRequest):
        try:
            return _api.delete(req.conversation_ids)
        except Exception as exc:
            raise _http_error(exc, "Delete")

    @_app.post("/import", summary="Import a snapshot export")
    def import_snapshot(req: ImportRequest):
        try:
            return _api.import_snapshot(Path(req.path), run_label=req.run_label)
        except Exception as exc:
            raise _http_error(exc, "Import")

    @_app.get("/meta", summary="Last import metadata")
    def meta():
        data = _api.get_meta()
        if data is None:
            raise HTTPException(status_code=404, detail="No import metadata found — import a snapshot first.")
        return data

    return _app


# Module-level app instance, served by `uvicorn inbox.api:app`
app = build_app()


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT: python -m inbox.api
# ═══════════════════════════════════════════════════════════════════════════

def main():
    config = ensure_config()

    parser = argparse.ArgumentParser(
        prog        = "inbox-api",
        description = "Inbox API Server — serves local dashboards on localhost",
    )
    parser.add_argument("--port", type=int, default=config["api_port"],
                        help=f"Port to bind (default: {config['api_port']})")
    parser.add_argument("--db",   type=str, default=config["db_path"],
                        help=f"Path to the inbox database (default: {config['db_path']})")
    parser.add_argument("--user", type=str, default=config["current_user_id"],
                        help="Signed-in user id the views are computed for")
    parser.add_argument("--host", type=str, default=config["api_host"],
                        help="Host to bind — DO NOT change to 0.0.0.0 on shared networks")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    server_app = build_app(db_path=Path(args.db), current_user_id=args.user)

    print(f"""
+--------------------------------------------------+
|   Inbox API Server v{__version__}
+--------------------------------------------------+
|  Local:    http://{args.host}:{args.port}
|  DB:       {args.db}
|  User:     {args.user or '(none)'}
|  Docs:     http://{args.host}:{args.port}/docs
+--------------------------------------------------+
""")

    uvicorn.run(
        server_app,
        host      = args.host,
        port      = args.port,
        log_level = "info",
    )


if __name__ == "__main__":
    main()
