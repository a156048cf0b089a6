"""
inbox/cli.py
Command-line interface for the inbox engine.

USAGE:
  python -m inbox.cli --import export.json --db inbox.db
  python -m inbox.cli --db inbox.db --user u1 --search "pricing"
  python -m inbox.cli --db inbox.db --faq --category pricing --sort usage
  python -m inbox.cli --db inbox.db --user u1 --conversations
  python -m inbox.cli --db inbox.db --analytics

EXAMPLES:
  # Load an export, then show the priority list
  python -m inbox.cli --import ./exports/inbox.json --user creator1 --conversations
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

from inbox.api import InboxAPI
from inbox.config import ensure_config
from inbox.faq.filter_sort import ALL_CATEGORIES, SORT_OPTIONS

logger = logging.getLogger(__name__)

GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'

SEPARATOR_LINE = '─' * 48


def main(argv=None):
    config = ensure_config()

    parser = argparse.ArgumentParser(
        prog        = 'inbox',
        description = 'Inbox engine — search, FAQ library and priority list from a local snapshot',
        formatter_class = argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--db',
        default = Path(config['db_path']),
        type    = Path,
        help    = f"SQLite database path (default: {config['db_path']})",
    )
    parser.add_argument(
        '--import', '-i',
        dest    = 'import_path',
        type    = Path,
        help    = 'Snapshot JSON export to load into the database first',
    )
    parser.add_argument(
        '--user', '-u',
        default = config['current_user_id'],
        help    = 'Signed-in user id the views are computed for',
    )

    views = parser.add_mutually_exclusive_group()
    views.add_argument('--search', '-s', metavar='QUERY', help='Search message text')
    views.add_argument('--faq', action='store_true', help='List FAQ templates')
    views.add_argument('--conversations', '-c', action='store_true',
                       help='List conversations, priority first')
    views.add_argument('--analytics', '-a', action='store_true', help='FAQ usage analytics')

    parser.add_argument('--query', '-q', default='', help='FAQ text filter (with --faq)')
    parser.add_argument('--category', default=ALL_CATEGORIES, help='FAQ category filter (with --faq)')
    parser.add_argument('--sort', choices=SORT_OPTIONS, default=config['faq_default_sort'],
                        help='FAQ sort order (with --faq)')
    parser.add_argument('--archived', action='store_true',
                        help='Include archived conversations (with --conversations)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    api = InboxAPI(
        db_path          = args.db,
        current_user_id  = args.user,
        faq_default_sort = args.sort,
    )

    # ── IMPORT ───────────────────────────────────────────────
    if args.import_path:
        if not args.import_path.exists():
            _print(f"{RED}Error: Snapshot not found: {args.import_path}{RESET}")
            sys.exit(1)
        _step(f"Importing {args.import_path}...")
        t0 = time.time()
        try:
            summary = api.import_snapshot(args.import_path)
        except ValueError as e:
            _print(f"{RED}Error: {e}{RESET}")
            sys.exit(1)
        _ok(
            f"{summary['conversations']} conversations, {summary['messages']} messages, "
            f"{summary['faq_templates']} FAQ templates in {_elapsed(t0)}"
        )

    if args.search is None and not (args.faq or args.conversations or args.analytics):
        if not args.import_path:
            parser.print_help()
        return

    if not args.db.exists() or api.get_meta() is None:
        _print(f"{RED}Error: No imported data in {args.db}{RESET}")
        _print("Import a snapshot first with --import export.json")
        sys.exit(1)

    # ── VIEWS ────────────────────────────────────────────────
    if args.search is not None:
        _print_search(api, args.search)
    elif args.faq:
        _print_faq(api, args.query, args.category, args.sort)
    elif args.conversations:
        _print_conversations(api, args.archived)
    elif args.analytics:
        _print_analytics(api)


# ── VIEW PRINTERS ────────────────────────────────────────────

def _print_search(api: InboxAPI, query: str):
    results = api.search_messages(query)
    if not results:
        _print(f"{YELLOW}No messages match {query!r}{RESET}")
        return
    _print(f"\n{BOLD}{len(results)} result(s) for {query!r}{RESET}")
    for r in results:
        _print(f"  {CYAN}{r['conversation_name']}{RESET} · {r['sender_name']} · {_ts(r['timestamp_ms'])}")
        _print(f"    {_clip(r['text'])}")


def _print_faq(api: InboxAPI, query: str, category: str, sort: str):
    templates = api.list_faq(query=query, category=category, sort=sort)
    if not templates:
        _print(f"{YELLOW}No FAQ templates match{RESET}")
        return
    _print(f"\n{BOLD}{len(templates)} FAQ template(s) — sorted by {sort}{RESET}")
    for t in templates:
        state = f"{GREEN}active{RESET}" if t['is_active'] else f"{YELLOW}inactive{RESET}"
        _print(f"  [{t['category']:<12}] {t['use_count']:>5} uses  {state:<17} {_clip(t['question'])}")


def _print_conversations(api: InboxAPI, include_archived: bool):
    rows = api.list_conversations(include_archived=include_archived)
    if not rows:
        _print(f"{YELLOW}No conversations{RESET}")
        return
    _print(f"\n{BOLD}{len(rows)} conversation(s){RESET}")
    for row in rows:
        star = '★' if row['is_high_value'] else ' '
        tag  = ' (archived)' if row['archived'] else ''
        _print(f"  {star} {row['score']:>5.0f}  {row['name']}{tag}  · {_ts(row['last_message_timestamp_ms'])}")
        if row['show_separator']:
            _print(f"    {SEPARATOR_LINE}")


def _print_analytics(api: InboxAPI):
    data = api.faq_analytics()
    _print(f"\n{BOLD}FAQ analytics{RESET}")
    _print(f"  Templates      : {data['total_templates']:,} ({data['active_templates']:,} active)")
    _print(f"  Auto responses : {data['total_auto_responses']:,}")
    _print(f"  Time saved     : {data['time_saved_minutes']:,} min")
    if data['usage_by_category']:
        _print(f"\n  Usage by category:")
        for category, count in sorted(data['usage_by_category'].items(), key=lambda kv: -kv[1]):
            _print(f"    {category:<14} {count:,}")
    if data['top_faqs']:
        _print(f"\n  Top FAQs:")
        for i, faq in enumerate(data['top_faqs'], 1):
            _print(f"    {i:>2}. {faq['use_count']:>5}  {_clip(faq['question'])}")


# ── PRINT HELPERS ────────────────────────────────────────────

def _step(msg):  _print(f"  {CYAN}→{RESET} {msg}")
def _ok(msg):    _print(f"  {GREEN}✓{RESET} {msg}")
def _print(msg): print(msg)

def _clip(text: str, width: int = 70) -> str:
    text = (text or '').replace('\n', ' ')
    return text if len(text) <= width else text[:width - 1] + '…'

def _ts(ms: int) -> str:
    if not ms:
        return '—'
    return datetime.fromtimestamp(ms / 1000).strftime('%Y-%m-%d %H:%M')

def _elapsed(t0: float) -> str:
    s = time.time() - t0
    return f"{s:.1f}s" if s < 60 else f"{int(s//60)}m {int(s%60)}s"


if __name__ == '__main__':
    main()
