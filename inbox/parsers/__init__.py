"""
inbox/parsers — backend export parsers.
"""

from inbox.parsers.snapshot_parser import parse_snapshot, parse_snapshot_file

__all__ = ["parse_snapshot", "parse_snapshot_file"]
