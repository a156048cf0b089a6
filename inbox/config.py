"""
inbox/config.py
Local settings. Persists to inbox_config.json in the project root and
is merged over DEFAULT_CONFIG, so a partial file is fine.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from inbox.faq.filter_sort import SORT_OPTIONS, SORT_RECENT

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "inbox_config.json"

DEFAULT_CONFIG = {
    "db_path": "inbox.db",
    "current_user_id": "",
    "faq_default_sort": SORT_RECENT,
    "api_host": "127.0.0.1",
    "api_port": 8765,
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from inbox_config.json. Returns defaults if missing or corrupt."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("config root must be an object")
            return {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError, ValueError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to inbox_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def ensure_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load config and repair values the engine cannot use.
    An unknown FAQ sort falls back to 'recent'.
    """
    config = load_config(project_root)
    sort = str(config.get("faq_default_sort") or "").strip().lower()
    if sort not in SORT_OPTIONS:
        logger.warning(f"Unknown faq_default_sort {config.get('faq_default_sort')!r}, using {SORT_RECENT!r}")
        sort = SORT_RECENT
    config["faq_default_sort"] = sort
    return config
