"""
tests/test_config.py
inbox_config.json load/save and repair.
"""

import json

from inbox.config import CONFIG_FILENAME, DEFAULT_CONFIG, ensure_config, load_config, save_config


class TestConfig:

    def test_defaults_when_missing(self, tmp_path):
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_partial_file_merged_over_defaults(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"current_user_id": "u1"}), encoding="utf-8")
        config = load_config(tmp_path)
        assert config["current_user_id"] == "u1"
        assert config["db_path"] == DEFAULT_CONFIG["db_path"]

    def test_corrupt_file_falls_back(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("{oops", encoding="utf-8")
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_save_then_load(self, tmp_path):
        config = dict(DEFAULT_CONFIG, api_port=9001)
        path = save_config(config, tmp_path)
        assert path.name == CONFIG_FILENAME
        assert load_config(tmp_path)["api_port"] == 9001

    def test_ensure_repairs_unknown_sort(self, tmp_path):
        save_config(dict(DEFAULT_CONFIG, faq_default_sort="popularity"), tmp_path)
        assert ensure_config(tmp_path)["faq_default_sort"] == "recent"

    def test_ensure_normalizes_sort_case(self, tmp_path):
        save_config(dict(DEFAULT_CONFIG, faq_default_sort="Usage"), tmp_path)
        assert ensure_config(tmp_path)["faq_default_sort"] == "usage"
