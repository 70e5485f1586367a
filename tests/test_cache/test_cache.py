"""Tests for the fingerprint cache."""

import json
import logging

from nbpress.cache import SCHEMA_VERSION, CacheStore


class TestCacheStore:
    """Tests for CacheStore class."""

    def test_missing_file_is_empty(self, tmp_path):
        cache = CacheStore(tmp_path / "cache.json")

        assert cache.load() == {}
        assert not cache.should_skip("a.ipynb", "abc")

    def test_record_flush_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "cache.json"
        cache = CacheStore(path)
        cache.load()
        cache.record("a.ipynb", "abc")
        cache.flush()

        reloaded = CacheStore(path)
        reloaded.load()

        assert reloaded.should_skip("a.ipynb", "abc")
        assert not reloaded.should_skip("a.ipynb", "abd")
        assert not reloaded.should_skip("b.ipynb", "abc")
        assert json.loads(path.read_text()) == {"a.ipynb": f"{SCHEMA_VERSION}:abc"}

    def test_values_are_version_tagged(self, tmp_path):
        cache = CacheStore(tmp_path / "c.json", schema_version="7")
        cache.record("a.ipynb", "abc")

        assert cache.entries() == {"a.ipynb": "7:abc"}

    def test_schema_version_bump_invalidates_entries(self, tmp_path):
        path = tmp_path / "c.json"
        old = CacheStore(path, schema_version="1")
        old.record("a.ipynb", "abc")
        old.flush()

        new = CacheStore(path, schema_version="2")
        new.load()

        assert not new.should_skip("a.ipynb", "abc")

    def test_untagged_legacy_values_miss(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps({"a.ipynb": "abc"}))
        cache = CacheStore(path)
        cache.load()

        assert not cache.should_skip("a.ipynb", "abc")

    def test_corrupt_file_degrades_to_empty(self, tmp_path, caplog):
        path = tmp_path / "c.json"
        path.write_text("{ not json")
        cache = CacheStore(path)

        with caplog.at_level(logging.WARNING):
            assert cache.load() == {}

        assert "Failed to load cache" in caplog.text

    def test_non_object_degrades_to_empty(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text("[1, 2, 3]")

        assert CacheStore(path).load() == {}

    def test_non_string_values_are_dropped(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps({"a.ipynb": 5, "b.ipynb": f"{SCHEMA_VERSION}:x"}))

        assert CacheStore(path).load() == {"b.ipynb": f"{SCHEMA_VERSION}:x"}

    def test_forget_and_clear(self, tmp_path):
        cache = CacheStore(tmp_path / "c.json")
        cache.record("a.ipynb", "1")
        cache.record("b.ipynb", "2")

        cache.forget("a.ipynb")
        cache.forget("missing.ipynb")
        assert list(cache.entries()) == ["b.ipynb"]

        cache.clear()
        assert cache.entries() == {}

    def test_flush_leaves_no_temp_files(self, tmp_path):
        cache = CacheStore(tmp_path / "c.json")
        cache.record("a.ipynb", "1")
        cache.flush()
        cache.flush()

        assert [p.name for p in tmp_path.iterdir()] == ["c.json"]
