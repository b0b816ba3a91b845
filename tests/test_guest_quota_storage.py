"""
Tests for the guest usage key-value stores.
"""

import json
import shutil
import tempfile
from pathlib import Path

from app.guest_quota.storage import InMemoryStore, JsonFileStore


class TestInMemoryStore:

    def test_read_write_delete(self):
        store = InMemoryStore()
        assert store.read("a") is None

        store.write("a", "1")
        assert store.read("a") == "1"
        assert store.keys() == ["a"]

        store.delete("a")
        store.delete("a")
        assert store.read("a") is None

    def test_prune(self):
        store = InMemoryStore({"keep": "1", "drop:a": "2", "drop:b": "3"})
        assert store.prune(lambda key, value: key.startswith("drop:")) == 2
        assert store.keys() == ["keep"]


class TestJsonFileStore:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.path = self.temp_dir / "nested" / "guest_usage.json"
        self.store = JsonFileStore(self.path)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_missing_file_reads_nothing(self):
        assert self.store.read("guestUsage:abc") is None
        assert self.store.keys() == []

    def test_write_persists_to_disk(self):
        self.store.write("guestUsage:abc", '{"search": {"count": 1, "date": "2026-10-19"}}')

        on_disk = json.loads(self.path.read_text(encoding="utf-8"))
        assert on_disk == {"guestUsage:abc": '{"search": {"count": 1, "date": "2026-10-19"}}'}

        other = JsonFileStore(self.path)
        assert other.read("guestUsage:abc") == on_disk["guestUsage:abc"]

    def test_keys_are_independent(self):
        self.store.write("a", "1")
        self.store.write("b", "2")
        self.store.delete("a")
        assert self.store.read("a") is None
        assert self.store.read("b") == "2"
        assert self.store.keys() == ["b"]

    def test_corrupt_file_reads_nothing(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{broken", encoding="utf-8")
        assert self.store.read("a") is None

        # next write replaces the corrupt file
        self.store.write("a", "1")
        assert self.store.read("a") == "1"

    def test_non_string_values_are_ignored(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({"a": {"count": 1}}), encoding="utf-8")
        assert self.store.read("a") is None

    def test_non_object_file_reads_nothing(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[]", encoding="utf-8")
        assert self.store.read("a") is None

    def test_prune_rewrites_once(self):
        for key in ["guestUsage:a", "guestUsage:b", "other"]:
            self.store.write(key, "{}")

        removed = self.store.prune(lambda key, value: key.startswith("guestUsage:"))

        assert removed == 2
        assert json.loads(self.path.read_text(encoding="utf-8")) == {"other": "{}"}
        assert self.store.prune(lambda key, value: False) == 0
