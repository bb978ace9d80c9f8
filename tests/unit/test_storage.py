"""Unit tests for easelcalc/storage.py."""

import json
from pathlib import Path

from easelcalc.storage import JsonFileStore, MemoryStore


class TestMemoryStore:
    def test_get_missing(self) -> None:
        assert MemoryStore().get("k") is None

    def test_set_get(self) -> None:
        store = MemoryStore()
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_initial_data_copied(self) -> None:
        initial = {"k": "v"}
        store = MemoryStore(initial)
        store.set("k", "w")
        assert initial["k"] == "v"


class TestJsonFileStore:
    """Tests for the JSON file store."""

    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        assert JsonFileStore(tmp_path / "state.json").get("k") is None

    def test_set_creates_parents(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "state.json"
        store = JsonFileStore(path)
        store.set("k", "v")
        assert path.exists()
        assert json.loads(path.read_text()) == {"k": "v"}

    def test_keys_are_kept_together(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path / "state.json")
        store.set("a", "1")
        store.set("b", "2")
        assert store.get("a") == "1"
        assert store.get("b") == "2"

    def test_corrupt_file_reads_empty(self, tmp_path: Path) -> None:
        """Test a corrupt file is ignored and then overwritten."""
        path = tmp_path / "state.json"
        path.write_text("{not json")
        store = JsonFileStore(path)
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_non_object_file_reads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("[1, 2]")
        assert JsonFileStore(path).get("k") is None
