"""Unit tests for ingest checkpoint storage."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.errors import InboundCheckpointError
from ingest.checkpoint_store import InMemoryCheckpointStore, PropertiesCheckpointStore


def test_in_memory_store_returns_none_for_missing_key() -> None:
    """Absent keys should read as None."""
    store = InMemoryCheckpointStore()

    value = store.get("offsetLine")

    assert value is None


def test_in_memory_store_overwrites_values() -> None:
    """Later puts should replace earlier values."""
    store = InMemoryCheckpointStore()
    store.put("offsetLine", "1")
    store.put("offsetLine", "2")

    value = store.get("offsetLine")

    assert value == "2"


def test_properties_store_creates_parent_directory(tmp_path: Path) -> None:
    """Store construction should create the checkpoint directory."""
    properties_path = tmp_path / "meta" / "metadata.properties"

    PropertiesCheckpointStore(properties_path)

    assert properties_path.parent.is_dir()


def test_properties_store_survives_new_instance(tmp_path: Path) -> None:
    """Values should be readable by a fresh store on the same file."""
    properties_path = tmp_path / "metadata.properties"
    PropertiesCheckpointStore(properties_path).put("offsetLine", "3")

    value = PropertiesCheckpointStore(properties_path).get("offsetLine")

    assert value == "3"


def test_properties_store_preserves_other_keys(tmp_path: Path) -> None:
    """Writing one key should keep unrelated properties."""
    properties_path = tmp_path / "metadata.properties"
    properties_path.write_text("# header\nother=value\n", encoding="utf-8")
    store = PropertiesCheckpointStore(properties_path)

    store.put("offsetLine", "4")

    assert store.get("other") == "value" and store.get("offsetLine") == "4"


def test_properties_store_writes_key_value_lines(tmp_path: Path) -> None:
    """Persisted file should use key=value properties lines."""
    properties_path = tmp_path / "metadata.properties"
    store = PropertiesCheckpointStore(properties_path)

    store.put("offsetLine", "7")

    assert "offsetLine=7" in properties_path.read_text(encoding="utf-8").splitlines()


def test_properties_store_leaves_no_temp_files(tmp_path: Path) -> None:
    """Atomic writes should not leave temporary files behind."""
    store = PropertiesCheckpointStore(tmp_path / "metadata.properties")

    store.put("offsetLine", "1")
    store.put("offsetLine", "2")

    assert [path.name for path in tmp_path.iterdir()] == ["metadata.properties"]


def test_properties_store_raises_for_malformed_line(tmp_path: Path) -> None:
    """Malformed properties lines should fail loudly."""
    properties_path = tmp_path / "metadata.properties"
    properties_path.write_text("offsetLine\n", encoding="utf-8")
    store = PropertiesCheckpointStore(properties_path)

    with pytest.raises(InboundCheckpointError):
        store.get("offsetLine")

    assert properties_path.exists()


def test_properties_store_removes_temp_file_after_failed_write(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Failed writes should not leave temporary files in the checkpoint directory."""
    store = PropertiesCheckpointStore(tmp_path / "metadata.properties")

    def _failing_fsync(file_descriptor: int) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(os, "fsync", _failing_fsync)
    for _ in range(3):
        with pytest.raises(InboundCheckpointError):
            store.put("offsetLine", "1")

    assert list(tmp_path.iterdir()) == []
