"""Unit tests for startup recovery scanning."""

from __future__ import annotations

import json

import pytest

from core.errors import InboundDecodeError, InboundRecoveryError
from ingest.line_source import LineSource
from ingest.recovery import RecoveryScanner
from ingest.staging_buffer import StagingBuffer


def _recover(path, committed_count: int) -> list[object]:
    buffer = StagingBuffer()
    with LineSource(path) as line_source:
        RecoveryScanner(line_source, json.loads).recover(committed_count, buffer)
    payloads: list[object] = []
    while len(buffer):
        payloads.append(buffer.pop().payload)
    return payloads


def test_recover_stages_all_records_without_offset(write_jsonl) -> None:
    """Zero offset should stage every record in file order."""
    path = write_jsonl(['{"a":1}', '{"a":2}', '{"a":3}'])

    payloads = _recover(path, 0)

    assert payloads == [{"a": 1}, {"a": 2}, {"a": 3}]


def test_recover_skips_committed_records(write_jsonl) -> None:
    """Committed records should not be staged again."""
    path = write_jsonl(['{"a":1}', '{"a":2}', '{"a":3}'])

    payloads = _recover(path, 2)

    assert payloads == [{"a": 3}]


def test_recover_ignores_blank_lines_when_skipping(write_jsonl) -> None:
    """Blank lines should not count toward the committed offset."""
    path = write_jsonl(['{"a":1}', "", "   ", '{"a":2}', "", '{"a":3}'])

    payloads = _recover(path, 1)

    assert payloads == [{"a": 2}, {"a": 3}]


def test_recover_at_end_of_file_stages_nothing(write_jsonl) -> None:
    """An offset equal to the record count should leave nothing staged."""
    path = write_jsonl(['{"a":1}', '{"a":2}'])

    payloads = _recover(path, 2)

    assert payloads == []


def test_recover_raises_when_offset_exceeds_file(write_jsonl) -> None:
    """Offsets beyond the file's records should fail fast."""
    path = write_jsonl(['{"a":1}'])

    with pytest.raises(InboundRecoveryError):
        _recover(path, 5)

    assert path.exists()


def test_recover_raises_for_negative_offset(write_jsonl) -> None:
    """Negative offsets should be rejected."""
    path = write_jsonl(['{"a":1}'])

    with pytest.raises(InboundRecoveryError):
        _recover(path, -1)

    assert path.exists()


def test_recover_raises_for_malformed_line(fixtures_root) -> None:
    """A malformed remaining line should abort recovery with its line number."""
    path = fixtures_root / "bad_records.jsonl"

    with pytest.raises(InboundDecodeError, match="bad_records.jsonl:2"):
        _recover(path, 0)

    assert path.exists()


def test_recover_does_not_decode_skipped_lines(fixtures_root) -> None:
    """Skipped lines are replayed as reads only, never decoded."""
    path = fixtures_root / "bad_records.jsonl"

    with pytest.raises(InboundDecodeError):
        _recover(path, 1)

    assert _recover(path, 2) == []


def test_stream_records_physical_line_numbers(write_jsonl) -> None:
    """Staged records should remember their physical line numbers."""
    path = write_jsonl(["", '{"a":1}', "", '{"a":2}'])
    buffer = StagingBuffer()

    with LineSource(path) as line_source:
        RecoveryScanner(line_source, json.loads).stream(buffer)

    assert [buffer.pop().line_number, buffer.pop().line_number] == [2, 4]


def test_recover_accepts_byte_order_mark_on_first_line(tmp_path) -> None:
    """Files saved with a UTF-8 BOM should decode their first record."""
    path = tmp_path / "records.jsonl"
    path.write_bytes(b'\xef\xbb\xbf{"a":1}\n{"a":2}\n')

    payloads = _recover(path, 0)

    assert payloads == [{"a": 1}, {"a": 2}]
