"""Inbound CLI entry points.
This module exposes commands for consuming a JSONL source and
inspecting or resetting its committed checkpoint offset.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import InboundConfig
from core.constants import OFFSET_CHECKPOINT_KEY
from core.errors import InboundError
from core.logging_config import configure_logging
from core.types import ReceivedRecord
from ingest.checkpoint_store import PropertiesCheckpointStore
from ingest.source import create_jsonl_source, read_committed_offset


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="inbound", description="Checkpointed JSONL source CLI")
    parser.add_argument("--data-root", help="Override INBOUND_DATA_ROOT for this command")
    parser.add_argument("--checkpoint-file", help="Explicit checkpoint properties file path")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_consume_command(subparsers)
    _add_offset_command(subparsers)
    _add_reset_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the inbound CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.data_root)
        configure_logging(config.log_level)
        store = _build_checkpoint_store(config, args.checkpoint_file)
        if args.command == "consume":
            return _run_consume_command(store, args)
        if args.command == "offset":
            return _run_offset_command(store)
        if args.command == "reset":
            return _run_reset_command(store, args)
    except InboundError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(data_root: str | None) -> InboundConfig:
    """Build runtime config with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Resolved runtime config.
    """
    config = InboundConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _build_checkpoint_store(
    config: InboundConfig,
    checkpoint_file: str | None,
) -> PropertiesCheckpointStore:
    if checkpoint_file:
        return PropertiesCheckpointStore(Path(checkpoint_file).expanduser().resolve())
    return PropertiesCheckpointStore(config.checkpoint_path)


def _run_consume_command(store: PropertiesCheckpointStore, args: argparse.Namespace) -> int:
    """Handle consume command.

    Args:
        store: Durable checkpoint store.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    source = create_jsonl_source(Path(args.source).expanduser(), checkpoint_store=store)
    source.drain(_print_record, limit=args.limit)
    return 0


def _run_offset_command(store: PropertiesCheckpointStore) -> int:
    """Handle offset command."""
    print(read_committed_offset(store))
    return 0


def _run_reset_command(store: PropertiesCheckpointStore, args: argparse.Namespace) -> int:
    """Handle reset command."""
    store.put(OFFSET_CHECKPOINT_KEY, str(args.offset))
    print(args.offset)
    return 0


def _print_record(record: ReceivedRecord[Any]) -> None:
    print(json.dumps(record.payload, separators=(",", ":"), ensure_ascii=False), flush=True)


def _non_negative_int(raw_value: str) -> int:
    """Parse a non-negative integer argument."""
    try:
        value = int(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"expected integer, got '{raw_value}'") from error
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected non-negative integer, got {value}")
    return value


def _add_consume_command(subparsers: Any) -> None:
    """Register consume subcommand."""
    parser = subparsers.add_parser(
        "consume",
        help="Print unconsumed JSONL records and commit each offset",
    )
    parser.add_argument("source", help="JSONL source file")
    parser.add_argument(
        "--limit",
        type=_non_negative_int,
        help="Maximum number of records to deliver",
    )


def _add_offset_command(subparsers: Any) -> None:
    """Register offset subcommand."""
    subparsers.add_parser("offset", help="Print the committed checkpoint offset")


def _add_reset_command(subparsers: Any) -> None:
    """Register reset subcommand."""
    parser = subparsers.add_parser("reset", help="Overwrite the committed checkpoint offset")
    parser.add_argument(
        "--offset",
        type=_non_negative_int,
        default=0,
        help="Offset to store, 0 to replay the whole file",
    )
