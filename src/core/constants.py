"""Core constants used across inbound modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".inbound")
DEFAULT_CHECKPOINT_FILE_NAME = "metadata.properties"
OFFSET_CHECKPOINT_KEY = "offsetLine"
COMPONENT_TYPE = "jsonl:inbound-channel-adapter"
SOURCE_TEXT_ENCODING = "utf-8"
DEFAULT_LOG_LEVEL = "info"
LOG_LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}
PROPERTIES_COMMENT_PREFIXES = ("#", "!")
PROPERTIES_HEADER = "# jsonl inbound checkpoint metadata"
UTF8_BYTE_ORDER_MARK = b"\xef\xbb\xbf"
