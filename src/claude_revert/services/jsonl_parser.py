"""Streaming JSONL decoder for Claude Code session files.

Every line is an independent unit of failure: the log is appended to by a
live process and may end in a truncated line, so a line that does not decode
to a JSON object is skipped and the scan carries on.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import orjson

from claude_revert.types.entries import (
    ContentBlock,
    EntryKind,
    LogEntry,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_session_file(file_path: str | Path, max_line_size: int = MAX_LINE_SIZE) -> list[LogEntry]:
    """Parse an entire JSONL session file into a list of LogEntry objects."""
    return list(stream_session_file(file_path, max_line_size))


def stream_session_file(file_path: str | Path, max_line_size: int = MAX_LINE_SIZE) -> Iterator[LogEntry]:
    """Stream-decode a JSONL session file, yielding LogEntry objects.

    Malformed lines are logged and skipped.
    Lines exceeding max_line_size are skipped with a warning.
    """
    path = Path(file_path)
    if not path.exists():
        logger.warning("Session file not found: %s", path)
        return

    line_num = 0
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line_num += 1
            line = line.strip()
            if not line:
                continue

            if len(line) > max_line_size:
                logger.warning(
                    "Line %d in %s exceeds %d bytes, skipping",
                    line_num, path.name, max_line_size,
                )
                continue

            entry = decode_line(line, line_num)
            if entry is None:
                logger.debug("Skipping undecodable line %d in %s", line_num, path.name)
                continue
            yield entry


def decode_line(line: str | bytes, line_number: int = 0) -> LogEntry | None:
    """Decode one JSONL line, or return None if it is not a JSON object."""
    try:
        raw = orjson.loads(line)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(raw, dict):
        return None
    return _decode_entry(raw, line_number)


def _decode_entry(raw: dict, line_number: int) -> LogEntry:
    type_str = raw.get("type", "")
    try:
        kind = EntryKind(type_str)
    except ValueError:
        kind = EntryKind.OTHER

    message = raw.get("message")
    if not isinstance(message, dict):
        message = {}

    uuid = raw.get("uuid")
    return LogEntry(
        kind=kind,
        timestamp=_timestamp_string(raw.get("timestamp")),
        content=_decode_content(message.get("content")),
        uuid=uuid if isinstance(uuid, str) else "",
        line_number=line_number,
    )


def _decode_content(content) -> str | list[ContentBlock]:
    """Decode message content into its string form or a list of known blocks.

    Blocks with unknown tags (thinking, image, ...) are dropped.
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    blocks: list[ContentBlock] = []
    for block in content:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text":
            text = block.get("text")
            blocks.append(TextBlock(text=text if isinstance(text, str) else ""))
        elif block_type == "tool_use":
            name = block.get("name")
            tool_input = block.get("input")
            blocks.append(ToolUseBlock(
                id=str(block.get("id", "")),
                name=name if isinstance(name, str) else "",
                input=tool_input if isinstance(tool_input, dict) else {},
            ))
        elif block_type == "tool_result":
            blocks.append(ToolResultBlock(
                tool_use_id=str(block.get("tool_use_id", "")),
                content=block.get("content", ""),
                is_error=bool(block.get("is_error", False)),
            ))
    return blocks


def _timestamp_string(ts_value) -> str:
    if isinstance(ts_value, str):
        return ts_value
    if isinstance(ts_value, (int, float)) and not isinstance(ts_value, bool):
        return parse_timestamp(ts_value).isoformat()
    return ""


def parse_timestamp(ts_value) -> datetime:
    """Parse a timestamp from various formats into an aware UTC datetime.

    Unparseable or missing values sort first (datetime.min).
    """
    if isinstance(ts_value, (int, float)) and not isinstance(ts_value, bool):
        try:
            return datetime.fromtimestamp(
                ts_value / 1000 if ts_value > 1e12 else ts_value, tz=timezone.utc,
            )
        except (ValueError, OSError, OverflowError):
            return _EPOCH
    if isinstance(ts_value, str) and ts_value:
        try:
            # ISO 8601 format: "2026-02-13T12:00:00.000Z"
            parsed = datetime.fromisoformat(ts_value.replace("Z", "+00:00"))
        except ValueError:
            try:
                return parse_timestamp(float(ts_value))
            except ValueError:
                return _EPOCH
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return _EPOCH
