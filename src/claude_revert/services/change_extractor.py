"""Normalize Write / Edit / MultiEdit tool invocations into FileChange records."""

import logging

from claude_revert.types.changes import ChangeKind, EditOperation, FileChange
from claude_revert.types.entries import LogEntry, ToolUseBlock

logger = logging.getLogger(__name__)


def extract_file_changes(entry: LogEntry, turn_id: str) -> list[FileChange]:
    """Extract every file-mutating tool invocation from an assistant entry.

    Change ids combine the turn id, the entry timestamp, the tool name and a
    1-based position among the entry's tool_use blocks, so several
    invocations sharing one timestamp still get distinct ids.
    """
    changes = []
    position = 0
    for block in entry.blocks:
        if not isinstance(block, ToolUseBlock):
            continue
        position += 1
        change_id = f"{turn_id}-{entry.timestamp}-{block.name.lower()}-{position}"
        change = tool_use_to_change(block, change_id, entry.timestamp)
        if change is None:
            continue
        change.turn_id = turn_id
        changes.append(change)
    return changes


def tool_use_to_change(block: ToolUseBlock, change_id: str, timestamp: str) -> FileChange | None:
    """Convert one tool invocation, or return None if it is not a usable file change."""
    tool_input = block.input
    if block.name == "Write":
        content = tool_input.get("content")
        change = FileChange(
            id=change_id,
            timestamp=timestamp,
            kind=ChangeKind.WRITE,
            file_path=_file_path(tool_input),
            content=content if isinstance(content, str) else "",
        )
    elif block.name == "Edit":
        change = FileChange(
            id=change_id,
            timestamp=timestamp,
            kind=ChangeKind.EDIT,
            file_path=_file_path(tool_input),
            edits=[_edit_operation(tool_input)],
        )
    elif block.name == "MultiEdit":
        raw_edits = tool_input.get("edits")
        edits = [
            _edit_operation(e) for e in (raw_edits if isinstance(raw_edits, list) else [])
            if isinstance(e, dict)
        ]
        change = FileChange(
            id=change_id,
            timestamp=timestamp,
            kind=ChangeKind.EDIT,
            file_path=_file_path(tool_input),
            edits=edits,
        )
    else:
        return None

    if not change.file_path:
        logger.debug("Dropping %s invocation without a file path (%s)", block.name, change_id)
        return None
    change.tool_name = block.name
    return change


def _file_path(tool_input: dict) -> str:
    path = tool_input.get("file_path")
    return path if isinstance(path, str) else ""


def _edit_operation(raw: dict) -> EditOperation:
    old = raw.get("old_string")
    new = raw.get("new_string")
    return EditOperation(
        old_string=old if isinstance(old, str) else "",
        new_string=new if isinstance(new, str) else "",
        replace_all=bool(raw.get("replace_all", False)),
    )
