"""Classify decoded log entries for turn building and metadata scanning."""

from claude_revert.types.entries import (
    EntryKind,
    LogEntry,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)

NO_MESSAGE = "No message"

# Tools whose invocations mutate files on disk
FILE_MUTATING_TOOLS = frozenset({"Write", "Edit", "MultiEdit"})


def is_tool_result_echo(entry: LogEntry) -> bool:
    """Is this user entry the harness feeding tool output back to the agent?

    Key logic:
    - string content → always a real human message
    - list content with any non-empty text block → real human message
    - list content with a tool_result block and no text → echo
    """
    if entry.kind != EntryKind.USER or not entry.has_block_content:
        return False
    if any(isinstance(b, TextBlock) and b.text.strip() for b in entry.blocks):
        return False
    return any(isinstance(b, ToolResultBlock) for b in entry.blocks)


def is_real_user_message(entry: LogEntry) -> bool:
    """Quick check: is this a genuine human-typed message?"""
    return entry.kind == EntryKind.USER and not is_tool_result_echo(entry)


def extract_user_text(entry: LogEntry) -> str:
    """Full text of a human message, or NO_MESSAGE when it has none."""
    if isinstance(entry.content, str):
        return entry.content.strip() or NO_MESSAGE
    for block in entry.blocks:
        if isinstance(block, TextBlock) and block.text.strip():
            return block.text
    return NO_MESSAGE


def extract_assistant_text(entry: LogEntry) -> str:
    """All non-empty text blocks of an entry, joined with blank lines."""
    parts = [
        b.text.strip() for b in entry.blocks
        if isinstance(b, TextBlock) and b.text.strip()
    ]
    return "\n\n".join(parts)


def count_file_mutations(entry: LogEntry) -> int:
    """Number of file-mutating tool invocations in an assistant entry."""
    if entry.kind != EntryKind.ASSISTANT:
        return 0
    return sum(
        1 for b in entry.blocks
        if isinstance(b, ToolUseBlock) and b.name in FILE_MUTATING_TOOLS
    )
