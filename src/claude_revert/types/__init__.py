"""Type definitions for Claude Revert."""

from claude_revert.types.entries import (
    EntryKind,
    LogEntry,
    TextBlock,
    ToolUseBlock,
    ToolResultBlock,
    ContentBlock,
)
from claude_revert.types.changes import (
    ChangeKind,
    EditOperation,
    FileChange,
    ParsedChange,
    RevertLedgerEntry,
)
from claude_revert.types.sessions import (
    SessionMetadata,
    ConversationTurn,
    SessionWithTurns,
)
from claude_revert.types.errors import (
    ClaudeRevertError,
    SessionNotFoundError,
    ChangeNotFoundError,
    ScanCancelledError,
    PathNotAllowedError,
    RevertRejectedError,
    AlreadyRevertedError,
    HistoricalSessionError,
    UnrevertableChangeError,
    RevertFailedError,
)

__all__ = [
    "EntryKind",
    "LogEntry",
    "TextBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "ContentBlock",
    "ChangeKind",
    "EditOperation",
    "FileChange",
    "ParsedChange",
    "RevertLedgerEntry",
    "SessionMetadata",
    "ConversationTurn",
    "SessionWithTurns",
    "ClaudeRevertError",
    "SessionNotFoundError",
    "ChangeNotFoundError",
    "ScanCancelledError",
    "PathNotAllowedError",
    "RevertRejectedError",
    "AlreadyRevertedError",
    "HistoricalSessionError",
    "UnrevertableChangeError",
    "RevertFailedError",
]
