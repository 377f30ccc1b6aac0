"""Session and conversation-turn types."""

from dataclasses import dataclass, field

from claude_revert.types.changes import FileChange, ParsedChange


@dataclass
class SessionMetadata:
    session_id: str
    session_file: str
    timestamp: str
    mtime: float
    user_message: str = "No message"
    file_count: int = 0
    is_latest: bool = False

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "sessionFile": self.session_file,
            "timestamp": self.timestamp,
            "mtime": int(self.mtime * 1000),
            "userMessage": self.user_message,
            "fileCount": self.file_count,
            "isLatest": self.is_latest,
        }


@dataclass
class ConversationTurn:
    id: str
    timestamp: str
    user_message: str
    assistant_message: str = ""
    file_changes: list[FileChange] = field(default_factory=list)
    parsed_changes: list[ParsedChange] = field(default_factory=list)
    is_latest_session: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "userMessage": self.user_message,
            "assistantMessage": self.assistant_message,
            "fileCount": len(self.file_changes),
            "parsedChanges": [c.to_dict() for c in self.parsed_changes],
            "isLatestSession": self.is_latest_session,
        }


@dataclass
class SessionWithTurns:
    session_id: str
    session_file: str
    timestamp: str
    mtime: float
    is_latest: bool
    turns: list[ConversationTurn] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "sessionFile": self.session_file,
            "timestamp": self.timestamp,
            "mtime": int(self.mtime * 1000),
            "isLatest": self.is_latest,
            "turns": [t.to_dict() for t in self.turns],
        }
