"""File-change records: raw requests, diff-annotated changes, ledger rows."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ChangeKind(str, Enum):
    WRITE = "write"
    EDIT = "edit"
    # Only ever assigned to a ParsedChange whose target did not exist
    CREATE = "create"


@dataclass
class EditOperation:
    old_string: str
    new_string: str
    replace_all: bool = False

    def to_dict(self) -> dict:
        return {
            "oldString": self.old_string,
            "newString": self.new_string,
            "replaceAll": self.replace_all,
        }


@dataclass
class FileChange:
    id: str
    timestamp: str
    kind: ChangeKind
    file_path: str
    content: Optional[str] = None
    edits: list[EditOperation] = field(default_factory=list)
    tool_name: str = ""
    # Attribution, filled in by the turn builder / service
    turn_id: str = ""
    session_id: str = ""
    session_file: str = ""
    is_latest_session: bool = False
    user_message: str = ""


@dataclass
class ParsedChange:
    id: str
    timestamp: str
    type: ChangeKind
    file_path: str
    diff: str = ""
    old_content: Optional[str] = None
    new_content: Optional[str] = None
    edits: list[EditOperation] = field(default_factory=list)
    can_revert: bool = False
    error: str = ""
    turn_id: str = ""
    session_id: str = ""
    session_file: str = ""
    is_latest_session: bool = False
    user_message: str = ""

    @property
    def is_creation(self) -> bool:
        return self.type == ChangeKind.CREATE

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "timestamp": self.timestamp,
            "type": self.type.value,
            "filePath": self.file_path,
            "diff": self.diff,
            "oldContent": self.old_content,
            "newContent": self.new_content,
            "canRevert": self.can_revert,
            "sessionId": self.session_id,
            "sessionFile": self.session_file,
            "isLatestSession": self.is_latest_session,
            "userMessage": self.user_message,
            "turnId": self.turn_id,
        }
        if self.edits:
            data["changes"] = [e.to_dict() for e in self.edits]
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class RevertLedgerEntry:
    change_id: str
    reverted_at: float
    file_path: str = ""
