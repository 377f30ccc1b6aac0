"""Log-entry types for decoded JSONL lines."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class EntryKind(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    OTHER = "other"


@dataclass
class TextBlock:
    text: str


@dataclass
class ToolUseBlock:
    id: str
    name: str
    input: dict = field(default_factory=dict)


@dataclass
class ToolResultBlock:
    tool_use_id: str
    content: Any = ""  # str or list
    is_error: bool = False


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock]


@dataclass
class LogEntry:
    kind: EntryKind
    timestamp: str
    # Either the plain string form or the ordered list of typed blocks
    content: Union[str, list[ContentBlock]] = ""
    uuid: str = ""
    line_number: int = 0

    @property
    def blocks(self) -> list[ContentBlock]:
        return self.content if isinstance(self.content, list) else []

    @property
    def has_block_content(self) -> bool:
        return isinstance(self.content, list)
