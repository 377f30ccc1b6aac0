"""Shared test helpers: build JSONL session logs entry by entry."""

import os
from pathlib import Path

import orjson

_counter = 0


def _ts(second: int) -> str:
    return f"2026-02-13T12:{second // 60:02d}:{second % 60:02d}.000Z"


def _uuid() -> str:
    global _counter
    _counter += 1
    return f"msg-{_counter:04d}"


def user(text, second: int = 0) -> dict:
    return {
        "type": "user",
        "uuid": _uuid(),
        "timestamp": _ts(second),
        "message": {"role": "user", "content": text},
    }


def tool_result(tool_use_id: str = "toolu_x", second: int = 0) -> dict:
    return {
        "type": "user",
        "uuid": _uuid(),
        "timestamp": _ts(second),
        "message": {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": tool_use_id, "content": "ok"}],
        },
    }


def assistant(*blocks, second: int = 0) -> dict:
    return {
        "type": "assistant",
        "uuid": _uuid(),
        "timestamp": _ts(second),
        "message": {"role": "assistant", "content": list(blocks)},
    }


def text(value: str) -> dict:
    return {"type": "text", "text": value}


def write(file_path, content: str) -> dict:
    return {
        "type": "tool_use", "id": _uuid(), "name": "Write",
        "input": {"file_path": str(file_path), "content": content},
    }


def edit(file_path, old: str, new: str, replace_all: bool = False) -> dict:
    return {
        "type": "tool_use", "id": _uuid(), "name": "Edit",
        "input": {
            "file_path": str(file_path), "old_string": old,
            "new_string": new, "replace_all": replace_all,
        },
    }


def multi_edit(file_path, *edits) -> dict:
    return {
        "type": "tool_use", "id": _uuid(), "name": "MultiEdit",
        "input": {
            "file_path": str(file_path),
            "edits": [
                {"old_string": o, "new_string": n, "replace_all": r} for o, n, r in edits
            ],
        },
    }


def write_session(path: Path, entries: list, mtime: float | None = None) -> Path:
    """Write entries as a JSONL session file, optionally pinning its mtime."""
    path.write_bytes(b"\n".join(orjson.dumps(e) for e in entries) + b"\n")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path
