"""Locate a project's session logs and summarize them for listings."""

import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

from claude_revert.services.jsonl_parser import MAX_LINE_SIZE, stream_session_file
from claude_revert.types.entries import EntryKind
from claude_revert.types.errors import ScanCancelledError, SessionNotFoundError
from claude_revert.types.sessions import SessionMetadata
from claude_revert.utils.message_classifier import (
    NO_MESSAGE,
    count_file_mutations,
    extract_user_text,
    is_real_user_message,
)
from claude_revert.utils.path_codec import current_project_key, session_id_from_filename
from claude_revert.utils.path_validation import is_valid_session_id

logger = logging.getLogger(__name__)

CLAUDE_PROJECTS_DIR = Path.home() / ".claude" / "projects"

# Display truncation for the first user message in listings
PREVIEW_LENGTH = 100


def select_latest(sessions: list[SessionMetadata]) -> list[SessionMetadata]:
    """Sort newest-first by mtime and flag exactly the first one as latest.

    The sort is stable: sessions with equal mtimes keep their incoming order.
    """
    ordered = sorted(sessions, key=lambda s: s.mtime, reverse=True)
    for index, session in enumerate(ordered):
        session.is_latest = index == 0
    return ordered


def session_metadata(
    file_path: str | Path,
    preview_length: int = PREVIEW_LENGTH,
    max_line_size: int = MAX_LINE_SIZE,
) -> SessionMetadata | None:
    """Summarize a session file in one streaming pass, without building turns.

    Returns None if the file cannot be read.
    """
    path = Path(file_path)
    try:
        mtime = path.stat().st_mtime
    except OSError:
        logger.exception("Error extracting metadata from %s", path)
        return None

    timestamp = ""
    user_message = ""
    file_count = 0
    try:
        for entry in stream_session_file(path, max_line_size):
            if not timestamp and entry.timestamp:
                timestamp = entry.timestamp
            if not user_message and is_real_user_message(entry):
                text = extract_user_text(entry)
                if text != NO_MESSAGE:
                    user_message = text[:preview_length]
            if entry.kind == EntryKind.ASSISTANT:
                file_count += count_file_mutations(entry)
    except OSError:
        logger.exception("Error extracting metadata from %s", path)
        return None

    return SessionMetadata(
        session_id=session_id_from_filename(path.name),
        session_file=str(path),
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        mtime=mtime,
        user_message=user_message or NO_MESSAGE,
        file_count=file_count,
    )


class SessionLocator:
    """Maps a working directory to its Claude log directory and session files."""

    def __init__(
        self,
        cwd: str | None = None,
        projects_root: str | Path | None = None,
        preview_length: int = PREVIEW_LENGTH,
        max_line_size: int = MAX_LINE_SIZE,
    ):
        self._cwd = cwd if cwd is not None else os.getcwd()
        self._projects_root = Path(projects_root) if projects_root else CLAUDE_PROJECTS_DIR
        self._project_key = current_project_key(self._cwd)
        self._preview_length = preview_length
        self._max_line_size = max_line_size

    @property
    def cwd(self) -> str:
        return self._cwd

    @property
    def project_key(self) -> str:
        return self._project_key

    @property
    def project_log_dir(self) -> Path:
        return self._projects_root / self._project_key

    def list_session_files(self) -> list[Path]:
        """All *.jsonl files of the current project, sorted by name."""
        project_dir = self.project_log_dir
        if not project_dir.is_dir():
            logger.info("No log directory found for current project path: %s", self._project_key)
            return []
        return sorted(p for p in project_dir.glob("*.jsonl") if p.is_file())

    def list_sessions(self, cancel: threading.Event | None = None) -> list[SessionMetadata]:
        """Metadata for every session, newest first, with the latest flagged.

        If ``cancel`` is set while scanning, ScanCancelledError is raised and
        the partial results are discarded.
        """
        sessions = []
        for session_file in self.list_session_files():
            if cancel is not None and cancel.is_set():
                raise ScanCancelledError(f"Session scan of {self.project_log_dir} cancelled")
            metadata = session_metadata(session_file, self._preview_length, self._max_line_size)
            if metadata is not None:
                sessions.append(metadata)
        return select_latest(sessions)

    def latest_session_id(self) -> str | None:
        """Id of the most recently modified session, from stat() alone."""
        stamped = []
        for session_file in self.list_session_files():
            try:
                stamped.append((session_file, session_file.stat().st_mtime))
            except OSError:
                continue
        if not stamped:
            return None
        # max() keeps the first of equal keys, matching select_latest's stable sort
        newest = max(stamped, key=lambda item: item[1])
        return session_id_from_filename(newest[0].name)

    def session_path(self, session_id: str) -> Path:
        """Resolve a session id to its log file, or raise SessionNotFoundError."""
        if not is_valid_session_id(session_id):
            raise SessionNotFoundError(session_id)
        path = self.project_log_dir / f"{session_id}.jsonl"
        if not path.is_file():
            raise SessionNotFoundError(session_id)
        return path
