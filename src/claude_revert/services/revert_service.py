"""Session review and revert operations exposed to the transport layer."""

import logging
import os
import threading
from pathlib import Path

from claude_revert.services.change_tracker import ChangeTracker
from claude_revert.services.config_manager import ConfigManager
from claude_revert.services.jsonl_parser import parse_session_file, parse_timestamp
from claude_revert.services.revert_ledger import RevertLedger
from claude_revert.services.session_locator import SessionLocator
from claude_revert.services.turn_builder import build_turns
from claude_revert.types.changes import ParsedChange
from claude_revert.types.errors import (
    ChangeNotFoundError,
    HistoricalSessionError,
    PathNotAllowedError,
    SessionNotFoundError,
)
from claude_revert.types.sessions import SessionMetadata, SessionWithTurns
from claude_revert.utils.message_classifier import NO_MESSAGE, extract_user_text, is_real_user_message
from claude_revert.utils.path_validation import is_path_within, is_sensitive_path

logger = logging.getLogger(__name__)


class RevertService:
    """One project's sessions, diffs and reverts.

    Holds its own locator, ledger and change tracker, so several services
    (different projects, tests) never share state.
    """

    def __init__(
        self,
        cwd: str | None = None,
        projects_root: str | Path | None = None,
        config: ConfigManager | None = None,
        ledger: RevertLedger | None = None,
    ):
        self._config = config or ConfigManager()
        self._max_line_size = self._config.get_int("parser/maxLineSize")
        self._locator = SessionLocator(
            cwd=cwd,
            projects_root=projects_root or self._config.get_path("general/projectsRoot"),
            preview_length=self._config.get_int("general/previewLength"),
            max_line_size=self._max_line_size,
        )
        self._owns_ledger = ledger is None
        self._ledger = ledger or RevertLedger(self._config.get_path("revert/ledgerPath"))
        self._tracker = ChangeTracker(self._ledger, fsync=self._config.get_bool("revert/fsync"))

    @property
    def locator(self) -> SessionLocator:
        return self._locator

    @property
    def tracker(self) -> ChangeTracker:
        return self._tracker

    def init(self) -> None:
        """Load the revert ledger. Call once before serving requests."""
        self._tracker.init()

    def close(self) -> None:
        if self._owns_ledger:
            self._ledger.close()

    # ------------------------------------------------------------------
    # Listings and reconstruction
    # ------------------------------------------------------------------

    def list_sessions(self, cancel: threading.Event | None = None) -> list[SessionMetadata]:
        sessions = self._locator.list_sessions(cancel)
        logger.debug("Found %d sessions in %s", len(sessions), self._locator.project_log_dir)
        return sessions

    def get_session_turns(self, session_id: str) -> SessionWithTurns:
        """Full reconstruction of a session, with diffs attached to each turn."""
        path = self._locator.session_path(session_id)
        mtime = self._mtime(path, session_id)
        is_latest = self._locator.latest_session_id() == session_id

        entries = parse_session_file(path, self._max_line_size)
        turns = build_turns(entries, session_id, is_latest)
        for turn in turns:
            for change in turn.file_changes:
                change.session_file = str(path)
            turn.parsed_changes = self._tracker.process_changes(turn.file_changes)

        first_timestamp = next((e.timestamp for e in entries if e.timestamp), "")
        logger.debug("Session %s: %d turns with file changes", session_id, len(turns))
        return SessionWithTurns(
            session_id=session_id,
            session_file=str(path),
            timestamp=first_timestamp,
            mtime=mtime,
            is_latest=is_latest,
            turns=turns,
        )

    def get_session_changes(self, session_id: str) -> list[ParsedChange]:
        """Every change of a session as one diff batch, newest first."""
        path = self._locator.session_path(session_id)
        is_latest = self._locator.latest_session_id() == session_id

        entries = parse_session_file(path, self._max_line_size)
        first_message = next(
            (extract_user_text(e) for e in entries
             if is_real_user_message(e) and extract_user_text(e) != NO_MESSAGE),
            NO_MESSAGE,
        )

        file_changes = []
        for turn in build_turns(entries, session_id, is_latest):
            file_changes.extend(turn.file_changes)
        for change in file_changes:
            change.session_file = str(path)
            change.user_message = first_message

        parsed = self._tracker.process_changes(file_changes)
        # Stable: changes sharing a timestamp keep their log order
        parsed.sort(key=lambda c: parse_timestamp(c.timestamp), reverse=True)
        return parsed

    def get_latest_changes(self) -> list[ParsedChange]:
        """Changes of the most recently modified session."""
        session_id = self._locator.latest_session_id()
        if session_id is None:
            raise SessionNotFoundError(f"<latest session of {self._locator.project_key}>")
        return self.get_session_changes(session_id)

    # ------------------------------------------------------------------
    # Revert
    # ------------------------------------------------------------------

    def revert_change(self, change_id: str) -> ParsedChange:
        """Revert a change previously returned by this service."""
        change = self._tracker.get_change(change_id)
        if change is None:
            raise ChangeNotFoundError(change_id)
        if change.is_latest_session and self._locator.latest_session_id() != change.session_id:
            # A newer session appeared after this change was loaded
            change.is_latest_session = False
            change.can_revert = False
            raise HistoricalSessionError(change_id, "a newer session exists")
        return self._tracker.revert_change(change)

    # ------------------------------------------------------------------
    # Working-tree access for the review UI
    # ------------------------------------------------------------------

    def file_exists(self, path: str) -> bool:
        return self._checked_path(path).exists()

    def read_file_content(self, path: str) -> str:
        return self._checked_path(path).read_text(encoding="utf-8", errors="replace")

    def _checked_path(self, path: str) -> Path:
        if not path:
            raise PathNotAllowedError(path, "file path is required")
        absolute = os.path.abspath(os.path.join(self._locator.cwd, os.path.expanduser(path)))
        if not is_path_within(absolute, [self._locator.cwd]):
            raise PathNotAllowedError(path)
        if is_sensitive_path(absolute):
            raise PathNotAllowedError(path, "sensitive file")
        return Path(absolute)

    def _mtime(self, path: Path, session_id: str) -> float:
        try:
            return path.stat().st_mtime
        except FileNotFoundError as e:
            raise SessionNotFoundError(session_id) from e
