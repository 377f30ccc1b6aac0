"""State machine that groups LogEntries into ConversationTurns."""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable

from claude_revert.services.change_extractor import extract_file_changes
from claude_revert.types.entries import EntryKind, LogEntry
from claude_revert.types.sessions import ConversationTurn
from claude_revert.utils.message_classifier import (
    NO_MESSAGE,
    extract_assistant_text,
    extract_user_text,
    is_tool_result_echo,
)

logger = logging.getLogger(__name__)


def build_turns(
    entries: Iterable[LogEntry],
    session_id: str,
    is_latest_session: bool = False,
) -> list[ConversationTurn]:
    """Build conversation turns from decoded log entries.

    State machine transitions (state = the open turn, if any):
    - Real user message -> emit the open turn if it changed files, open a new one
    - Tool-result echo (user entry with only tool_result blocks) -> no transition
    - Assistant message with block content -> append file changes and text to
      the open turn, synthesizing a "No message" turn if none is open yet
    - Anything else -> skip

    Only turns that produced at least one file change are returned.
    """
    builder = _TurnBuilder(session_id, is_latest_session)
    for entry in entries:
        builder.process(entry)
    builder.flush()
    return builder.turns


class _TurnBuilder:
    """Internal state machine for turn building."""

    def __init__(self, session_id: str, is_latest_session: bool):
        self.turns: list[ConversationTurn] = []
        self._session_id = session_id
        self._is_latest = is_latest_session
        self._current: ConversationTurn | None = None
        self._turn_counter = 0
        # Change ids already handed out in the open turn
        self._change_ids: Counter[str] = Counter()

    def process(self, entry: LogEntry) -> None:
        """Process a single entry through the state machine."""
        if entry.kind == EntryKind.USER:
            if not is_tool_result_echo(entry):
                self._emit_current()
                self._open_turn(entry.timestamp, extract_user_text(entry))
            return

        if entry.kind == EntryKind.ASSISTANT and entry.has_block_content:
            self._absorb_assistant(entry)

    def flush(self) -> None:
        """Emit the final open turn."""
        self._emit_current()

    def _next_id(self) -> str:
        self._turn_counter += 1
        return f"{self._session_id}-turn-{self._turn_counter}"

    def _open_turn(self, timestamp: str, user_message: str) -> ConversationTurn:
        turn = ConversationTurn(
            id=self._next_id(),
            timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
            user_message=user_message,
            is_latest_session=self._is_latest,
        )
        self._change_ids = Counter()
        logger.debug("Opened %s: %.50s", turn.id, user_message)
        self._current = turn
        return turn

    def _emit_current(self) -> None:
        turn = self._current
        self._current = None
        if turn is not None and turn.file_changes:
            self.turns.append(turn)

    def _absorb_assistant(self, entry: LogEntry) -> None:
        turn = self._current
        text = extract_assistant_text(entry)

        if turn is None:
            # The turn id must exist before extraction since change ids embed it
            changes = extract_file_changes(entry, f"{self._session_id}-turn-{self._turn_counter + 1}")
            if not changes and not text:
                return
            turn = self._open_turn(entry.timestamp, NO_MESSAGE)
        else:
            changes = extract_file_changes(entry, turn.id)

        for change in changes:
            self._change_ids[change.id] += 1
            seen = self._change_ids[change.id]
            if seen > 1:
                # Entries sharing a timestamp restart the block position at 1
                change.id = f"{change.id}-{seen}"
            change.session_id = self._session_id
            change.is_latest_session = self._is_latest
            change.user_message = turn.user_message
        turn.file_changes.extend(changes)

        if text:
            if turn.assistant_message:
                turn.assistant_message += "\n\n" + text
            else:
                turn.assistant_message = text
