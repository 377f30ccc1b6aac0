"""Diff computation and durable revert of file changes.

ChangeTracker owns everything a revert touches: the ledger, the in-memory
set of reverted ids, the registry of diff-annotated changes and the locks.
Reverts always overwrite with the full "before" snapshot captured at diff
time; they never search for ``new_string`` to undo an edit, because a
first-occurrence edit undone by search can restore the wrong occurrence.
"""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from claude_revert.services.revert_ledger import RevertLedger
from claude_revert.types.changes import ChangeKind, EditOperation, FileChange, ParsedChange
from claude_revert.types.errors import (
    AlreadyRevertedError,
    HistoricalSessionError,
    RevertFailedError,
    UnrevertableChangeError,
)
from claude_revert.utils.atomic_write import atomic_write_bytes, atomic_write_text, read_text_exact
from claude_revert.utils.diff_generator import compute_unified_diff

logger = logging.getLogger(__name__)


class EditApplyError(ValueError):
    """An edit's old_string could not be located in the working text."""


def apply_edits(text: str, edits: list[EditOperation]) -> str:
    """Apply string-replacement operations in order.

    replace_all selects a global replace; otherwise only the first match is
    replaced. An empty old_string is only meaningful against empty text
    (creating a file).
    """
    for index, op in enumerate(edits, start=1):
        if not op.old_string:
            if text:
                raise EditApplyError(f"edit {index} has an empty old_string")
            text = op.new_string
            continue
        if op.old_string not in text:
            raise EditApplyError(f"edit {index}: old_string not found in file")
        if op.replace_all:
            text = text.replace(op.old_string, op.new_string)
        else:
            text = text.replace(op.old_string, op.new_string, 1)
    return text


class _KeyedLocks:
    """One mutex per key, dropped again once nobody holds or waits for it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [lock, holders]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._locks.get(key)
            if slot is None:
                slot = self._locks[key] = [threading.Lock(), 0]
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]


class ChangeTracker:
    """Computes reviewable diffs and performs atomic, ledger-backed reverts."""

    def __init__(self, ledger: RevertLedger, fsync: bool = True):
        self._ledger = ledger
        self._fsync = fsync
        self._reverted: set[str] = set()
        self._initialized = False
        self._changes: dict[str, ParsedChange] = {}
        self._state_lock = threading.Lock()
        self._change_locks = _KeyedLocks()
        self._path_locks = _KeyedLocks()

    def init(self) -> None:
        """Load the ledger into memory. Later calls are no-ops."""
        with self._state_lock:
            if self._initialized:
                return
            self._reverted = set(self._ledger.load())
            self._initialized = True
        logger.debug("Loaded %d reverted change ids from %s", len(self._reverted), self._ledger.db_path)

    def already_reverted(self, change_id: str) -> bool:
        with self._state_lock:
            return change_id in self._reverted

    def get_change(self, change_id: str) -> ParsedChange | None:
        with self._state_lock:
            return self._changes.get(change_id)

    # ------------------------------------------------------------------
    # Diff computation
    # ------------------------------------------------------------------

    def process_changes(self, changes: Iterable[FileChange]) -> list[ParsedChange]:
        """Compute diffs for a batch of changes treated as one timeline.

        A change's "before" is the result of the previous change to the same
        path in this batch, else the file on disk, else empty (a creation).
        A change whose edits cannot be applied is flagged and skipped; the
        rest of the batch is still processed.
        """
        simulated: dict[str, str] = {}
        parsed = [self._process_one(change, simulated) for change in changes]
        with self._state_lock:
            for p in parsed:
                self._changes[p.id] = p
        return parsed

    def _process_one(self, change: FileChange, simulated: dict[str, str]) -> ParsedChange:
        parsed = ParsedChange(
            id=change.id,
            timestamp=change.timestamp,
            type=change.kind,
            file_path=change.file_path,
            edits=list(change.edits),
            turn_id=change.turn_id,
            session_id=change.session_id,
            session_file=change.session_file,
            is_latest_session=change.is_latest_session,
            user_message=change.user_message,
        )

        key = _path_key(change.file_path)
        if key in simulated:
            before: str | None = simulated[key]
        else:
            try:
                before = read_text_exact(key)
            except FileNotFoundError:
                before = None
            except OSError as e:
                parsed.error = f"cannot read {change.file_path}: {e.strerror or e}"
                logger.debug("Change %s unrevertable: %s", change.id, parsed.error)
                return parsed

        if before is None:
            parsed.type = ChangeKind.CREATE
        parsed.old_content = before

        try:
            if change.kind == ChangeKind.WRITE:
                after = change.content or ""
            else:
                after = apply_edits(before or "", change.edits)
        except EditApplyError as e:
            parsed.error = str(e)
            logger.debug("Change %s unrevertable: %s", change.id, parsed.error)
            return parsed

        parsed.new_content = after
        parsed.diff = compute_unified_diff(before or "", after, change.file_path)
        simulated[key] = after
        parsed.can_revert = change.is_latest_session and not self.already_reverted(change.id)
        return parsed

    # ------------------------------------------------------------------
    # Revert
    # ------------------------------------------------------------------

    def revert_change(self, change: ParsedChange) -> ParsedChange:
        """Undo one change on disk and record it in the ledger.

        Raises a RevertRejectedError subclass (no filesystem action) when the
        change is already reverted, historical, or unrevertable, and
        RevertFailedError when the filesystem or ledger fails; in that case
        no ledger entry exists afterwards.
        """
        with self._change_locks.hold(change.id):
            self._check_revertable(change)
            with self._path_locks.hold(_path_key(change.file_path)):
                self._restore(change)
            with self._state_lock:
                self._reverted.add(change.id)
            change.can_revert = False
        logger.info("Reverted %s (%s)", change.id, change.file_path)
        return change

    def _check_revertable(self, change: ParsedChange) -> None:
        if self.already_reverted(change.id):
            raise AlreadyRevertedError(change.id)
        if not change.is_latest_session:
            raise HistoricalSessionError(change.id)
        if change.error or change.new_content is None:
            raise UnrevertableChangeError(change.id, change.error)

    def _restore(self, change: ParsedChange) -> None:
        # Writes go to the link target; replacing a symlink path would drop the link
        target = Path(_path_key(change.file_path))
        try:
            prior = target.read_bytes()
        except FileNotFoundError:
            prior = None
        except OSError as e:
            raise RevertFailedError(change.id, change.file_path, e) from e

        try:
            if change.is_creation:
                if prior is None:
                    logger.debug("%s already absent, nothing to delete", target)
                else:
                    target.unlink()
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                atomic_write_text(target, change.old_content or "", fsync=self._fsync)
        except OSError as e:
            raise RevertFailedError(change.id, change.file_path, e) from e

        try:
            self._ledger.record(change.id, change.file_path)
        except sqlite3.Error as e:
            self._put_back(target, prior)
            raise RevertFailedError(change.id, change.file_path, e) from e

    def _put_back(self, target: Path, prior: bytes | None) -> None:
        """Return a file to its pre-revert state after a failed ledger write."""
        try:
            if prior is None:
                target.unlink(missing_ok=True)
            else:
                atomic_write_bytes(target, prior, fsync=self._fsync)
        except OSError:
            logger.exception("Could not restore %s after ledger failure", target)


def _path_key(file_path: str) -> str:
    return os.path.realpath(os.path.expanduser(file_path))
