"""Exception types raised by session lookups and revert operations."""


class ClaudeRevertError(Exception):
    """Base class for every error raised by claude_revert."""


class SessionNotFoundError(ClaudeRevertError, LookupError):
    def __init__(self, session_id: str):
        super().__init__(f"Session file not found: {session_id}")
        self.session_id = session_id


class ChangeNotFoundError(ClaudeRevertError, LookupError):
    def __init__(self, change_id: str):
        super().__init__(f"Change not found: {change_id}")
        self.change_id = change_id


class ScanCancelledError(ClaudeRevertError):
    """The caller cancelled a session directory scan."""


class PathNotAllowedError(ClaudeRevertError):
    def __init__(self, path: str, reason: str = "outside the working directory"):
        super().__init__(f"Access denied for {path}: {reason}")
        self.path = path


class RevertRejectedError(ClaudeRevertError):
    """A revert was refused before any filesystem action was taken."""

    reason = "revert rejected"

    def __init__(self, change_id: str, detail: str = ""):
        message = f"Cannot revert {change_id}: {self.reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.change_id = change_id


class AlreadyRevertedError(RevertRejectedError):
    reason = "change has already been reverted"


class HistoricalSessionError(RevertRejectedError):
    reason = "change belongs to a session that is not the latest"


class UnrevertableChangeError(RevertRejectedError):
    reason = "change could not be reconstructed"


class RevertFailedError(ClaudeRevertError):
    """The filesystem or the ledger failed while reverting; nothing was recorded."""

    def __init__(self, change_id: str, file_path: str, cause: BaseException):
        super().__init__(f"Failed to revert {change_id} ({file_path}): {cause}")
        self.change_id = change_id
        self.file_path = file_path
