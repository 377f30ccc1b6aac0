"""Tests for claude_revert.services.revert_service."""

import pytest

from helpers import assistant, edit, text, tool_result, user, write, write_session

from claude_revert.types.changes import ChangeKind
from claude_revert.types.errors import (
    AlreadyRevertedError,
    ChangeNotFoundError,
    HistoricalSessionError,
    PathNotAllowedError,
    SessionNotFoundError,
)


@pytest.fixture
def app_file(workspace):
    path = workspace.cwd / "app.py"
    path.write_text("print('hi')\n")
    return path


@pytest.fixture
def session(workspace, app_file):
    """One session: edit app.py, create util.py, then a second turn editing app.py again."""
    util = workspace.cwd / "util.py"
    return write_session(workspace.log_dir / "s1.jsonl", [
        user("Say hello", second=0),
        assistant(text("On it."), edit(app_file, "hi", "hello"), second=1),
        tool_result(second=2),
        assistant(write(util, "X = 1\n"), second=3),
        user("Now shout", second=10),
        assistant(edit(app_file, "hello", "HELLO"), second=11),
    ], mtime=1000)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

class TestListSessions:
    def test_newest_first(self, service, workspace):
        write_session(workspace.log_dir / "older.jsonl", [user("one")], mtime=100)
        write_session(workspace.log_dir / "newer.jsonl", [user("two")], mtime=200)

        sessions = service.list_sessions()

        assert [s.session_id for s in sessions] == ["newer", "older"]
        assert sessions[0].is_latest
        assert sessions[0].user_message == "two"

    def test_no_project_dir(self, service, workspace):
        workspace.log_dir.rmdir()
        assert service.list_sessions() == []


class TestSessionTurns:
    def test_turns_with_diffs(self, service, session, workspace, app_file):
        result = service.get_session_turns("s1")

        assert result.session_id == "s1"
        assert result.is_latest
        assert result.timestamp == "2026-02-13T12:00:00.000Z"
        assert [t.user_message for t in result.turns] == ["Say hello", "Now shout"]

        first, second = result.turns
        assert first.assistant_message == "On it."
        assert [p.type for p in first.parsed_changes] == [ChangeKind.EDIT, ChangeKind.CREATE]
        assert first.parsed_changes[0].old_content == "print('hi')\n"
        assert first.parsed_changes[0].session_file == str(session)
        # each turn is its own batch and reads from disk
        assert second.parsed_changes[0].error
        assert not second.parsed_changes[0].can_revert

    def test_to_dict(self, service, session):
        data = service.get_session_turns("s1").to_dict()
        assert data["sessionId"] == "s1"
        assert data["mtime"] == 1_000_000
        assert data["turns"][0]["parsedChanges"][0]["canRevert"] is True

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFoundError):
            service.get_session_turns("nope")


class TestSessionChanges:
    def test_single_batch_newest_first(self, service, session, app_file):
        changes = service.get_session_changes("s1")

        assert [c.timestamp[-9:-5] for c in changes] == ["0:11", "0:03", "0:01"]
        shout, create, hello = changes
        assert hello.new_content == "print('hello')\n"
        assert shout.old_content == "print('hello')\n"
        assert shout.new_content == "print('HELLO')\n"
        assert create.type == ChangeKind.CREATE
        assert all(c.user_message == "Say hello" for c in changes)
        assert all(c.can_revert for c in changes)

    def test_latest_changes(self, service, session, workspace):
        write_session(workspace.log_dir / "old.jsonl", [user("x")], mtime=10)
        assert [c.id for c in service.get_latest_changes()] == [
            c.id for c in service.get_session_changes("s1")
        ]

    def test_latest_changes_without_sessions(self, service):
        with pytest.raises(SessionNotFoundError):
            service.get_latest_changes()

    def test_historical_session(self, service, session, workspace):
        write_session(workspace.log_dir / "s2.jsonl", [user("later")], mtime=2000)
        changes = service.get_session_changes("s1")
        assert changes
        assert not any(c.can_revert or c.is_latest_session for c in changes)


# ---------------------------------------------------------------------------
# Revert
# ---------------------------------------------------------------------------

class TestRevert:
    def test_revert_by_id(self, service, session, app_file):
        hello = service.get_session_changes("s1")[-1]
        app_file.write_text("print('hello')\n")

        reverted = service.revert_change(hello.id)

        assert reverted is hello
        assert not reverted.can_revert
        assert app_file.read_text() == "print('hi')\n"
        with pytest.raises(AlreadyRevertedError):
            service.revert_change(hello.id)

    def test_revert_creation(self, service, session, workspace):
        create = service.get_session_changes("s1")[1]
        util = workspace.cwd / "util.py"
        util.write_text("X = 1\n")

        service.revert_change(create.id)

        assert not util.exists()

    def test_unknown_change(self, service):
        with pytest.raises(ChangeNotFoundError):
            service.revert_change("never-seen")

    def test_newer_session_makes_change_historical(self, service, session, workspace, app_file):
        hello = service.get_session_changes("s1")[-1]
        app_file.write_text("print('hello')\n")
        write_session(workspace.log_dir / "s2.jsonl", [user("later")], mtime=2000)

        with pytest.raises(HistoricalSessionError):
            service.revert_change(hello.id)

        assert app_file.read_text() == "print('hello')\n"
        assert not hello.can_revert

    def test_revert_state_survives_reload(self, service, session, app_file):
        hello = service.get_session_changes("s1")[-1]
        service.revert_change(hello.id)

        reloaded = {c.id: c for c in service.get_session_changes("s1")}
        assert not reloaded[hello.id].can_revert


# ---------------------------------------------------------------------------
# File access
# ---------------------------------------------------------------------------

class TestFileAccess:
    def test_read_inside_cwd(self, service, app_file):
        assert service.file_exists(str(app_file))
        assert service.read_file_content(str(app_file)) == "print('hi')\n"

    def test_relative_path(self, service, app_file):
        assert service.read_file_content("app.py") == "print('hi')\n"
        assert not service.file_exists("missing.py")

    @pytest.mark.parametrize("path", ["/etc/passwd", "../outside.txt", "../../work"])
    def test_outside_cwd_refused(self, service, path):
        with pytest.raises(PathNotAllowedError):
            service.read_file_content(path)

    def test_sensitive_refused(self, service, workspace):
        (workspace.cwd / ".env").write_text("SECRET=1")
        with pytest.raises(PathNotAllowedError, match="sensitive"):
            service.read_file_content(".env")

    def test_empty_path_refused(self, service):
        with pytest.raises(PathNotAllowedError):
            service.file_exists("")

    def test_symlink_escape_refused(self, service, workspace, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("nope")
        (workspace.cwd / "link.txt").symlink_to(secret)
        with pytest.raises(PathNotAllowedError):
            service.read_file_content("link.txt")


class TestSharedTimestamps:
    def test_reverts_target_their_own_file(self, service, workspace):
        a = workspace.cwd / "a.txt"
        b = workspace.cwd / "b.txt"
        a.write_text("a old\n")
        b.write_text("b old\n")
        write_session(workspace.log_dir / "s1.jsonl", [
            user("Rewrite both", second=0),
            assistant(write(a, "a new\n"), second=5),
            assistant(write(b, "b new\n"), second=5),
        ])

        changes = service.get_session_changes("s1")
        assert len({c.id for c in changes}) == 2
        a.write_text("a new\n")
        b.write_text("b new\n")

        change_a = next(c for c in changes if c.file_path == str(a))
        service.revert_change(change_a.id)

        assert a.read_text() == "a old\n"
        assert b.read_text() == "b new\n"
        change_b = next(c for c in changes if c.file_path == str(b))
        assert service.tracker.already_reverted(change_a.id)
        assert not service.tracker.already_reverted(change_b.id)
