"""Tests for claude_revert.utils.message_classifier."""

import pytest

from claude_revert.types.entries import (
    EntryKind,
    LogEntry,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from claude_revert.utils.message_classifier import (
    NO_MESSAGE,
    count_file_mutations,
    extract_assistant_text,
    extract_user_text,
    is_real_user_message,
    is_tool_result_echo,
)


def _user(content) -> LogEntry:
    return LogEntry(kind=EntryKind.USER, timestamp="t", content=content)


def _assistant(content) -> LogEntry:
    return LogEntry(kind=EntryKind.ASSISTANT, timestamp="t", content=content)


class TestIsToolResultEcho:
    def test_string_content_is_genuine(self):
        assert not is_tool_result_echo(_user("hello"))

    def test_empty_string_is_genuine(self):
        assert not is_tool_result_echo(_user(""))

    def test_only_tool_result(self):
        assert is_tool_result_echo(_user([ToolResultBlock(tool_use_id="a")]))

    def test_text_and_tool_result_is_genuine(self):
        entry = _user([ToolResultBlock(tool_use_id="a"), TextBlock(text="also do this")])
        assert not is_tool_result_echo(entry)

    def test_blank_text_and_tool_result_is_echo(self):
        entry = _user([TextBlock(text="  \n"), ToolResultBlock(tool_use_id="a")])
        assert is_tool_result_echo(entry)

    def test_empty_list_is_genuine(self):
        assert not is_tool_result_echo(_user([]))

    def test_assistant_never_echo(self):
        assert not is_tool_result_echo(_assistant([ToolResultBlock(tool_use_id="a")]))


class TestIsRealUserMessage:
    def test_user_string(self):
        assert is_real_user_message(_user("hi"))

    def test_echo(self):
        assert not is_real_user_message(_user([ToolResultBlock(tool_use_id="a")]))

    def test_assistant(self):
        assert not is_real_user_message(_assistant("hi"))


class TestExtractUserText:
    def test_string_stripped(self):
        assert extract_user_text(_user("  hello \n")) == "hello"

    def test_blank_string(self):
        assert extract_user_text(_user("   ")) == NO_MESSAGE

    def test_first_non_empty_text_block_kept_verbatim(self):
        entry = _user([TextBlock(text=" "), TextBlock(text="  first\n"), TextBlock(text="second")])
        assert extract_user_text(entry) == "  first\n"

    def test_no_text(self):
        assert extract_user_text(_user([ToolResultBlock(tool_use_id="a")])) == NO_MESSAGE


class TestExtractAssistantText:
    def test_joins_with_blank_lines(self):
        entry = _assistant([
            TextBlock(text=" one "),
            ToolUseBlock(id="1", name="Write"),
            TextBlock(text=""),
            TextBlock(text="two"),
        ])
        assert extract_assistant_text(entry) == "one\n\ntwo"

    def test_string_content_ignored(self):
        assert extract_assistant_text(_assistant("plain")) == ""


class TestCountFileMutations:
    @pytest.mark.parametrize("names,expected", [
        (["Write", "Edit", "MultiEdit"], 3),
        (["Read", "Bash", "Write"], 1),
        ([], 0),
    ])
    def test_counts(self, names, expected):
        entry = _assistant([ToolUseBlock(id=str(i), name=n) for i, n in enumerate(names)])
        assert count_file_mutations(entry) == expected

    def test_user_entries_not_counted(self):
        entry = _user([ToolUseBlock(id="1", name="Write")])
        assert count_file_mutations(entry) == 0
