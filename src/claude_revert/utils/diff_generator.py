"""Diff computation for file-change review."""

import difflib
import os

NO_NEWLINE_MARKER = "\\ No newline at end of file"


def compute_unified_diff(old_string: str, new_string: str, file_path: str = "") -> str:
    """Compute a unified diff between old and new strings.

    Line endings are preserved in the hunks; a final line without a newline
    is followed by the standard "No newline at end of file" marker so that a
    trailing-newline-only change still shows up.
    """
    filename = os.path.basename(file_path) if file_path else "file"
    old_lines = _split_lines(old_string)
    new_lines = _split_lines(new_string)

    out = []
    for line in difflib.unified_diff(
        old_lines, new_lines,
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
    ):
        if line.endswith("\n"):
            out.append(line)
        else:
            out.append(line + "\n")
            out.append(NO_NEWLINE_MARKER + "\n")
    return "".join(out)


def _split_lines(text: str) -> list[str]:
    # "\n" only: str.splitlines() also breaks on \r, \f, \v and unicode separators
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines
