"""Encode a working-directory path into a Claude project directory name."""

import os
import re

# One hyphen per escaped character, never collapsed. "." is escaped as well as
# / \ : _; a key built from only those four misses dirs like -home-me--config:
# C:\Users\Foo_Bar -> C--Users-Foo-Bar, /home/me/.config -> -home-me--config
_ESCAPED_CHARS = re.compile(r"[/\\:_.]")


def encode_path(path: str) -> str:
    """Encode a filesystem path to a Claude project directory name.

    /home/wiz/my_app → -home-wiz-my-app
    """
    if not path:
        return ""
    return _ESCAPED_CHARS.sub("-", path)


def current_project_key(cwd: str | None = None) -> str:
    """Project directory name for ``cwd`` (defaults to the process cwd)."""
    return encode_path(cwd if cwd is not None else os.getcwd())


def session_id_from_filename(filename: str) -> str:
    """abc-def.jsonl → abc-def"""
    name = os.path.basename(filename)
    if name.endswith(".jsonl"):
        return name[: -len(".jsonl")]
    return name
