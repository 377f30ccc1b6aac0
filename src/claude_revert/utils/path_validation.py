"""Path validation and security sandboxing."""

import os
import re

# Sensitive file patterns never served to the UI
SENSITIVE_PATTERNS = [
    re.compile(r'[/\\]\.ssh[/\\]'),
    re.compile(r'[/\\]\.aws[/\\]'),
    re.compile(r'[/\\]\.config[/\\]gcloud[/\\]'),
    re.compile(r'[/\\]\.azure[/\\]'),
    re.compile(r'[/\\]\.env($|\.)'),
    re.compile(r'[/\\]\.git-credentials$'),
    re.compile(r'[/\\]\.npmrc$'),
    re.compile(r'[/\\]\.docker[/\\]config\.json$'),
    re.compile(r'[/\\]\.kube[/\\]config$'),
    re.compile(r'[/\\]id_rsa$'),
    re.compile(r'[/\\]id_ed25519$'),
    re.compile(r'[/\\]id_ecdsa$'),
    re.compile(r'\.pem$'),
    re.compile(r'\.key$'),
    re.compile(r'credentials\.json$'),
    re.compile(r'secrets\.json$'),
    re.compile(r'tokens\.json$'),
]

# Session ids are filename stems; anything that could walk the tree is refused
_SESSION_ID_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*$')


def is_sensitive_path(path: str) -> bool:
    """Check if a file path matches any sensitive pattern."""
    normalized = path.replace("\\", "/")
    for pattern in SENSITIVE_PATTERNS:
        if pattern.search(normalized):
            return True
    return False


def is_path_within(path: str, roots: list[str]) -> bool:
    """Validate that a path is inside one of ``roots``.

    Resolves symlinks before checking to prevent escape attacks.
    """
    try:
        resolved = os.path.realpath(os.path.expanduser(path))
    except (OSError, ValueError):
        return False

    for root in roots:
        try:
            resolved_root = os.path.realpath(os.path.expanduser(root))
        except (OSError, ValueError):
            continue
        if resolved == resolved_root or resolved.startswith(resolved_root.rstrip(os.sep) + os.sep):
            return True
    return False


def is_valid_session_id(session_id: str) -> bool:
    return bool(session_id) and ".." not in session_id and bool(_SESSION_ID_PATTERN.match(session_id))
