"""Crash-safe file replacement and exact-byte text I/O."""

import os
import stat
import tempfile
from pathlib import Path

# surrogateescape lets arbitrary bytes survive a decode/encode round trip
ENCODING = "utf-8"
ERRORS = "surrogateescape"


def read_text_exact(path: str | Path) -> str:
    """Read a file as text without newline translation or lossy decoding."""
    return Path(path).read_bytes().decode(ENCODING, ERRORS)


def atomic_write_text(path: str | Path, text: str, fsync: bool = True) -> None:
    """Replace ``path`` with ``text`` via a sibling temp file and os.replace.

    A crash at any point leaves either the old file or the new one, never a
    partial write. Permission bits of an existing target are kept.
    """
    atomic_write_bytes(path, text.encode(ENCODING, ERRORS), fsync=fsync)


def atomic_write_bytes(path: str | Path, data: bytes, fsync: bool = True) -> None:
    target = Path(path)
    try:
        mode = stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        mode = _default_mode()

    fd, tmp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            if fsync:
                os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    if fsync:
        _fsync_dir(target.parent)


def _default_mode() -> int:
    # mkstemp creates 0600; new files get what open() would give them
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _fsync_dir(directory: Path) -> None:
    # Persists the rename itself; not supported on every platform
    try:
        fd = os.open(str(directory), os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)
