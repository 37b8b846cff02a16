"""
Filesystem helpers shared by the discovery, preview and archive code.
"""

import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Callable

from welder.errors import WelderIOError


def raise_walk_error(exc: OSError) -> None:
    """``os.walk`` error hook: an unreadable directory aborts the walk."""
    raise exc


def _default_file_mode() -> int:
    """Mode a plain ``open()`` would create a file with under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def replace_atomically(destination: Path, write: Callable[[BinaryIO], None]) -> Path:
    """
    Write ``destination`` through a sibling temporary file renamed into place.

    A failure removes the temporary file and leaves any previous
    ``destination`` untouched. The finished file gets ordinary permissions
    rather than the owner-only mode of ``mkstemp``.

    Raises:
        WelderIOError: The file could not be written or renamed
    """
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", dir=destination.parent)
    except OSError as exc:
        raise WelderIOError(f"cannot write {destination}") from exc

    try:
        with os.fdopen(fd, "wb") as f:
            write(f)
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, destination)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise WelderIOError(f"cannot write {destination}") from exc
    return destination
