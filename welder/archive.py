"""
Archive builder - byte-deterministic zip packaging.

Entries are stored uncompressed, sorted by archive path, and stamped with
the minimum zip timestamp and fixed permission bits, so the output depends
only on file names and contents.
"""

import logging
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from welder.errors import WelderIOError
from welder.fsutil import raise_walk_error, replace_atomically

logger = logging.getLogger(__name__)

# Earliest timestamp a zip entry can represent
FIXED_TIMESTAMP = (1980, 1, 1, 0, 0, 0)
# Regular file, rw-r--r--
FIXED_PERMISSIONS = 0o100644
_CREATE_SYSTEM_UNIX = 3

README_NAME = "README.md"


@dataclass(frozen=True)
class ArchiveEntry:
    zip_path: str
    data: bytes

    def to_zipinfo(self) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(self.zip_path, date_time=FIXED_TIMESTAMP)
        info.compress_type = zipfile.ZIP_STORED
        info.create_system = _CREATE_SYSTEM_UNIX
        info.external_attr = FIXED_PERMISSIONS << 16
        return info


def collect_tree(root: Path, prefix: str) -> List[ArchiveEntry]:
    """Read every regular file below ``root`` as ``<prefix>/<relative path>`` entries."""
    root = Path(root)
    if not root.is_dir():
        raise WelderIOError(f"directory not found: {root}")

    entries = []
    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=raise_walk_error):
            for filename in filenames:
                path = Path(dirpath) / filename
                if path.is_symlink() or not path.is_file():
                    continue
                relative = path.relative_to(root).as_posix()
                try:
                    relative.encode("utf-8")
                except UnicodeEncodeError:
                    raise WelderIOError(f"file name is not valid UTF-8: {path!r}") from None
                entries.append(ArchiveEntry(f"{prefix}/{relative}", path.read_bytes()))
    except WelderIOError:
        raise
    except OSError as exc:
        raise WelderIOError(f"cannot read {exc.filename or root}") from exc
    return entries


def build_archive(
    exports_root: Path,
    destination: Path,
    previews_root: Optional[Path] = None,
    readme: Optional[str] = None,
) -> Path:
    """
    Write a reproducible zip of the export tree.

    Args:
        exports_root: Tree stored under ``exports/``
        destination: Output zip path
        previews_root: Optional tree stored under ``previews/``
        readme: Optional text stored as a top-level ``README.md``

    Returns:
        The destination path

    Raises:
        WelderIOError: Any read or write failure; the destination is left untouched
    """
    entries = collect_tree(exports_root, "exports")
    if previews_root is not None:
        entries.extend(collect_tree(previews_root, "previews"))
    if readme is not None:
        entries.append(ArchiveEntry(README_NAME, readme.encode("utf-8")))

    entries.sort(key=lambda entry: entry.zip_path.encode("utf-8", "surrogateescape"))

    def write(f):
        with zipfile.ZipFile(f, "w", compression=zipfile.ZIP_STORED) as zf:
            for entry in entries:
                zf.writestr(entry.to_zipinfo(), entry.data)

    destination = replace_atomically(destination, write)

    logger.info(f"Archived {len(entries)} file(s) into {destination}")
    return destination
