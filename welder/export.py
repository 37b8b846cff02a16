"""
Resolution exporter - write nearest-neighbor scaled copies of every sprite.

Output layout: ``<exports_root>/<factor>x/<relative_path>``.
"""

import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from PIL import Image

from welder.assets import load_sprites
from welder.config import OUTPUT_FORMAT
from welder.errors import WelderIOError
from welder.fsutil import raise_walk_error
from welder.scaling import ScaleFactorSet, scale_nearest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedWrite:
    """One output file of an export run."""

    source: str
    factor: int
    destination: Path
    width: int
    height: int


@dataclass
class ExportReport:
    factors: ScaleFactorSet
    sprite_count: int
    dry_run: bool
    cleaned: bool = False
    writes: List[PlannedWrite] = field(default_factory=list)


_FACTOR_DIR = re.compile(r"^([1-9][0-9]*)x$")


@dataclass(frozen=True)
class ExportTree:
    """What an existing exports directory actually holds."""

    factors: ScaleFactorSet
    sprite_count: int


def export_path(exports_root: Path, factor: int, relative_path: str) -> Path:
    return Path(exports_root) / f"{factor}x" / relative_path


def export_sprites(
    input_root: Path,
    relative_paths: Sequence[str],
    factors: ScaleFactorSet,
    exports_root: Path,
    dry_run: bool = False,
    clean: bool = False,
) -> ExportReport:
    """
    Export every sprite at every scale factor.

    All sprites are decoded before anything is written, so one corrupt file
    aborts the run with no output at all. A dry run decodes and validates
    exactly like a real run but never touches the filesystem.

    Args:
        input_root: Directory the relative paths are anchored at
        relative_paths: Discovered sprites, in canonical order
        factors: Scale factors to produce
        exports_root: Destination tree
        dry_run: Report planned writes only
        clean: Remove ``exports_root`` before writing

    Returns:
        ExportReport listing every (planned) write

    Raises:
        ImageDecodeError: A source sprite could not be decoded
        WelderIOError: An output could not be written
    """
    sprites = load_sprites(input_root, relative_paths)
    report = ExportReport(factors=factors, sprite_count=len(sprites), dry_run=dry_run)

    for sprite in sprites:
        for factor in factors:
            report.writes.append(
                PlannedWrite(
                    source=sprite.relative_path,
                    factor=factor,
                    destination=export_path(exports_root, factor, sprite.relative_path),
                    width=sprite.width * factor,
                    height=sprite.height * factor,
                )
            )

    exports_root = Path(exports_root)
    if clean and exports_root.exists():
        report.cleaned = True
        if dry_run:
            logger.info(f"Would remove {exports_root}")
        else:
            try:
                shutil.rmtree(exports_root)
            except OSError as exc:
                raise WelderIOError(f"cannot clean {exports_root}") from exc
            logger.info(f"Removed {exports_root}")

    if dry_run:
        return report

    by_path = {sprite.relative_path: sprite for sprite in sprites}
    for write in report.writes:
        sprite = by_path[write.source]
        pixels = scale_nearest(sprite.pixels, write.factor)
        try:
            write.destination.parent.mkdir(parents=True, exist_ok=True)
            Image.fromarray(pixels).save(write.destination, format=OUTPUT_FORMAT)
        except OSError as exc:
            raise WelderIOError(f"cannot write {write.destination}") from exc
        logger.debug(f"Wrote {write.destination} ({write.width}x{write.height})")

    logger.info(
        f"Exported {len(sprites)} sprite(s) at {len(factors)} resolution(s) to {exports_root}"
    )
    return report


def scan_exports(exports_root: Path) -> ExportTree:
    """
    Read the factors and sprite count back from ``<exports_root>/<N>x`` folders.

    The sprite count is the number of distinct relative paths across all
    factor folders.

    Raises:
        WelderIOError: The tree is missing, unreadable, or holds no factor folders
    """
    exports_root = Path(exports_root)
    try:
        factor_dirs = {}
        for child in exports_root.iterdir():
            match = _FACTOR_DIR.match(child.name)
            if match and child.is_dir() and not child.is_symlink():
                factor_dirs[int(match.group(1))] = child

        sprites = set()
        for factor_dir in factor_dirs.values():
            for dirpath, dirnames, filenames in os.walk(factor_dir, onerror=raise_walk_error):
                for filename in filenames:
                    sprites.add((Path(dirpath) / filename).relative_to(factor_dir).as_posix())
    except OSError as exc:
        raise WelderIOError(f"cannot read {exc.filename or exports_root}") from exc

    if not factor_dirs:
        raise WelderIOError(
            f"export tree {exports_root} has no <N>x folders (run 'welder build' first)"
        )
    return ExportTree(ScaleFactorSet(sorted(factor_dirs)), len(sprites))
