"""
Preview rendering - composite sheet and grid images of a sprite set.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from welder.assets import SpriteAsset
from welder.canvas import Canvas, parse_hex_color
from welder.config import WelderConfig
from welder.grid import compose_grid
from welder.sheet import compose_sheet
from welder.watermark import apply_watermark

logger = logging.getLogger(__name__)

PREVIEW_FILENAMES = {
    "sheet": "sheet.png",
    "grid": "grid.png",
}


@dataclass(frozen=True)
class PreviewImage:
    style: str
    destination: Path
    width: int
    height: int
    watermarked: bool


@dataclass
class PreviewReport:
    sprite_count: int
    dry_run: bool
    images: List[PreviewImage] = field(default_factory=list)


def resolve_styles(requested: Optional[str], configured: Sequence[str]) -> List[str]:
    """
    Pick preview styles: ``sheet``, ``grid``, ``both``, or None for the configured list.
    """
    if requested is None:
        styles = list(configured)
    elif requested == "both":
        styles = ["sheet", "grid"]
    elif requested in PREVIEW_FILENAMES:
        styles = [requested]
    else:
        raise ValueError(f"unknown preview style '{requested}'")
    # De-duplicate, keeping order
    return list(dict.fromkeys(styles))


def compose_preview(style: str, sprites: Sequence[SpriteAsset], config: WelderConfig) -> Canvas:
    """Build one preview canvas; the watermark is not applied here."""
    background = parse_hex_color(config.preview.background)
    if style == "sheet":
        canvas, _ = compose_sheet(
            sprites,
            max_width=config.sheet.max_width,
            max_height=config.sheet.max_height,
            padding=config.sheet.padding_px,
            background=background,
        )
    elif style == "grid":
        canvas, _ = compose_grid(
            sprites,
            cell_px=config.grid.cell_px,
            padding=config.grid.padding_px,
            columns=config.grid.columns,
            background=background,
        )
    else:
        raise ValueError(f"unknown preview style '{style}'")
    return canvas


def render_previews(
    sprites: Sequence[SpriteAsset],
    config: WelderConfig,
    previews_root: Path,
    styles: Sequence[str],
    dry_run: bool = False,
) -> PreviewReport:
    """
    Compose, watermark and save the requested preview styles.

    Every canvas is composed before the first file is written, so a layout
    overflow leaves the previews directory untouched.

    Raises:
        LayoutOverflowError: The sheet exceeds ``sheet.max_height``
        WelderIOError: A preview could not be written
    """
    report = PreviewReport(sprite_count=len(sprites), dry_run=dry_run)
    canvases = []
    for style in styles:
        canvas = compose_preview(style, sprites, config)
        watermarked = apply_watermark(canvas, config.preview.watermark)
        destination = Path(previews_root) / PREVIEW_FILENAMES[style]
        canvases.append((canvas, destination))
        report.images.append(
            PreviewImage(style, destination, canvas.width, canvas.height, watermarked)
        )

    if dry_run:
        return report

    for canvas, destination in canvases:
        canvas.save(destination)
        logger.info(f"Wrote preview {destination} ({canvas.width}x{canvas.height})")
    return report
