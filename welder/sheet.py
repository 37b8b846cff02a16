"""
Sheet packer - single-pass shelf packing of sprites into one canvas.

Sprites are placed left to right in discovery order, wrapping to a new row
when the next sprite would cross ``max_width``. Nothing is sorted by size,
so the input order is preserved verbatim in the placements.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from welder.assets import SpriteAsset
from welder.canvas import RGBA, Canvas
from welder.errors import LayoutOverflowError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """Top-left corner of one sprite on a composite canvas."""

    sprite_index: int
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def overlaps(self, other: "Placement") -> bool:
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )


@dataclass(frozen=True)
class SheetLayout:
    width: int
    height: int
    placements: List[Placement]


def pack_sheet(
    sizes: Sequence[Tuple[int, int]],
    max_width: int,
    max_height: int,
    padding: int = 0,
) -> SheetLayout:
    """
    Compute shelf placements for sprites of the given (width, height) sizes.

    Args:
        sizes: Sprite dimensions in discovery order
        max_width: Row width that triggers a wrap
        max_height: Hard limit on sheet height
        padding: Gap around and between sprites

    Returns:
        SheetLayout with canvas size and one placement per sprite

    Raises:
        LayoutOverflowError: A sprite would extend past ``max_height``
    """
    x = y = padding
    row_h = 0
    max_x = 0
    placements = []

    for index, (w, h) in enumerate(sizes):
        if x > padding and x + w + padding > max_width:
            x = padding
            y += row_h + padding
            row_h = 0

        if y + h + padding > max_height:
            raise LayoutOverflowError(index, y + h + padding, max_height)

        placements.append(Placement(index, x, y, w, h))
        max_x = max(max_x, x + w + padding)
        row_h = max(row_h, h)
        x += w + padding

    width = max(max_x, 2 * padding, 1)
    if placements:
        height = max(y + row_h + padding, 1)
    else:
        height = max(2 * padding, 1)

    logger.debug(f"Packed {len(placements)} sprite(s) into {width}x{height}")
    return SheetLayout(width=width, height=height, placements=placements)


def compose_sheet(
    sprites: Sequence[SpriteAsset],
    max_width: int,
    max_height: int,
    padding: int,
    background: RGBA,
) -> Tuple[Canvas, SheetLayout]:
    """Pack ``sprites`` and blit them onto a fresh background-filled canvas."""
    layout = pack_sheet([s.size for s in sprites], max_width, max_height, padding)
    canvas = Canvas(layout.width, layout.height, background)
    for placement in layout.placements:
        canvas.blit(sprites[placement.sprite_index].pixels, placement.x, placement.y)
    return canvas, layout
