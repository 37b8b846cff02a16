"""
Grid composer - fixed-size cells with aspect-preserving fitting.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from welder.assets import SpriteAsset
from welder.canvas import RGBA, Canvas
from welder.scaling import fit_dimensions, resize_nearest


@dataclass(frozen=True)
class GridCell:
    """Cell origin for sprite ``sprite_index`` at (row, col)."""

    sprite_index: int
    row: int
    col: int
    x: int
    y: int


@dataclass(frozen=True)
class GridLayout:
    width: int
    height: int
    rows: int
    columns: int
    cell_px: int
    cells: List[GridCell]


def layout_grid(count: int, cell_px: int, padding: int, columns: int) -> GridLayout:
    """
    Place ``count`` sprites row-major into a grid of ``columns`` columns.

    Padding borders every edge and separates every cell:
    width = columns*cell + (columns+1)*padding, likewise for rows.
    """
    if cell_px < 1:
        raise ValueError(f"cell_px must be >= 1, got {cell_px}")
    if columns < 1:
        raise ValueError(f"columns must be >= 1, got {columns}")

    rows = math.ceil(count / columns)
    width = columns * cell_px + (columns + 1) * padding
    height = rows * cell_px + (rows + 1) * padding

    cells = []
    for index in range(count):
        row, col = divmod(index, columns)
        cells.append(
            GridCell(
                sprite_index=index,
                row=row,
                col=col,
                x=padding + col * (cell_px + padding),
                y=padding + row * (cell_px + padding),
            )
        )

    return GridLayout(
        width=max(width, 1),
        height=max(height, 1),
        rows=rows,
        columns=columns,
        cell_px=cell_px,
        cells=cells,
    )


def fit_in_cell(width: int, height: int, cell_px: int) -> Tuple[int, int, int, int]:
    """Return (fit_w, fit_h, offset_x, offset_y) for a sprite centered in a cell."""
    fit_w, fit_h = fit_dimensions(width, height, cell_px)
    return fit_w, fit_h, (cell_px - fit_w) // 2, (cell_px - fit_h) // 2


def compose_grid(
    sprites: Sequence[SpriteAsset],
    cell_px: int,
    padding: int,
    columns: int,
    background: RGBA,
) -> Tuple[Canvas, GridLayout]:
    """Render every sprite scaled and centered in its grid cell."""
    layout = layout_grid(len(sprites), cell_px, padding, columns)
    canvas = Canvas(layout.width, layout.height, background)

    for cell in layout.cells:
        sprite = sprites[cell.sprite_index]
        fit_w, fit_h, off_x, off_y = fit_in_cell(sprite.width, sprite.height, cell_px)
        if (fit_w, fit_h) == sprite.size:
            pixels = sprite.pixels
        else:
            pixels = resize_nearest(sprite.pixels, fit_w, fit_h)
        canvas.blit(pixels, cell.x + off_x, cell.y + off_y)

    return canvas, layout
