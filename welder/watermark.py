"""
Watermark renderer - stamps bitmap-font text onto a finished canvas.

Coverage pixels are blended as a white foreground at the configured opacity
using the source-over operator:

    outA = srcA + dstA * (1 - srcA)
    outC = (srcC * srcA + dstC * dstA * (1 - srcA)) / outA

A pixel with outA == 0 is left untouched.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from welder.canvas import Canvas
from welder.config import WatermarkConfig
from welder.font import render_text_mask, text_block_size

logger = logging.getLogger(__name__)

FOREGROUND = (255, 255, 255)


def auto_scale(canvas_width: int, canvas_height: int) -> int:
    """Glyph scale used when the config does not pin one."""
    return max(1, min(canvas_width, canvas_height) // 128)


def anchor_origin(
    anchor: str,
    canvas_size: Tuple[int, int],
    block_size: Tuple[int, int],
    margin: int,
) -> Tuple[int, int]:
    """Top-left corner of the text block for a named anchor; margin is ignored for center."""
    canvas_w, canvas_h = canvas_size
    block_w, block_h = block_size

    if anchor == "center":
        return ((canvas_w - block_w) // 2, (canvas_h - block_h) // 2)

    left = margin
    right = canvas_w - block_w - margin
    top = margin
    bottom = canvas_h - block_h - margin
    origins = {
        "top-left": (left, top),
        "top-right": (right, top),
        "bottom-left": (left, bottom),
        "bottom-right": (right, bottom),
    }
    if anchor not in origins:
        raise ValueError(f"unknown anchor '{anchor}'")
    return origins[anchor]


def blend_over(dst: np.ndarray, opacity: float, color=FOREGROUND) -> np.ndarray:
    """
    Source-over blend a flat ``color`` at ``opacity`` onto ``dst``.

    Args:
        dst: (N, 4) uint8 RGBA pixels
        opacity: Source alpha in [0, 1]
        color: Source RGB

    Returns:
        New (N, 4) uint8 array
    """
    src_a = float(opacity)
    src_c = np.asarray(color, dtype=np.float64)

    dst_f = dst.astype(np.float64)
    dst_a = dst_f[:, 3] / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)

    result = dst.copy()
    visible = out_a > 0
    if not np.any(visible):
        return result

    weight_dst = (dst_a * (1.0 - src_a))[visible, None]
    out_c = (src_c * src_a + dst_f[visible, :3] * weight_dst) / out_a[visible, None]

    result[visible, :3] = np.clip(np.rint(out_c), 0, 255).astype(np.uint8)
    result[visible, 3] = np.clip(np.rint(out_a[visible] * 255.0), 0, 255).astype(np.uint8)
    return result


def apply_watermark(canvas: Canvas, config: Optional[WatermarkConfig]) -> bool:
    """
    Stamp the configured text onto ``canvas`` in place.

    A missing or disabled config, empty text, or zero opacity is a no-op.
    Pixels falling outside the canvas are clipped.

    Returns:
        True if any pixel was blended
    """
    if config is None or not config.enabled:
        return False
    text = config.text.upper()
    if not text.strip() or config.opacity <= 0:
        logger.debug("Watermark enabled but has nothing to draw")
        return False

    scale = config.scale or auto_scale(canvas.width, canvas.height)
    mask = render_text_mask(text, scale)
    block_w, block_h = text_block_size(text, scale)
    x, y = anchor_origin(config.position, canvas.size, (block_w, block_h), config.margin_px)

    # Clip the block against the canvas
    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + block_w, canvas.width), min(y + block_h, canvas.height)
    if x0 >= x1 or y0 >= y1:
        logger.info("Watermark falls entirely outside the canvas")
        return False

    covered = mask[y0 - y:y1 - y, x0 - x:x1 - x]
    if not np.any(covered):
        return False

    region = canvas.pixels[y0:y1, x0:x1]
    region[covered] = blend_over(region[covered], config.opacity)
    logger.debug(f"Watermark '{text}' at ({x}, {y}) scale {scale}")
    return True
