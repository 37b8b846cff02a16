"""
RGBA canvas for composite previews.
"""

import logging
import re
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image

from welder.config import HEX_COLOR_PATTERN, OUTPUT_FORMAT
from welder.errors import ConfigError
from welder.fsutil import replace_atomically

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]

_HEX_COLOR = re.compile(HEX_COLOR_PATTERN)


def parse_hex_color(value: str) -> RGBA:
    """Parse ``#RRGGBB`` into an opaque RGBA tuple; any other form is rejected."""
    if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value):
        raise ConfigError(f"color must be '#RRGGBB', got {value!r}")
    return (int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16), 255)


class Canvas:
    """A mutable (height, width, 4) uint8 pixel buffer filled with a background."""

    def __init__(self, width: int, height: int, background: RGBA = (0, 0, 0, 0)):
        if width < 1 or height < 1:
            raise ValueError(f"canvas must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height
        self.background = tuple(background)
        self.pixels = np.empty((height, width, 4), dtype=np.uint8)
        self.pixels[:, :] = self.background

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def blit(self, pixels: np.ndarray, x: int, y: int) -> None:
        """Opaquely copy ``pixels`` with its top-left corner at (x, y), clipping to bounds."""
        src_h, src_w = pixels.shape[:2]
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + src_w, self.width), min(y + src_h, self.height)
        if x0 >= x1 or y0 >= y1:
            return
        self.pixels[y0:y1, x0:x1] = pixels[y0 - y:y1 - y, x0 - x:x1 - x]

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def save(self, path: Path) -> Path:
        """Encode as PNG, writing through a temporary file that is renamed into place."""
        path = replace_atomically(path, lambda f: self.to_image().save(f, format=OUTPUT_FORMAT))
        logger.debug(f"Saved canvas {self.width}x{self.height} to {path}")
        return path
