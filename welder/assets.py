"""
Sprite loading.

Decodes discovered PNG files into immutable RGBA pixel buffers.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

import numpy as np
from PIL import Image

from welder.errors import ImageDecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpriteAsset:
    """A decoded sprite; ``pixels`` is a read-only (height, width, 4) uint8 array."""

    relative_path: str
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple:
        return (self.width, self.height)

    @classmethod
    def from_array(cls, relative_path: str, pixels: np.ndarray) -> "SpriteAsset":
        """Wrap an RGBA array, copying it and freezing the copy."""
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"expected an (h, w, 4) array, got shape {pixels.shape}")
        frozen = np.array(pixels, dtype=np.uint8, copy=True)
        frozen.setflags(write=False)
        return cls(relative_path=relative_path, pixels=frozen)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))


def load_sprite(root: Path, relative_path: str) -> SpriteAsset:
    """
    Decode ``<root>/<relative_path>`` into a SpriteAsset.

    Raises:
        ImageDecodeError: The file is missing, unreadable or not a valid image
    """
    path = Path(root) / relative_path
    try:
        with Image.open(path) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(path, str(exc)) from exc

    pixels = np.asarray(rgba, dtype=np.uint8)
    logger.debug(f"Loaded {relative_path} ({rgba.width}x{rgba.height})")
    return SpriteAsset.from_array(relative_path, pixels)


def load_sprites(root: Path, relative_paths: Sequence[str]) -> List[SpriteAsset]:
    """Load every sprite in order; the first failure aborts the whole batch."""
    return [load_sprite(root, rel) for rel in relative_paths]
