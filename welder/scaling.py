"""
Integer-exact resolution scaling for pixel art.

All resampling here is nearest-neighbor; no smoothing filter is ever applied.
"""

from fractions import Fraction
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np

from welder.errors import ConfigError


class ScaleFactorSet:
    """Ascending, de-duplicated set of positive integer scale factors."""

    __slots__ = ("_factors",)

    def __init__(self, factors: Iterable[int]):
        values = []
        for factor in factors:
            if isinstance(factor, bool) or not isinstance(factor, int):
                raise ConfigError(f"scale factor must be an integer, got {factor!r}")
            if factor < 1:
                raise ConfigError(f"scale factor must be positive, got {factor}")
            values.append(factor)
        if not values:
            raise ConfigError("at least one scale factor is required")
        self._factors: Tuple[int, ...] = tuple(sorted(set(values)))

    @classmethod
    def resolve(
        cls,
        override: Optional[Iterable[int]],
        defaults: Iterable[int],
    ) -> "ScaleFactorSet":
        """An override replaces the defaults entirely; it is never merged."""
        if override is not None:
            return override if isinstance(override, cls) else cls(override)
        return cls(defaults)

    @property
    def factors(self) -> Tuple[int, ...]:
        return self._factors

    def __iter__(self) -> Iterator[int]:
        return iter(self._factors)

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, factor: object) -> bool:
        return factor in self._factors

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ScaleFactorSet):
            return self._factors == other._factors
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._factors)

    def __repr__(self) -> str:
        return f"ScaleFactorSet({list(self._factors)})"


def parse_resolutions(text: str) -> ScaleFactorSet:
    """Parse a CLI list such as ``"1,2,4"`` or ``"1x, 3x"``."""
    factors = []
    for token in text.split(","):
        token = token.strip().lower()
        if token.endswith("x"):
            token = token[:-1]
        if not token.isdigit():
            raise ConfigError(f"invalid resolution list '{text}': expected integers like 1,2,4")
        factors.append(int(token))
    return ScaleFactorSet(factors)


def scale_nearest(pixels: np.ndarray, factor: int) -> np.ndarray:
    """
    Block-replicate every pixel into a ``factor`` x ``factor`` square.

    Output pixel (x, y) equals source pixel (x // factor, y // factor).
    A factor of 1 returns an unmodified copy.
    """
    if factor < 1:
        raise ValueError(f"factor must be >= 1, got {factor}")
    if factor == 1:
        return pixels.copy()
    return np.repeat(np.repeat(pixels, factor, axis=0), factor, axis=1)


def resize_nearest(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Nearest-neighbor resample to exactly ``width`` x ``height``."""
    src_h, src_w = pixels.shape[:2]
    xs = (np.arange(width) * src_w) // width
    ys = (np.arange(height) * src_h) // height
    return pixels[ys[:, None], xs[None, :]]


def fit_dimensions(width: int, height: int, cell_px: int) -> Tuple[int, int]:
    """
    Uniformly fit ``width`` x ``height`` into a square cell.

    scale = min(cell/w, cell/h); each dimension is floored and clamped to
    [1, cell_px]. Exact rational arithmetic avoids float rounding drift.
    """
    scale = min(Fraction(cell_px, width), Fraction(cell_px, height))
    fit_w = max(1, min(cell_px, int(width * scale)))
    fit_h = max(1, min(cell_px, int(height * scale)))
    return fit_w, fit_h
