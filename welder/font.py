"""
5x7 bitmap glyphs for watermark text.

Each glyph is seven rows of five columns; ``#`` marks a lit pixel.
"""

import numpy as np

GLYPH_WIDTH = 5
GLYPH_HEIGHT = 7

_GLYPH_ROWS = {
    "A": [".###.", "#...#", "#...#", "#####", "#...#", "#...#", "#...#"],
    "B": ["####.", "#...#", "#...#", "####.", "#...#", "#...#", "####."],
    "C": [".###.", "#...#", "#....", "#....", "#....", "#...#", ".###."],
    "D": ["####.", "#...#", "#...#", "#...#", "#...#", "#...#", "####."],
    "E": ["#####", "#....", "#....", "####.", "#....", "#....", "#####"],
    "F": ["#####", "#....", "#....", "####.", "#....", "#....", "#...."],
    "G": [".###.", "#...#", "#....", "#.###", "#...#", "#...#", ".####"],
    "H": ["#...#", "#...#", "#...#", "#####", "#...#", "#...#", "#...#"],
    "I": [".###.", "..#..", "..#..", "..#..", "..#..", "..#..", ".###."],
    "J": ["..###", "...#.", "...#.", "...#.", "...#.", "#..#.", ".##.."],
    "K": ["#...#", "#..#.", "#.#..", "##...", "#.#..", "#..#.", "#...#"],
    "L": ["#....", "#....", "#....", "#....", "#....", "#....", "#####"],
    "M": ["#...#", "##.##", "#.#.#", "#.#.#", "#...#", "#...#", "#...#"],
    "N": ["#...#", "#...#", "##..#", "#.#.#", "#..##", "#...#", "#...#"],
    "O": [".###.", "#...#", "#...#", "#...#", "#...#", "#...#", ".###."],
    "P": ["####.", "#...#", "#...#", "####.", "#....", "#....", "#...."],
    "Q": [".###.", "#...#", "#...#", "#...#", "#.#.#", "#..#.", ".##.#"],
    "R": ["####.", "#...#", "#...#", "####.", "#.#..", "#..#.", "#...#"],
    "S": [".####", "#....", "#....", ".###.", "....#", "....#", "####."],
    "T": ["#####", "..#..", "..#..", "..#..", "..#..", "..#..", "..#.."],
    "U": ["#...#", "#...#", "#...#", "#...#", "#...#", "#...#", ".###."],
    "V": ["#...#", "#...#", "#...#", "#...#", "#...#", ".#.#.", "..#.."],
    "W": ["#...#", "#...#", "#...#", "#.#.#", "#.#.#", "#.#.#", ".#.#."],
    "X": ["#...#", "#...#", ".#.#.", "..#..", ".#.#.", "#...#", "#...#"],
    "Y": ["#...#", "#...#", ".#.#.", "..#..", "..#..", "..#..", "..#.."],
    "Z": ["#####", "....#", "...#.", "..#..", ".#...", "#....", "#####"],
    "0": [".###.", "#...#", "#..##", "#.#.#", "##..#", "#...#", ".###."],
    "1": ["..#..", ".##..", "..#..", "..#..", "..#..", "..#..", ".###."],
    "2": [".###.", "#...#", "....#", "...#.", "..#..", ".#...", "#####"],
    "3": ["#####", "...#.", "..#..", "...#.", "....#", "#...#", ".###."],
    "4": ["...#.", "..##.", ".#.#.", "#..#.", "#####", "...#.", "...#."],
    "5": ["#####", "#....", "####.", "....#", "....#", "#...#", ".###."],
    "6": ["..##.", ".#...", "#....", "####.", "#...#", "#...#", ".###."],
    "7": ["#####", "....#", "...#.", "..#..", ".#...", ".#...", ".#..."],
    "8": [".###.", "#...#", "#...#", ".###.", "#...#", "#...#", ".###."],
    "9": [".###.", "#...#", "#...#", ".####", "....#", "...#.", ".##.."],
    "-": [".....", ".....", ".....", "#####", ".....", ".....", "....."],
    "_": [".....", ".....", ".....", ".....", ".....", ".....", "#####"],
    ".": [".....", ".....", ".....", ".....", ".....", ".##..", ".##.."],
    " ": [".....", ".....", ".....", ".....", ".....", ".....", "....."],
}

# Drawn for any character without a glyph
_FALLBACK_ROWS = ["#####"] * GLYPH_HEIGHT


def _to_mask(rows) -> np.ndarray:
    mask = np.array([[cell == "#" for cell in row] for row in rows], dtype=bool)
    mask.setflags(write=False)
    return mask


GLYPHS = {char: _to_mask(rows) for char, rows in _GLYPH_ROWS.items()}
FALLBACK_GLYPH = _to_mask(_FALLBACK_ROWS)


def glyph_for(char: str) -> np.ndarray:
    """Boolean (7, 5) mask for ``char``, upper-cased, or the fallback block."""
    return GLYPHS.get(char.upper(), FALLBACK_GLYPH)


def text_block_size(text: str, scale: int) -> tuple:
    """(width, height) in pixels of ``text`` at integer ``scale``, one scaled column between glyphs."""
    if not text:
        return (0, 0)
    count = len(text)
    width = count * GLYPH_WIDTH * scale + (count - 1) * scale
    return (width, GLYPH_HEIGHT * scale)


def render_text_mask(text: str, scale: int) -> np.ndarray:
    """Boolean (height, width) coverage mask for ``text`` at ``scale``."""
    text = text.upper()
    width, height = text_block_size(text, scale)
    mask = np.zeros((height, width), dtype=bool)
    block = np.ones((scale, scale), dtype=bool)
    advance = (GLYPH_WIDTH + 1) * scale
    for i, char in enumerate(text):
        x = i * advance
        mask[:, x:x + GLYPH_WIDTH * scale] = np.kron(glyph_for(char), block)
    return mask
