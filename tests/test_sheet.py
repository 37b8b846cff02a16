"""Tests for the shelf sheet packer."""

import itertools

import numpy as np
import pytest

from welder.errors import LayoutOverflowError
from welder.sheet import compose_sheet, pack_sheet


def _assert_valid(layout, sizes):
    for placement, (w, h) in zip(layout.placements, sizes):
        assert (placement.width, placement.height) == (w, h)
        assert placement.x + w <= layout.width
        assert placement.y + h <= layout.height
    for a, b in itertools.combinations(layout.placements, 2):
        assert not a.overlaps(b), f"{a} overlaps {b}"


class TestPackSheet:
    """Tests for pack_sheet."""

    def test_two_sprites_wrap(self):
        """Two 8x8 sprites, max_width 20, padding 2 stack vertically."""
        layout = pack_sheet([(8, 8), (8, 8)], max_width=20, max_height=100, padding=2)
        assert [(p.x, p.y) for p in layout.placements] == [(2, 2), (2, 12)]
        assert (layout.width, layout.height) == (12, 22)

    def test_single_row(self):
        """Sprites that fit stay on one shelf."""
        layout = pack_sheet([(4, 4), (4, 6), (4, 2)], max_width=100, max_height=100, padding=1)
        assert [(p.x, p.y) for p in layout.placements] == [(1, 1), (6, 1), (11, 1)]
        assert (layout.width, layout.height) == (16, 8)

    def test_row_height_is_tallest_sprite(self):
        """The next shelf starts below the tallest sprite of the previous one."""
        layout = pack_sheet([(4, 10), (4, 3), (4, 4)], max_width=12, max_height=100, padding=0)
        assert [(p.x, p.y) for p in layout.placements] == [(0, 0), (4, 0), (8, 0)]
        layout = pack_sheet([(4, 10), (4, 3), (6, 4)], max_width=12, max_height=100, padding=0)
        assert layout.placements[2].y == 10

    def test_oversized_sprite_placed_at_row_start(self):
        """A sprite wider than max_width still goes on an empty shelf."""
        layout = pack_sheet([(50, 5)], max_width=20, max_height=100, padding=1)
        assert (layout.placements[0].x, layout.placements[0].y) == (1, 1)
        assert layout.width == 52

    def test_input_order_preserved(self):
        """Placements follow input order; nothing is size-sorted."""
        sizes = [(2, 2), (9, 9), (1, 1), (5, 3)]
        layout = pack_sheet(sizes, max_width=16, max_height=100, padding=1)
        assert [p.sprite_index for p in layout.placements] == [0, 1, 2, 3]

    def test_empty_input(self):
        """Zero sprites produce a minimal canvas."""
        layout = pack_sheet([], 10, 10, padding=3)
        assert (layout.width, layout.height) == (6, 6)

        layout = pack_sheet([], 10, 10, padding=0)
        assert (layout.width, layout.height) == (1, 1)
        assert layout.placements == []

    def test_overflow_raises(self):
        """Exceeding max_height is a hard failure."""
        with pytest.raises(LayoutOverflowError) as exc_info:
            pack_sheet([(8, 8)] * 3, max_width=12, max_height=25, padding=2)
        assert exc_info.value.sprite_index == 2
        assert exc_info.value.max_height == 25

    def test_exact_fit_does_not_overflow(self):
        layout = pack_sheet([(8, 8), (8, 8)], max_width=12, max_height=22, padding=2)
        assert layout.height == 22

    @pytest.mark.parametrize("seed", range(5))
    def test_random_layouts_never_overlap(self, seed):
        """No two placements intersect and all lie inside the canvas."""
        rng = np.random.default_rng(seed)
        sizes = [tuple(int(v) for v in rng.integers(1, 20, size=2)) for _ in range(40)]
        padding = int(rng.integers(0, 4))
        layout = pack_sheet(sizes, max_width=64, max_height=10_000, padding=padding)
        _assert_valid(layout, sizes)


class TestComposeSheet:
    """Tests for compose_sheet."""

    def test_background_and_blit(self, make_sprite):
        """Sprites are copied opaquely over the background fill."""
        sprites = [
            make_sprite(2, 2, (255, 0, 0, 255), "a.png"),
            make_sprite(2, 2, (0, 0, 255, 100), "b.png"),
        ]
        canvas, layout = compose_sheet(sprites, 100, 100, padding=1, background=(9, 9, 9, 255))
        assert canvas.size == (layout.width, layout.height) == (7, 4)
        assert tuple(canvas.pixels[0, 0]) == (9, 9, 9, 255)
        assert tuple(canvas.pixels[1, 1]) == (255, 0, 0, 255)
        # No blending: the translucent sprite replaces the background
        assert tuple(canvas.pixels[1, 4]) == (0, 0, 255, 100)

    def test_overflow_before_canvas(self, make_sprite):
        with pytest.raises(LayoutOverflowError):
            compose_sheet([make_sprite(10, 10)], 100, 5, padding=0, background=(0, 0, 0, 255))
