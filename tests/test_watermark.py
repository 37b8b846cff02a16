"""Tests for the watermark renderer and bitmap font."""

import numpy as np
import pytest

from welder.canvas import Canvas
from welder.config import WatermarkConfig
from welder.font import FALLBACK_GLYPH, GLYPHS, glyph_for, render_text_mask, text_block_size
from welder.watermark import anchor_origin, apply_watermark, blend_over


def _wm(**kwargs) -> WatermarkConfig:
    defaults = dict(enabled=True, text="A", opacity=1.0, position="top-left", margin_px=0, scale=1)
    defaults.update(kwargs)
    return WatermarkConfig(**defaults)


class TestFont:
    """Tests for the 5x7 glyph table."""

    def test_required_characters_present(self):
        for char in "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_. ":
            assert GLYPHS[char].shape == (7, 5)

    def test_lowercase_uses_uppercase_glyph(self):
        assert glyph_for("q") is GLYPHS["Q"]

    def test_unknown_character_falls_back(self):
        assert glyph_for("@") is FALLBACK_GLYPH
        assert FALLBACK_GLYPH.all()

    @pytest.mark.parametrize("text,scale,expected", [
        ("A", 1, (5, 7)),
        ("AB", 1, (11, 7)),
        ("ABC", 2, (34, 14)),
        ("", 3, (0, 0)),
    ])
    def test_block_size(self, text, scale, expected):
        """Width counts glyphs plus one scaled spacing column between them."""
        assert text_block_size(text, scale) == expected

    def test_mask_spacing_column_blank(self):
        mask = render_text_mask("--", 2)
        assert mask.shape == (14, 22)
        assert not mask[:, 10:12].any()
        assert mask[6:8, 0:10].all()


class TestBlendOver:
    """Tests for source-over blending."""

    def test_full_opacity_replaces_color(self):
        dst = np.array([[10, 20, 30, 255], [0, 0, 0, 0]], dtype=np.uint8)
        out = blend_over(dst, 1.0)
        assert (out == 255).all()

    def test_zero_opacity_leaves_destination(self):
        dst = np.array([[10, 20, 30, 255], [40, 50, 60, 77], [1, 2, 3, 0]], dtype=np.uint8)
        assert np.array_equal(blend_over(dst, 0.0), dst)

    def test_half_over_opaque_black(self):
        dst = np.array([[0, 0, 0, 255]], dtype=np.uint8)
        out = blend_over(dst, 0.5)
        assert tuple(out[0]) == (128, 128, 128, 255)

    def test_half_over_transparent(self):
        """Over a transparent pixel the result is white at the source alpha."""
        dst = np.array([[5, 6, 7, 0]], dtype=np.uint8)
        out = blend_over(dst, 0.5)
        assert tuple(out[0]) == (255, 255, 255, 128)


class TestAnchorOrigin:
    """Tests for anchor placement."""

    @pytest.mark.parametrize("anchor,expected", [
        ("top-left", (3, 3)),
        ("top-right", (87, 3)),
        ("bottom-left", (3, 40)),
        ("bottom-right", (87, 40)),
        ("center", (45, 21)),
    ])
    def test_positions(self, anchor, expected):
        assert anchor_origin(anchor, (100, 50), (10, 7), 3) == expected


class TestApplyWatermark:
    """Tests for apply_watermark."""

    def test_missing_or_disabled_is_noop(self):
        canvas = Canvas(20, 20, (1, 2, 3, 255))
        before = canvas.pixels.copy()
        assert apply_watermark(canvas, None) is False
        assert apply_watermark(canvas, _wm(enabled=False)) is False
        assert apply_watermark(canvas, _wm(text="   ")) is False
        assert apply_watermark(canvas, _wm(opacity=0.0)) is False
        assert np.array_equal(canvas.pixels, before)

    def test_glyph_pixels_whitened(self):
        canvas = Canvas(10, 10, (0, 0, 0, 255))
        assert apply_watermark(canvas, _wm(text="-", margin_px=1)) is True
        # '-' lights row 3 of the glyph
        assert (canvas.pixels[4, 1:6] == (255, 255, 255, 255)).all()
        assert (canvas.pixels[3, 1:6] == (0, 0, 0, 255)).all()
        assert (canvas.pixels[4, 6:] == (0, 0, 0, 255)).all()

    def test_text_upper_cased(self):
        lower = Canvas(12, 8, (0, 0, 0, 255))
        upper = Canvas(12, 8, (0, 0, 0, 255))
        apply_watermark(lower, _wm(text="ab"))
        apply_watermark(upper, _wm(text="AB"))
        assert np.array_equal(lower.pixels, upper.pixels)

    def test_clipped_when_larger_than_canvas(self):
        """Text bigger than the canvas is clipped instead of failing."""
        canvas = Canvas(4, 4, (0, 0, 0, 255))
        assert apply_watermark(canvas, _wm(text="WELDER", position="bottom-right", margin_px=0, scale=3)) is True
        assert canvas.pixels.shape == (4, 4, 4)

    def test_straddling_block_keeps_visible_part(self):
        """A block hanging off the top-left keeps exactly its on-canvas pixels."""
        canvas = Canvas(3, 5, (0, 0, 0, 255))
        # 5x7 block at (-2, -2); the dot lights glyph rows 5-6, cols 1-2
        assert apply_watermark(canvas, _wm(text=".", position="bottom-right")) is True
        expected = np.zeros((5, 3, 4), dtype=np.uint8)
        expected[..., 3] = 255
        expected[3:5, 0] = (255, 255, 255, 255)
        assert np.array_equal(canvas.pixels, expected)

    def test_straddling_right_edge(self):
        canvas = Canvas(3, 8, (0, 0, 0, 255))
        assert apply_watermark(canvas, _wm(text="-")) is True
        assert (canvas.pixels[3] == (255, 255, 255, 255)).all()
        others = np.delete(canvas.pixels, 3, axis=0)
        assert (others == (0, 0, 0, 255)).all()

    def test_entirely_off_canvas(self):
        canvas = Canvas(5, 5, (0, 0, 0, 255))
        before = canvas.pixels.copy()
        assert apply_watermark(canvas, _wm(margin_px=50)) is False
        assert np.array_equal(canvas.pixels, before)

    def test_auto_scale(self):
        """Without an explicit scale, large canvases get bigger glyphs."""
        canvas = Canvas(256, 256, (0, 0, 0, 255))
        apply_watermark(canvas, _wm(text=".", scale=None))
        # '.' at scale 2: rows 5-6 and cols 1-2 of the glyph, doubled
        assert (canvas.pixels[10:14, 2:6] == 255).all()
        assert (canvas.pixels[0:10, :] == (0, 0, 0, 255)).all()
