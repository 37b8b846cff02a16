"""Shared pytest fixtures for welder tests."""

import tomllib
from pathlib import Path

import pytest

from welder.assets import SpriteAsset
from welder.config import parse_config

from helpers import MINIMAL_CONFIG, gradient_pixels, solid_pixels, write_png


# =============================================================================
# Sprite Fixtures
# =============================================================================


@pytest.fixture
def make_sprite():
    """Factory for in-memory SpriteAssets."""

    def _make(width: int, height: int, color=(255, 0, 0, 255), name: str = "sprite.png"):
        return SpriteAsset.from_array(name, solid_pixels(width, height, color))

    return _make


@pytest.fixture
def sprite_tree(tmp_path) -> Path:
    """Input directory with a handful of PNG sprites in nested folders."""
    root = tmp_path / "src"
    write_png(root / "hero.png", gradient_pixels(4, 3))
    write_png(root / "chars" / "slime.png", solid_pixels(2, 2, (0, 255, 0, 255)))
    write_png(root / "chars" / "bat.PNG", solid_pixels(3, 2, (0, 0, 255, 128)))
    write_png(root / "tiles" / "grass.png", solid_pixels(8, 8, (20, 200, 20, 255)))
    (root / "notes.txt").write_text("not a sprite")
    return root


# =============================================================================
# Project Fixtures
# =============================================================================


@pytest.fixture
def config():
    return parse_config(tomllib.loads(MINIMAL_CONFIG))


@pytest.fixture
def project_root(tmp_path, sprite_tree) -> Path:
    """Project root holding welder.toml and the sprite tree under src/."""
    (tmp_path / "welder.toml").write_text(MINIMAL_CONFIG)
    return tmp_path
