"""
Welder - turn a directory of pixel-art sprites into multi-resolution
exports, composite previews and a reproducible distributable archive.
"""

from welder.archive import build_archive
from welder.assets import SpriteAsset, load_sprite, load_sprites
from welder.config import WelderConfig, load_config
from welder.discover import discover_sprites
from welder.export import export_sprites
from welder.grid import compose_grid, layout_grid
from welder.pipeline import Project
from welder.scaling import ScaleFactorSet
from welder.sheet import compose_sheet, pack_sheet
from welder.watermark import apply_watermark

__version__ = "0.1.0"

__all__ = [
    "Project",
    "ScaleFactorSet",
    "SpriteAsset",
    "WelderConfig",
    "apply_watermark",
    "build_archive",
    "compose_grid",
    "compose_sheet",
    "discover_sprites",
    "export_sprites",
    "layout_grid",
    "load_config",
    "load_sprite",
    "load_sprites",
    "pack_sheet",
]
