"""
Project scaffolding for ``welder init``.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from welder.config import DEFAULT_CONFIG_NAME
from welder.errors import ConfigError, WelderIOError

logger = logging.getLogger(__name__)

CONFIG_TEMPLATE = """[pack]
name = "{name}"
slug = "{slug}"
author = "{author}"
brand = "{brand}"
license = "CC0-1.0"
semver = "0.1.0"

[paths]
input = "{input}"
dist = "dist"
previews = "dist/previews"
exports = "dist/exports"
package = "dist/package"

[inputs]
include = ["**/*.png"]
exclude = []

[build]
resolutions = [1, 2, 4]

[preview]
styles = ["sheet", "grid"]
background = "#1a1c2c"

[preview.watermark]
enabled = false
text = "{watermark}"
opacity = 0.5
position = "bottom-right"
margin_px = 4

[sheet]
max_width = 2048
max_height = 2048
padding_px = 2

[grid]
cell_px = 32
padding_px = 4
columns = 8

[publish]
channel = "assets"
"""


@dataclass
class ScaffoldResult:
    config_path: Path
    created_dirs: List[Path] = field(default_factory=list)


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "asset-pack"


def _toml_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def init_project(
    root: Path,
    name: Optional[str] = None,
    author: Optional[str] = None,
    brand: Optional[str] = None,
    input_dir: str = "src",
    overwrite: bool = False,
    config_name: str = DEFAULT_CONFIG_NAME,
) -> ScaffoldResult:
    """
    Write a starter config and create the input and dist directories.

    Raises:
        ConfigError: The config already exists and ``overwrite`` is False
        WelderIOError: Files or directories could not be created
    """
    root = Path(root)
    config_path = root / config_name
    if config_path.exists() and not overwrite:
        raise ConfigError(f"{config_path} already exists (pass --yes to overwrite)")

    name = name or root.resolve().name or "Asset Pack"
    text = CONFIG_TEMPLATE.format(
        name=_toml_string(name),
        slug=slugify(name),
        author=_toml_string(author or ""),
        brand=_toml_string(brand or ""),
        input=_toml_string(input_dir),
        watermark=_toml_string(brand or name),
    )

    result = ScaffoldResult(config_path=config_path)
    try:
        root.mkdir(parents=True, exist_ok=True)
        config_path.write_text(text, encoding="utf-8")
        for directory in (root / input_dir, root / "dist"):
            if not directory.exists():
                directory.mkdir(parents=True)
                result.created_dirs.append(directory)
    except OSError as exc:
        raise WelderIOError(f"cannot scaffold project in {root}") from exc

    logger.info(f"Wrote {config_path}")
    return result
