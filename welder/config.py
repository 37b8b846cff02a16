"""
Project configuration for welder.

A project is described by ``welder.toml`` at the project root. The document
is parsed with ``tomllib``, optionally overlaid with a named profile, and
validated against the pydantic models below before any pipeline step runs.
"""

import copy
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError, field_validator

from welder.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "welder.toml"
DEFAULT_PROFILE = "default"

# Supported raster format
SPRITE_EXTENSION = ".png"
OUTPUT_FORMAT = "PNG"

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
SLUG_PATTERN = r"^[a-z0-9][a-z0-9._-]*$"
SEMVER_PATTERN = r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"

Anchor = Literal["top-left", "top-right", "bottom-left", "bottom-right", "center"]
PreviewStyle = Literal["sheet", "grid"]


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PackConfig(_Section):
    """Pack metadata used for archive naming and the README."""

    name: str = Field(min_length=1)
    slug: str = Field(pattern=SLUG_PATTERN)
    author: str = ""
    brand: str = ""
    license: str = "CC0-1.0"
    semver: str = Field(default="0.1.0", pattern=SEMVER_PATTERN)


class PathsConfig(_Section):
    """Directory layout, relative to the project root unless absolute."""

    input: str = "src"
    dist: str = "dist"
    previews: str = "dist/previews"
    exports: str = "dist/exports"
    package: str = "dist/package"


class InputsConfig(_Section):
    include: list[str] = Field(default_factory=lambda: ["**/*.png"])
    exclude: list[str] = Field(default_factory=list)


class BuildConfig(_Section):
    resolutions: list[StrictInt] = Field(default_factory=lambda: [1, 2, 4], min_length=1)

    @field_validator("resolutions")
    @classmethod
    def _positive(cls, value: list[int]) -> list[int]:
        bad = [v for v in value if v < 1]
        if bad:
            raise ValueError(f"resolutions must be positive integers, got {bad}")
        return value


class WatermarkConfig(_Section):
    """Text overlay stamped onto preview canvases."""

    enabled: StrictBool = False
    text: str = ""
    opacity: float = Field(default=0.5, ge=0.0, le=1.0)
    position: Anchor = "bottom-right"
    margin_px: StrictInt = Field(default=4, ge=0)
    scale: Optional[StrictInt] = Field(default=None, ge=1)


class PreviewConfig(_Section):
    styles: list[PreviewStyle] = Field(default_factory=lambda: ["sheet", "grid"])
    background: str = Field(default="#000000", pattern=HEX_COLOR_PATTERN)
    watermark: Optional[WatermarkConfig] = None


class SheetConfig(_Section):
    max_width: StrictInt = Field(default=2048, ge=1)
    max_height: StrictInt = Field(default=2048, ge=1)
    padding_px: StrictInt = Field(default=2, ge=0)


class GridConfig(_Section):
    cell_px: StrictInt = Field(default=32, ge=1)
    padding_px: StrictInt = Field(default=4, ge=0)
    columns: StrictInt = Field(default=8, ge=1)


class PublishConfig(_Section):
    target: Optional[str] = Field(default=None, pattern=r"^[^/\s:]+/[^/\s:]+$")
    channel: str = Field(default="assets", min_length=1)


class WelderConfig(_Section):
    """Root of ``welder.toml``."""

    pack: PackConfig
    paths: PathsConfig = Field(default_factory=PathsConfig)
    inputs: InputsConfig = Field(default_factory=InputsConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    preview: PreviewConfig = Field(default_factory=PreviewConfig)
    sheet: SheetConfig = Field(default_factory=SheetConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)

    def resolve_paths(self, root: Path) -> "ProjectPaths":
        """Anchor the configured directories at ``root``."""
        root = Path(root)

        def _anchor(value: str) -> Path:
            path = Path(value)
            return path if path.is_absolute() else root / path

        return ProjectPaths(
            root=root,
            input=_anchor(self.paths.input),
            dist=_anchor(self.paths.dist),
            previews=_anchor(self.paths.previews),
            exports=_anchor(self.paths.exports),
            package=_anchor(self.paths.package),
        )

    @property
    def archive_name(self) -> str:
        return f"{self.pack.slug}-{self.pack.semver}.zip"


@dataclass(frozen=True)
class ProjectPaths:
    """Absolute directories for one project root."""

    root: Path
    input: Path
    dist: Path
    previews: Path
    exports: Path
    package: Path


def merge_tables(base: dict, overlay: dict) -> dict:
    """Deep-merge ``overlay`` into a copy of ``base``; tables merge, values replace."""
    merged = copy.deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_tables(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _format_validation_error(exc: ValidationError) -> str:
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        lines.append(f"{location}: {error['msg']}")
    return "; ".join(lines)


def parse_config(data: dict[str, Any], profile: str = DEFAULT_PROFILE) -> WelderConfig:
    """
    Validate a raw configuration document.

    Args:
        data: Parsed TOML document
        profile: Name of a ``[profiles.<name>]`` table to overlay

    Returns:
        Validated WelderConfig

    Raises:
        ConfigError: Unknown profile or any schema violation
    """
    data = dict(data)
    profiles = data.pop("profiles", {})
    if not isinstance(profiles, dict):
        raise ConfigError("profiles must be a table of named overlays")

    if profile in profiles:
        overlay = profiles[profile]
        if not isinstance(overlay, dict):
            raise ConfigError(f"profiles.{profile} must be a table")
        logger.debug(f"Applying profile overlay '{profile}'")
        data = merge_tables(data, overlay)
    elif profile != DEFAULT_PROFILE:
        known = ", ".join(sorted(profiles)) or "none defined"
        raise ConfigError(f"unknown profile '{profile}' ({known})")

    try:
        return WelderConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {_format_validation_error(exc)}") from exc


def load_config(
    root: Path,
    config_name: str = DEFAULT_CONFIG_NAME,
    profile: str = DEFAULT_PROFILE,
) -> WelderConfig:
    """Read and validate ``<root>/<config_name>``."""
    path = Path(config_name)
    if not path.is_absolute():
        path = Path(root) / path

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path} (run 'welder init')") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path} is not valid TOML") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}") from exc

    logger.info(f"Loaded config {path} (profile: {profile})")
    return parse_config(data, profile=profile)
