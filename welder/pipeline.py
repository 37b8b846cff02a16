"""
Pipeline commands bound to one project root.

Every operation takes its root explicitly; the process working directory
is never consulted or changed.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from welder.archive import build_archive
from welder.assets import load_sprites
from welder.config import DEFAULT_CONFIG_NAME, DEFAULT_PROFILE, ProjectPaths, WelderConfig, load_config
from welder.discover import discover_sprites
from welder.errors import WelderIOError
from welder.export import ExportReport, export_sprites, scan_exports
from welder.preview import PreviewReport, render_previews, resolve_styles
from welder.publish import ButlerPublisher, Publisher, require_target
from welder.readme import render_readme
from welder.scaling import ScaleFactorSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageReport:
    archive: Path
    include_previews: bool
    readme: bool
    dry_run: bool = False


@dataclass(frozen=True)
class PublishReport:
    archive: Path
    target: str
    channel: str
    command: List[str]
    dry_run: bool


class Project:
    """A validated configuration anchored at a project root."""

    def __init__(self, root: Path, config: WelderConfig):
        self.root = Path(root)
        self.config = config
        self.paths: ProjectPaths = config.resolve_paths(self.root)

    @classmethod
    def load(
        cls,
        root: Path,
        config_name: str = DEFAULT_CONFIG_NAME,
        profile: str = DEFAULT_PROFILE,
    ) -> "Project":
        return cls(root, load_config(root, config_name, profile))

    def discover(self) -> List[str]:
        return discover_sprites(
            self.paths.input,
            self.config.inputs.include,
            self.config.inputs.exclude,
        )

    def scale_factors(self, override: Optional[ScaleFactorSet] = None) -> ScaleFactorSet:
        return ScaleFactorSet.resolve(override, self.config.build.resolutions)

    @property
    def archive_path(self) -> Path:
        return self.paths.package / self.config.archive_name

    def build(
        self,
        resolutions: Optional[ScaleFactorSet] = None,
        clean: bool = False,
        dry_run: bool = False,
    ) -> ExportReport:
        """Export every discovered sprite at each resolved scale factor."""
        factors = self.scale_factors(resolutions)
        return export_sprites(
            self.paths.input,
            self.discover(),
            factors,
            self.paths.exports,
            dry_run=dry_run,
            clean=clean,
        )

    def preview(self, style: Optional[str] = None, dry_run: bool = False) -> PreviewReport:
        """Render sheet and/or grid previews of the discovered sprites."""
        styles = resolve_styles(style, self.config.preview.styles)
        sprites = load_sprites(self.paths.input, self.discover())
        return render_previews(sprites, self.config, self.paths.previews, styles, dry_run=dry_run)

    def package(
        self,
        out: Optional[Path] = None,
        include_previews: bool = False,
        readme: bool = True,
        dry_run: bool = False,
    ) -> PackageReport:
        """Archive the export tree (and optionally previews) deterministically."""
        destination = self._anchor(out) if out is not None else self.archive_path
        if not self.paths.exports.is_dir():
            raise WelderIOError(
                f"export tree {self.paths.exports} does not exist (run 'welder build' first)"
            )
        if include_previews and not self.paths.previews.is_dir():
            raise WelderIOError(
                f"preview tree {self.paths.previews} does not exist (run 'welder preview' first)"
            )

        report = PackageReport(destination, include_previews, readme, dry_run)
        if dry_run:
            return report

        readme_text = None
        if readme:
            exported = scan_exports(self.paths.exports)
            readme_text = render_readme(
                self.config.pack,
                exported.factors,
                sprite_count=exported.sprite_count,
                include_previews=include_previews,
            )
        build_archive(
            self.paths.exports,
            destination,
            previews_root=self.paths.previews if include_previews else None,
            readme=readme_text,
        )
        return report

    def publish(
        self,
        publisher: Optional[Publisher] = None,
        channel: Optional[str] = None,
        dry_run: bool = False,
    ) -> PublishReport:
        """Package, then hand the finished archive to ``publisher``."""
        publisher = publisher or ButlerPublisher()
        target = require_target(self.config.publish.target)
        channel = channel or self.config.publish.channel

        if not dry_run:
            version = publisher.check()
            logger.info(f"Using {publisher.name} {version}")

        packaged = self.package(dry_run=dry_run)
        command = publisher.command(packaged.archive, target, channel)
        report = PublishReport(packaged.archive, target, channel, command, dry_run)
        if dry_run:
            return report

        publisher.push(packaged.archive, target, channel)
        return report

    def _anchor(self, path: Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.root / path
