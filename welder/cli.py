#!/usr/bin/env python3
"""
Welder CLI

Turn raw pixel art into ship-ready asset packs:
1. init     - Scaffold welder.toml and project folders
2. doctor   - Verify environment, config and external dependencies
3. build    - Export sprites at every configured resolution
4. preview  - Render sheet/grid preview images
5. package  - Create a versioned, reproducible zip
6. publish  - Package and push to itch.io via butler
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from welder.config import DEFAULT_CONFIG_NAME, DEFAULT_PROFILE
from welder.doctor import default_publisher, run_checks
from welder.errors import WelderError
from welder.pipeline import Project
from welder.publish import Publisher
from welder.scaffold import init_project
from welder.scaling import parse_resolutions

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def _load(args) -> Project:
    return Project.load(Path(args.cwd), args.config, args.profile)


def handle_init(args) -> int:
    """Scaffold a new project."""
    result = init_project(
        Path(args.cwd),
        name=args.name,
        author=args.author,
        brand=args.brand,
        input_dir=args.input,
        overwrite=args.yes,
        config_name=args.config,
    )
    print(f"Wrote: {result.config_path}")
    for directory in result.created_dirs:
        print(f"Created: {directory}")
    return 0


def handle_doctor(args) -> int:
    """Report environment and project health."""
    publisher = args.publisher_factory() if args.butler else None
    checks = run_checks(Path(args.cwd), args.config, DEFAULT_PROFILE, publisher)
    for check in checks:
        mark = "ok" if check.ok else "FAIL"
        print(f"[{mark:>4}] {check.name}: {check.detail}")
    return 0 if all(check.ok for check in checks) else 1


def handle_build(args) -> int:
    """Export sprites at each resolution."""
    project = _load(args)
    override = parse_resolutions(args.res) if args.res else None
    report = project.build(resolutions=override, clean=args.clean, dry_run=args.dry_run)

    verb = "Would write" if args.dry_run else "Wrote"
    if report.cleaned:
        print(f"{'Would remove' if args.dry_run else 'Removed'}: {project.paths.exports}")
    for write in report.writes:
        print(f"{verb}: {write.destination} ({write.width}x{write.height})")
    factors = ", ".join(f"{f}x" for f in report.factors)
    print(f"{report.sprite_count} sprite(s) at {factors}")
    return 0


def handle_preview(args) -> int:
    """Render preview images."""
    project = _load(args)
    report = project.preview(style=args.style, dry_run=args.dry_run)
    verb = "Would write" if args.dry_run else "Wrote"
    for image in report.images:
        suffix = ", watermarked" if image.watermarked else ""
        print(f"{verb}: {image.destination} ({image.width}x{image.height}{suffix})")
    return 0


def handle_package(args) -> int:
    """Create the distributable archive."""
    project = _load(args)
    report = project.package(
        out=Path(args.out) if args.out else None,
        include_previews=args.include_previews,
        readme=not args.no_readme,
    )
    print(f"Packaged: {report.archive}")
    return 0


def handle_publish(args) -> int:
    """Package and push."""
    project = _load(args)
    publisher = args.publisher_factory()

    if not args.dry_run and not args.yes:
        target = project.config.publish.target or "<unset>"
        channel = args.channel or project.config.publish.channel
        try:
            answer = input(f"Publish {project.archive_path.name} to {target}:{channel}? [y/N] ")
        except EOFError:
            # Closed stdin counts as a "no"
            answer = ""
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return 1

    report = project.publish(publisher=publisher, channel=args.channel, dry_run=args.dry_run)
    if report.dry_run:
        print(f"Would package: {report.archive}")
        print(f"Would run: {' '.join(report.command)}")
    else:
        print(f"Published: {report.archive} -> {report.target}:{report.channel}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="welder",
        description="Welder - Turn raw pixel art into ship-ready asset packs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  welder init --name "Dungeon Tiles" --author "Jo"
  welder build --res 1,2,4 --dry-run
  welder preview --style sheet
  welder package --include-previews
  welder -C ./my-pack publish --channel assets --yes
        """,
    )
    parser.add_argument(
        "-C", "--cwd", type=str, default=".", help="Project root (default: .)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_NAME,
        help=f"Config file, relative to the project root (default: {DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Init command
    init_parser = subparsers.add_parser("init", help="Scaffold welder.toml and project folders")
    init_parser.add_argument("--name", type=str, help="Pack name")
    init_parser.add_argument("--author", type=str, help="Author credit")
    init_parser.add_argument("--brand", type=str, help="Brand / studio name")
    init_parser.add_argument(
        "--input", type=str, default="src", help="Sprite source directory (default: src)"
    )
    init_parser.add_argument("--yes", action="store_true", help="Overwrite an existing config")
    init_parser.set_defaults(handler=handle_init)

    # Doctor command
    doctor_parser = subparsers.add_parser(
        "doctor", help="Verify environment, config, and external dependencies"
    )
    doctor_parser.add_argument("--butler", action="store_true", help="Also check for butler")
    doctor_parser.set_defaults(handler=handle_doctor)

    # Build command
    build_parser_ = subparsers.add_parser("build", help="Build exports into dist/")
    _add_profile(build_parser_)
    build_parser_.add_argument(
        "--res", type=str, help="Resolutions replacing the configured ones (e.g. 1,2,4)"
    )
    build_parser_.add_argument("--clean", action="store_true", help="Remove exports first")
    build_parser_.add_argument("--dry-run", action="store_true", help="Report planned writes only")
    build_parser_.set_defaults(handler=handle_build)

    # Preview command
    preview_parser = subparsers.add_parser("preview", help="Generate preview images (sheet/grid)")
    _add_profile(preview_parser)
    preview_parser.add_argument(
        "--style",
        choices=["sheet", "grid", "both"],
        default=None,
        help="Preview style (default: configured styles)",
    )
    preview_parser.add_argument("--dry-run", action="store_true", help="Report planned writes only")
    preview_parser.set_defaults(handler=handle_preview)

    # Package command
    package_parser = subparsers.add_parser("package", help="Create a versioned zip in dist/package/")
    _add_profile(package_parser)
    package_parser.add_argument("--out", type=str, help="Archive path override")
    package_parser.add_argument(
        "--include-previews", action="store_true", help="Add previews/ to the archive"
    )
    package_parser.add_argument("--no-readme", action="store_true", help="Omit README.md")
    package_parser.set_defaults(handler=handle_package)

    # Publish command
    publish_parser = subparsers.add_parser("publish", help="Package + publish to itch.io via butler")
    _add_profile(publish_parser)
    publish_parser.add_argument("--channel", type=str, help="itch.io channel override")
    publish_parser.add_argument("--dry-run", action="store_true", help="Report without uploading")
    publish_parser.add_argument("--yes", action="store_true", help="Skip confirmation")
    publish_parser.set_defaults(handler=handle_publish)

    return parser


def _add_profile(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--profile",
        type=str,
        default=DEFAULT_PROFILE,
        help=f"Config profile (default: {DEFAULT_PROFILE})",
    )


def report_error(exc: BaseException) -> None:
    """Print an error and its cause chain to stderr."""
    print(f"error: {exc}", file=sys.stderr)
    cause = exc.__cause__ or exc.__context__
    while cause is not None:
        print(f"  caused by: {type(cause).__name__}: {cause}", file=sys.stderr)
        cause = cause.__cause__ or cause.__context__


def main(
    argv: Optional[List[str]] = None,
    publisher_factory: Callable[[], Publisher] = default_publisher,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.publisher_factory = publisher_factory
    configure_logging(args.verbose)

    try:
        return args.handler(args)
    except WelderError as exc:
        logger.debug("Command failed", exc_info=True)
        report_error(exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
