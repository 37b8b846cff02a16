"""
Environment and project checks for ``welder doctor``.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import PIL

from welder.config import DEFAULT_CONFIG_NAME, DEFAULT_PROFILE, load_config
from welder.discover import discover_sprites
from welder.errors import WelderError
from welder.publish import ButlerPublisher, Publisher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Check:
    name: str
    ok: bool
    detail: str


def run_checks(
    root: Path,
    config_name: str = DEFAULT_CONFIG_NAME,
    profile: str = DEFAULT_PROFILE,
    publisher: Optional[Publisher] = None,
) -> List[Check]:
    """Run every check and collect the results; nothing here raises."""
    checks = [
        Check("python", sys.version_info >= (3, 11), sys.version.split()[0]),
        Check("pillow", True, PIL.__version__),
        Check("numpy", True, np.__version__),
    ]

    try:
        config = load_config(root, config_name, profile)
    except WelderError as exc:
        checks.append(Check("config", False, str(exc)))
        config = None
    else:
        checks.append(Check("config", True, f"{config.pack.name} {config.pack.semver}"))

    if config is not None:
        paths = config.resolve_paths(root)
        if paths.input.is_dir():
            checks.append(Check("input", True, str(paths.input)))
            try:
                sprites = discover_sprites(paths.input, config.inputs.include, config.inputs.exclude)
            except WelderError as exc:
                checks.append(Check("sprites", False, str(exc)))
            else:
                checks.append(Check("sprites", bool(sprites), f"{len(sprites)} found"))
        else:
            checks.append(Check("input", False, f"{paths.input} does not exist"))

    if publisher is not None:
        try:
            version = publisher.check()
        except WelderError as exc:
            checks.append(Check(publisher.name, False, str(exc)))
        else:
            checks.append(Check(publisher.name, True, version))

    for check in checks:
        logger.debug(f"doctor {check.name}: ok={check.ok} {check.detail}")
    return checks


def default_publisher() -> Publisher:
    return ButlerPublisher()
