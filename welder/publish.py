"""
Publishing strategies.

The pipeline only ever talks to the ``Publisher`` protocol; the itch.io
``butler`` implementation is the default and tests substitute a fake.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol

from welder.errors import ConfigError, ExternalToolError

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    """Uploads a finished archive to a distribution channel."""

    name: str

    def check(self) -> str:
        """Verify the publisher is usable; return a version/description string."""
        ...

    def command(self, archive: Path, target: str, channel: str) -> List[str]:
        """The command line ``push`` would run, for dry-run reporting."""
        ...

    def push(self, archive: Path, target: str, channel: str) -> None:
        ...


class ButlerPublisher:
    """Pushes archives to itch.io with the ``butler`` CLI."""

    name = "butler"

    def __init__(self, executable: str = "butler"):
        self.executable = executable

    def _resolve(self) -> str:
        path = shutil.which(self.executable)
        if path is None:
            raise ExternalToolError(
                f"'{self.executable}' not found on PATH (install it from https://itch.io/docs/butler/)"
            )
        return path

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        try:
            result = subprocess.run(args, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ExternalToolError(f"failed to launch {args[0]}") from exc
        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise ExternalToolError(
                f"{self.name} exited with status {result.returncode}: {detail}"
            )
        return result

    def check(self) -> str:
        result = self._run([self._resolve(), "version"])
        return (result.stdout or result.stderr).strip()

    def command(self, archive: Path, target: str, channel: str) -> List[str]:
        return [self.executable, "push", str(archive), f"{target}:{channel}"]

    def push(self, archive: Path, target: str, channel: str) -> None:
        args = self.command(archive, target, channel)
        args[0] = self._resolve()
        logger.info(f"Pushing {archive} to {target}:{channel}")
        self._run(args)


def require_target(target: Optional[str]) -> str:
    if not target:
        raise ConfigError("publish.target is not set (expected 'user/game')")
    return target
