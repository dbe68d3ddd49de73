"""Generate the Android half of a project with the SDK's ``android`` tool."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from .errors import ExternalToolError, IoError
from .naming import android_package

__all__ = ["AndroidTreeBuilder", "CommandRunner", "merge_staging", "run_command"]


LOGGER = logging.getLogger(__name__)

ANDROID_DIR = "droid"
STAGING_DIR = "calatrava"
COMMAND_NOT_FOUND = 127

CommandRunner = Callable[[Sequence[str], Path], int]


def run_command(command: Sequence[str], cwd: Path) -> int:
    """Run ``command`` in ``cwd`` and block until it exits; return the exit status."""

    LOGGER.debug("running %s in %s", " ".join(command), cwd)
    try:
        completed = subprocess.run(list(command), cwd=cwd, check=False)
    except FileNotFoundError:
        return COMMAND_NOT_FOUND
    return completed.returncode


@dataclass(slots=True)
class AndroidTreeBuilder:
    """Create ``droid/<name>`` and overlay the staged template files on it."""

    runner: CommandRunner = run_command
    tool: str = "android"
    api_target: str = "android-10"
    activity: str = "Launcher"

    def command(self, project_name: str) -> list[str]:
        return [
            self.tool,
            "create",
            "project",
            "--name",
            project_name,
            "--path",
            project_name,
            "--package",
            android_package(project_name),
            "--target",
            self.api_target,
            "--activity",
            self.activity,
        ]

    def build(self, project_dir: str | Path, project_name: str) -> Path:
        """Generate the Android project below ``project_dir`` and return its root.

        Raises
        ------
        ExternalToolError
            If the generator exits with a non-zero status.
        """

        android_dir = Path(project_dir) / ANDROID_DIR
        try:
            android_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoError(android_dir, exc) from exc

        command = self.command(project_name)
        exit_code = self.runner(command, android_dir)
        if exit_code != 0:
            raise ExternalToolError(command, exit_code)

        generated = android_dir / project_name
        merge_staging(android_dir / STAGING_DIR, generated)
        LOGGER.info("generated Android project %s", generated)
        return generated


def merge_staging(staging: Path, destination: Path) -> None:
    """Copy everything below ``staging`` into ``destination`` and remove ``staging``."""

    if not staging.is_dir():
        LOGGER.debug("no staged Android files in %s", staging)
        return

    try:
        for source in sorted(staging.rglob("*")):
            target = destination / source.relative_to(staging)
            if source.is_dir():
                target.mkdir(parents=True, exist_ok=True)
            elif source.is_file():
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source, target)
        shutil.rmtree(staging)
    except OSError as exc:
        raise IoError(exc.filename or staging, exc) from exc
