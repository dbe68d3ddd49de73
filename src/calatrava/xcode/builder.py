"""Build and save the Xcode project for a generated application."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from ..errors import IoError
from .model import APPLICATION_PRODUCT_TYPE, BuildConfiguration, NativeTarget, XcodeProject
from .pbxproj import serialize
from .settings import DEFAULT_BUILD_SETTINGS, EXCLUDED_SETTINGS, BuildSettingsTable, project_settings
from .tree import build_group, scan_tree

__all__ = ["SYSTEM_FRAMEWORKS", "XcodeProjectBuilder"]


LOGGER = logging.getLogger(__name__)

SYSTEM_FRAMEWORKS = ("Foundation", "UIKit", "CoreGraphics")
PROJECT_FILENAME = "project.pbxproj"


@dataclass(slots=True)
class XcodeProjectBuilder:
    """Create the Xcode project that mirrors an ``ios`` directory.

    Parameters
    ----------
    settings:
        Table consulted for per-platform and per-configuration defaults.
    platform:
        Platform tag used for the lookups in ``settings``.
    frameworks:
        System frameworks linked into the application target.
    configurations:
        Names of the build configurations to generate.
    source_dir:
        Directory, relative to the ``ios`` base, whose contents become groups.
    """

    settings: BuildSettingsTable = field(default_factory=lambda: DEFAULT_BUILD_SETTINGS)
    platform: str = "ios"
    frameworks: Sequence[str] = SYSTEM_FRAMEWORKS
    configurations: Sequence[str] = ("Debug", "Release")
    source_dir: str = "src"

    def build(self, project_name: str, base_dir: str | Path) -> XcodeProject:
        """Return the in-memory project for the sources below ``base_dir/source_dir``."""

        base_dir = Path(base_dir)
        tree = scan_tree(base_dir / self.source_dir, base_dir)

        project = XcodeProject(
            name=project_name,
            build_configurations=[
                BuildConfiguration(name, self.settings.resolve("all", name)) for name in self.configurations
            ],
        )
        for framework in self.frameworks:
            project.add_system_framework(framework)

        target = self.create_target(project_name)
        target.add_source_files(build_group(tree, project.main_group))
        project.targets.append(target)
        return project

    def create_target(self, project_name: str) -> NativeTarget:
        """Return the application target with its configurations filled in."""

        overrides = project_settings(project_name)
        configurations = [
            BuildConfiguration(
                name,
                self.settings.resolve(self.platform, name, overrides, excluded=EXCLUDED_SETTINGS),
            )
            for name in self.configurations
        ]
        return NativeTarget(
            product_name=project_name,
            product_type=APPLICATION_PRODUCT_TYPE,
            build_configurations=configurations,
        )

    def save(self, project: XcodeProject, path: str | Path) -> Path:
        """Write ``project`` into the ``.xcodeproj`` bundle at ``path``.

        The whole file is serialized before anything touches the disk, so a
        serialization failure leaves an existing bundle untouched.
        """

        text = serialize(project)
        bundle = Path(path)
        destination = bundle / PROJECT_FILENAME
        try:
            bundle.mkdir(parents=True, exist_ok=True)
            destination.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise IoError(destination, exc) from exc
        return destination

    def create_project_file(self, project_name: str, base_dir: str | Path) -> Path:
        """Build the project for ``base_dir`` and save it as ``<project_name>.xcodeproj``."""

        base_dir = Path(base_dir)
        project = self.build(project_name, base_dir)
        bundle = base_dir / f"{project_name}.xcodeproj"
        destination = self.save(project, bundle)
        LOGGER.info(
            "wrote Xcode project %s (%d source files)",
            bundle,
            sum(len(target.source_files) for target in project.targets),
        )
        return destination
