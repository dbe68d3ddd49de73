"""The calatrava project: identity, creation and queries over the generated tree."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, cast

from .android import AndroidTreeBuilder
from .config import ProjectOptions, load_metadata, save_metadata
from .errors import IoError, ProjectStateError
from .materialize import Materializer
from .naming import validate_project_name
from .source import Template
from .xcode import XcodeProjectBuilder

__all__ = ["Project", "ProjectState"]


LOGGER = logging.getLogger(__name__)

IOS_DIR = "ios"
MODULE_ROOT = ("kernel", "app")
MODULE_PREFIX = "app"


class ProjectState(str, Enum):
    """Lifecycle of a :class:`Project` handle."""

    UNINITIALIZED = "uninitialized"
    IDENTIFIED = "identified"
    MATERIALIZED = "materialized"
    PLATFORM_TREES_BUILT = "platform_trees_built"


class Project:
    """Handle on a single calatrava project.

    ``name`` is either the name of a project to create, or the path of an
    existing project directory, in which case the identity is read back from its
    ``calatrava.yml``. Collaborators can be injected; by default the project
    uses a plain :class:`Materializer`, :class:`AndroidTreeBuilder` and
    :class:`XcodeProjectBuilder`.
    """

    def __init__(
        self,
        name: str,
        overrides: Mapping[str, Any] | None = None,
        *,
        base_dir: str | Path | None = None,
        materializer: Materializer | None = None,
        android: AndroidTreeBuilder | None = None,
        xcode: XcodeProjectBuilder | None = None,
    ) -> None:
        self._requested = name
        self._overrides = dict(overrides or {})
        self._base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.materializer = materializer or Materializer()
        self.android = android or AndroidTreeBuilder()
        self.xcode = xcode or XcodeProjectBuilder()
        self._options: ProjectOptions | None = None
        self._path: Path | None = None
        self.state = ProjectState.UNINITIALIZED

    @classmethod
    def open(
        cls,
        name: str,
        overrides: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> "Project":
        """Construct and identify a project in one step."""

        project = cls(name, overrides, **kwargs)
        project.identify()
        return project

    def __repr__(self) -> str:
        return f"Project(name={self._requested!r}, state={self.state.value})"

    # -- identity ----------------------------------------------------------

    def identify(self) -> "Project":
        """Resolve the project's name, path and options.

        An existing directory is re-opened from its metadata sidecar; anything
        else is treated as the name of a new project. Overrides given at
        construction win over stored options, except that they may not
        rename the project.
        """

        candidate = (self._base_dir / self._requested).expanduser()
        if candidate.is_dir():
            path = candidate.resolve()
            stored = load_metadata(path)
        else:
            name = validate_project_name(self._requested)
            stored = ProjectOptions(project_name=name)
            path = (self._base_dir / name).resolve()

        renamed = self._overrides.get("project_name", stored.project_name)
        if renamed != stored.project_name:
            raise ValueError(
                f"cannot override project_name '{stored.project_name}' with '{renamed}'"
            )
        options = stored.merged(self._overrides)
        LOGGER.debug("identified project %s at %s", options.project_name, path)

        self._options = options
        self._path = path
        self.state = ProjectState.IDENTIFIED
        return self

    def _require(self, state: ProjectState) -> None:
        order = list(ProjectState)
        if order.index(self.state) < order.index(state):
            raise ProjectStateError(f"project is {self.state.value}; expected at least {state.value}")

    @property
    def options(self) -> ProjectOptions:
        self._require(ProjectState.IDENTIFIED)
        return cast(ProjectOptions, self._options)

    @property
    def name(self) -> str:
        return self.options.project_name

    @property
    def path(self) -> Path:
        self._require(ProjectState.IDENTIFIED)
        return cast(Path, self._path)

    @property
    def is_dev(self) -> bool:
        return self.options.is_dev

    # -- creation ----------------------------------------------------------

    def create(self, template: Template, *, android: bool = True, ios: bool = True) -> Path:
        """Materialize ``template`` and generate the platform trees.

        The steps run in order: metadata sidecar, template files, Android tree,
        Xcode project. The first failure propagates unchanged and whatever was
        already written stays on disk.
        """

        self._require(ProjectState.IDENTIFIED)
        path = self.path
        save_metadata(path, self.name)
        self.materializer.materialize(template, path, self.options.bindings())
        self.state = ProjectState.MATERIALIZED

        if android:
            self.android.build(path, self.name)
        if ios:
            self.xcode.create_project_file(self.name, path / IOS_DIR)
        self.state = ProjectState.PLATFORM_TREES_BUILT

        LOGGER.info("created project %s at %s", self.name, path)
        return path

    # -- queries -----------------------------------------------------------

    def modules(self) -> list[str]:
        """Names of the kernel modules, i.e. the directories below ``kernel/app``."""

        module_root = self.path.joinpath(*MODULE_ROOT)
        if not module_root.is_dir():
            return []
        try:
            return sorted(entry.name for entry in module_root.iterdir() if entry.is_dir())
        except OSError as exc:
            raise IoError(module_root, exc) from exc

    def src_paths(self) -> str:
        """Colon separated source path list covering every module."""

        return ":".join(f"{MODULE_PREFIX}/{module}" for module in self.modules())
