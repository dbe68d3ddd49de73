"""Project identity and the ``calatrava.yml`` metadata sidecar."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigFormatError, IoError

__all__ = [
    "METADATA_FILENAME",
    "ProjectOptions",
    "load_metadata",
    "save_metadata",
]


METADATA_FILENAME = "calatrava.yml"


class ProjectOptions(BaseModel):
    """Options describing a generated project.

    Only ``project_name`` is required. Any other key found in the sidecar or
    passed as an override is kept as an extra field and exposed through
    :meth:`get`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    project_name: str = Field(..., min_length=1, description="Name of the project and its directory.")
    is_dev: bool = Field(default=False, description="Render development-only template blocks.")

    def merged(self, overrides: Mapping[str, Any] | None) -> "ProjectOptions":
        """Return a copy with ``overrides`` applied on top of the current values."""

        if not overrides:
            return self
        data = self.model_dump()
        data.update(overrides)
        return type(self).model_validate(data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.model_dump().get(key, default)

    def bindings(self) -> dict[str, Any]:
        """Return the variables available to marked template files."""

        return {"project_name": self.project_name, "is_dev": self.is_dev}


def _normalize_keys(data: Mapping[Any, Any]) -> dict[str, Any]:
    # Sidecars written by the Ruby tool carry symbol keys such as ":project_name".
    return {str(key).lstrip(":"): value for key, value in data.items()}


def save_metadata(
    project_dir: str | Path,
    name: str,
    options: Mapping[str, Any] | None = None,
) -> Path:
    """Write ``calatrava.yml`` for the project rooted at ``project_dir``."""

    payload: dict[str, Any] = dict(options or {})
    payload["project_name"] = name
    path = Path(project_dir) / METADATA_FILENAME
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    except OSError as exc:
        raise IoError(path, exc) from exc
    return path


def load_metadata(project_dir: str | Path) -> ProjectOptions:
    """Load and validate ``calatrava.yml`` from ``project_dir``.

    Raises
    ------
    ConfigFormatError
        If the file is missing, is not valid YAML, is not a mapping, or does not
        name the project.
    """

    path = Path(project_dir) / METADATA_FILENAME
    if not path.is_file():
        raise ConfigFormatError(path, "metadata file not found")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise IoError(path, exc) from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigFormatError(path, f"invalid YAML: {exc}") from exc

    if not isinstance(data, Mapping):
        raise ConfigFormatError(path, "expected a mapping at the top level")

    try:
        return ProjectOptions.model_validate(_normalize_keys(data))
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        raise ConfigFormatError(path, f"invalid project metadata ({fields})") from exc
