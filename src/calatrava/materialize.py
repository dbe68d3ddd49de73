"""Turn a template directory into a concrete project tree."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .errors import IoError
from .source import Template, TemplateFile
from .template import TemplateRenderer

__all__ = ["Materializer"]


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class Materializer:
    """Copy or render every entry of a :class:`Template` below a destination."""

    renderer: TemplateRenderer
    missing: str

    def __init__(self, renderer: TemplateRenderer | None = None, *, missing: str = "keep") -> None:
        self.renderer = renderer or TemplateRenderer()
        self.missing = missing

    def materialize(
        self,
        template: Template,
        destination: str | Path,
        bindings: Mapping[str, Any],
    ) -> list[Path]:
        """Write ``template`` below ``destination`` and return the written files.

        Marked files are rendered with ``bindings`` and lose their marker suffix,
        everything else is copied byte for byte. Existing directories are reused
        and existing files are overwritten. The first failure aborts the run and
        leaves whatever was already written in place.
        """

        root = Path(destination)
        for directory in template.directories():
            _make_directory(root / directory)

        written: list[Path] = []
        for template_file in template.files():
            target = root / template_file.destination_name
            _make_directory(target.parent)
            if template_file.is_marked:
                self._render(template_file, target, bindings)
            else:
                _copy(template_file.path, target)
            written.append(target)

        LOGGER.info("materialized template %s into %s (%d files)", template.name, root, len(written))
        return written

    def _render(self, template_file: TemplateFile, target: Path, bindings: Mapping[str, Any]) -> None:
        # bytes in and out so line endings survive untouched
        try:
            text = template_file.path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IoError(template_file.path, exc) from exc

        rendered = self.renderer.render_string(text, bindings, missing=self.missing)
        try:
            target.write_bytes(rendered.encode("utf-8"))
        except OSError as exc:
            raise IoError(target, exc) from exc
        LOGGER.debug("rendered %s -> %s", template_file.name, target)


def _make_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoError(path, exc) from exc


def _copy(source: Path, target: Path) -> None:
    try:
        shutil.copyfile(source, target)
    except OSError as exc:
        raise IoError(exc.filename or target, exc) from exc
    LOGGER.debug("copied %s -> %s", source, target)
