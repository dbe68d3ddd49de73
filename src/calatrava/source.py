"""Read-only access to template directories on disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .errors import IoError

__all__ = ["MARKER_SUFFIX", "Template", "TemplateFile"]


MARKER_SUFFIX = ".calatrava"


@dataclass(frozen=True, slots=True)
class TemplateFile:
    """A file inside a template.

    Attributes
    ----------
    name:
        Path of the file relative to the template root, using ``/`` separators.
    path:
        Absolute path of the source file.
    """

    name: str
    path: Path

    @property
    def is_marked(self) -> bool:
        """Whether the file must be rendered rather than copied."""

        return self.name.endswith(MARKER_SUFFIX)

    @property
    def destination_name(self) -> str:
        """Relative name the file receives in a generated project."""

        if self.is_marked:
            return self.name[: -len(MARKER_SUFFIX)]
        return self.name


@dataclass(frozen=True, slots=True)
class Template:
    """Immutable handle to a template directory.

    Both :meth:`directories` and :meth:`files` walk the tree afresh on every
    call and yield entries in lexicographic order of their relative path, so a
    parent directory is always produced before anything it contains.
    """

    root: Path

    def __init__(self, root: str | Path) -> None:
        resolved = Path(root).expanduser().resolve()
        if not resolved.is_dir():
            raise IoError(resolved, NotADirectoryError(20, "template is not a directory"))
        object.__setattr__(self, "root", resolved)

    @classmethod
    def resolve(cls, name: str, search_paths: Iterable[str | Path]) -> "Template":
        """Return the template called ``name`` from the first directory that has it."""

        candidates = [Path(directory) / name for directory in search_paths]
        for candidate in candidates:
            if candidate.is_dir():
                return cls(candidate)
        raise IoError(name, FileNotFoundError(2, f"no template named '{name}'"))

    @property
    def name(self) -> str:
        return self.root.name

    def _entries(self) -> list[Path]:
        try:
            return sorted(self.root.rglob("*"), key=lambda entry: entry.relative_to(self.root).parts)
        except OSError as exc:
            raise IoError(exc.filename or self.root, exc) from exc

    def directories(self) -> Iterator[str]:
        """Yield every directory below the root as a relative path."""

        for entry in self._entries():
            if entry.is_dir():
                yield entry.relative_to(self.root).as_posix()

    def files(self) -> Iterator[TemplateFile]:
        """Yield a :class:`TemplateFile` for every file below the root."""

        for entry in self._entries():
            if entry.is_file():
                yield TemplateFile(name=entry.relative_to(self.root).as_posix(), path=entry)
