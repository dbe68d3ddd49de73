"""Exception types raised by the calatrava scaffolding pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

__all__ = [
    "CalatravaError",
    "ConfigFormatError",
    "ExternalToolError",
    "IoError",
    "ProjectStateError",
    "SerializationError",
    "TemplateRenderingError",
    "TemplateSyntaxError",
    "UnsupportedEntryError",
]


class CalatravaError(RuntimeError):
    """Base class for every error raised by this package."""


class IoError(CalatravaError):
    """Raised when reading, writing, copying or creating a path fails."""

    def __init__(self, path: str | Path, cause: OSError | UnicodeError) -> None:
        self.path = Path(path)
        self.cause = cause
        reason = getattr(cause, "strerror", None) or str(cause)
        super().__init__(f"{self.path}: {reason}")


class ConfigFormatError(CalatravaError):
    """Raised when the project metadata file is missing or malformed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class TemplateRenderingError(CalatravaError):
    """Raised when the renderer cannot evaluate a placeholder."""


class TemplateSyntaxError(TemplateRenderingError):
    """Raised when a template contains malformed placeholder syntax."""

    def __init__(self, message: str, location: str) -> None:
        self.location = location
        super().__init__(f"{message} at {location}")


class UnsupportedEntryError(CalatravaError):
    """Raised when a tree walk meets something that is neither file nor directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: not a regular file or directory")


class SerializationError(CalatravaError):
    """Raised when a native project description cannot be encoded."""

    def __init__(self, target: str | Path, reason: str) -> None:
        self.target = str(target)
        self.reason = reason
        super().__init__(f"cannot serialize {self.target}: {reason}")


class ExternalToolError(CalatravaError):
    """Raised when an external command exits unsuccessfully."""

    def __init__(self, command: Sequence[str], exit_code: int) -> None:
        self.command = tuple(command)
        self.exit_code = exit_code
        super().__init__(f"command {' '.join(self.command)!r} exited with status {exit_code}")


class ProjectStateError(CalatravaError):
    """Raised when a project operation is invoked out of order."""
