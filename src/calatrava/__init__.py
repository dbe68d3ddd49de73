"""Scaffolding for calatrava cross-platform apps.

The package materializes a project from a template directory, rendering files
marked with the ``.calatrava`` suffix, and then adds the platform trees: an
Android project generated with the SDK tools and an Xcode project whose groups
mirror ``ios/src``.
"""

from __future__ import annotations

from .android import AndroidTreeBuilder
from .config import METADATA_FILENAME, ProjectOptions, load_metadata, save_metadata
from .errors import (
    CalatravaError,
    ConfigFormatError,
    ExternalToolError,
    IoError,
    ProjectStateError,
    SerializationError,
    TemplateRenderingError,
    TemplateSyntaxError,
    UnsupportedEntryError,
)
from .materialize import Materializer
from .project import Project, ProjectState
from .source import MARKER_SUFFIX, Template, TemplateFile
from .template import TemplateRenderer
from .xcode import XcodeProjectBuilder

__all__ = [
    "AndroidTreeBuilder",
    "CalatravaError",
    "ConfigFormatError",
    "ExternalToolError",
    "IoError",
    "MARKER_SUFFIX",
    "METADATA_FILENAME",
    "Materializer",
    "Project",
    "ProjectOptions",
    "ProjectState",
    "ProjectStateError",
    "SerializationError",
    "Template",
    "TemplateFile",
    "TemplateRenderer",
    "TemplateRenderingError",
    "TemplateSyntaxError",
    "UnsupportedEntryError",
    "XcodeProjectBuilder",
    "load_metadata",
    "save_metadata",
]

__version__ = "0.1.0"
