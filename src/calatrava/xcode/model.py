"""In-memory model of the subset of an Xcode project that calatrava writes."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterator, List, Union

__all__ = [
    "APPLICATION_PRODUCT_TYPE",
    "BuildConfiguration",
    "BuildSettingValue",
    "FileReference",
    "Group",
    "NativeTarget",
    "SourceFileDescription",
    "XcodeProject",
    "file_type_for",
]


APPLICATION_PRODUCT_TYPE = "com.apple.product-type.application"
DEFAULT_CONFIGURATIONS = ("Debug", "Release")

BuildSettingValue = Union[str, List[str]]

_FILE_TYPES = {
    ".c": "sourcecode.c.c",
    ".cpp": "sourcecode.cpp.cpp",
    ".css": "text.css",
    ".h": "sourcecode.c.h",
    ".html": "text.html",
    ".js": "sourcecode.javascript",
    ".json": "text.json",
    ".m": "sourcecode.c.objc",
    ".mm": "sourcecode.cpp.objcpp",
    ".pch": "sourcecode.c.h",
    ".plist": "text.plist.xml",
    ".png": "image.png",
    ".storyboard": "file.storyboard",
    ".strings": "text.plist.strings",
    ".swift": "sourcecode.swift",
    ".xib": "file.xib",
}


def file_type_for(path: str) -> str:
    """Return the ``lastKnownFileType`` Xcode uses for ``path``."""

    return _FILE_TYPES.get(PurePosixPath(path).suffix.lower(), "text")


@dataclass(slots=True)
class FileReference:
    """A file in the project browser. ``path`` is relative to the project directory."""

    path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def file_type(self) -> str:
        return file_type_for(self.path)


@dataclass(slots=True)
class Group:
    """Named container of groups and file references. The main group has no name."""

    name: str | None = None
    children: list[Group | FileReference] = field(default_factory=list)

    def create_group(self, name: str) -> Group:
        group = Group(name)
        self.children.append(group)
        return group

    def create_file(self, path: str) -> FileReference:
        reference = FileReference(path)
        self.children.append(reference)
        return reference

    @property
    def groups(self) -> list[Group]:
        return [child for child in self.children if isinstance(child, Group)]

    @property
    def files(self) -> list[FileReference]:
        return [child for child in self.children if isinstance(child, FileReference)]

    def walk_files(self) -> Iterator[FileReference]:
        """Yield every file reference below this group, depth first."""

        for child in self.children:
            if isinstance(child, Group):
                yield from child.walk_files()
            else:
                yield child


@dataclass(frozen=True, slots=True)
class SourceFileDescription:
    """A file compiled by a target, with optional per-file compiler flags."""

    file: FileReference
    compiler_flags: str = ""


@dataclass(slots=True)
class BuildConfiguration:
    name: str
    build_settings: dict[str, BuildSettingValue] = field(default_factory=dict)


def _default_configurations() -> list[BuildConfiguration]:
    return [BuildConfiguration(name) for name in DEFAULT_CONFIGURATIONS]


@dataclass(slots=True)
class NativeTarget:
    """A buildable product together with its sources and configurations."""

    product_name: str
    product_type: str = APPLICATION_PRODUCT_TYPE
    source_files: list[SourceFileDescription] = field(default_factory=list)
    build_configurations: list[BuildConfiguration] = field(default_factory=_default_configurations)

    @property
    def name(self) -> str:
        return self.product_name

    @property
    def product_path(self) -> str:
        if self.product_type == APPLICATION_PRODUCT_TYPE:
            return f"{self.product_name}.app"
        return self.product_name

    def add_source_files(self, descriptions: list[SourceFileDescription]) -> None:
        self.source_files.extend(descriptions)

    def configuration(self, name: str) -> BuildConfiguration:
        for configuration in self.build_configurations:
            if configuration.name == name:
                return configuration
        raise KeyError(name)


@dataclass(slots=True)
class XcodeProject:
    """Root of the model: the main group, targets, frameworks and project configurations."""

    name: str
    main_group: Group = field(default_factory=Group)
    targets: list[NativeTarget] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    build_configurations: list[BuildConfiguration] = field(default_factory=_default_configurations)

    def add_system_framework(self, name: str) -> None:
        if name not in self.frameworks:
            self.frameworks.append(name)

    @staticmethod
    def framework_path(name: str) -> str:
        return f"System/Library/Frameworks/{name}.framework"
