"""Generation of the Xcode project that accompanies a calatrava app."""

from __future__ import annotations

from .builder import SYSTEM_FRAMEWORKS, XcodeProjectBuilder
from .model import (
    APPLICATION_PRODUCT_TYPE,
    BuildConfiguration,
    FileReference,
    Group,
    NativeTarget,
    SourceFileDescription,
    XcodeProject,
)
from .pbxproj import serialize
from .settings import DEFAULT_BUILD_SETTINGS, EXCLUDED_SETTINGS, BuildSettingsTable, project_settings
from .tree import DirectoryNode, FileNode, build_group, scan_tree

__all__ = [
    "APPLICATION_PRODUCT_TYPE",
    "BuildConfiguration",
    "BuildSettingsTable",
    "DEFAULT_BUILD_SETTINGS",
    "DirectoryNode",
    "EXCLUDED_SETTINGS",
    "FileNode",
    "FileReference",
    "Group",
    "NativeTarget",
    "SYSTEM_FRAMEWORKS",
    "SourceFileDescription",
    "XcodeProject",
    "XcodeProjectBuilder",
    "build_group",
    "project_settings",
    "scan_tree",
    "serialize",
]
