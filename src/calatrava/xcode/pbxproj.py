"""Encode an :class:`~calatrava.xcode.model.XcodeProject` as ``project.pbxproj`` text."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..errors import SerializationError
from .model import BuildConfiguration, FileReference, Group, NativeTarget, XcodeProject

__all__ = ["object_id", "serialize"]


ARCHIVE_VERSION = 1
OBJECT_VERSION = 46
_UNQUOTED = re.compile(r"^[A-Za-z0-9_./]+$")
_SINGLE_LINE_ISAS = {"PBXBuildFile", "PBXFileReference"}


def object_id(*parts: str) -> str:
    """Return a stable 24 character identifier for the object named by ``parts``."""

    return hashlib.md5("\x1f".join(parts).encode("utf-8")).hexdigest()[:24].upper()


def _quote(value: str) -> str:
    if _UNQUOTED.match(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


@dataclass(slots=True)
class _ObjectGraph:
    """Flat ``id -> object`` table plus the display comment of each id."""

    objects: dict[str, dict[str, Any]] = field(default_factory=dict)
    comments: dict[str, str] = field(default_factory=dict)

    def add(self, identifier: str, obj: dict[str, Any], comment: str | None = None) -> str:
        self.objects[identifier] = obj
        if comment:
            self.comments[identifier] = comment
        return identifier


def _add_group(graph: _ObjectGraph, group: Group, key: str) -> tuple[str, dict[str, str]]:
    """Add ``group`` and everything below it; return its id and the file reference ids by path."""

    file_ids: dict[str, str] = {}
    children: list[str] = []
    for child in group.children:
        if isinstance(child, Group):
            child_id, child_files = _add_group(graph, child, f"{key}/{child.name}")
            children.append(child_id)
            file_ids.update(child_files)
        else:
            children.append(_add_file_reference(graph, child))
            file_ids[child.path] = children[-1]

    obj: dict[str, Any] = {"isa": "PBXGroup", "children": children}
    if group.name is not None:
        obj["name"] = group.name
    obj["sourceTree"] = "<group>"
    return graph.add(object_id("PBXGroup", key), obj, group.name), file_ids


def _add_file_reference(graph: _ObjectGraph, reference: FileReference) -> str:
    obj = {
        "isa": "PBXFileReference",
        "lastKnownFileType": reference.file_type,
        "name": reference.name,
        "path": reference.path,
        "sourceTree": "<group>",
    }
    return graph.add(object_id("PBXFileReference", reference.path), obj, reference.name)


def _add_configuration_list(
    graph: _ObjectGraph,
    owner_isa: str,
    owner_name: str,
    configurations: Sequence[BuildConfiguration],
) -> str:
    configuration_ids = []
    for configuration in configurations:
        obj = {
            "isa": "XCBuildConfiguration",
            "buildSettings": dict(configuration.build_settings),
            "name": configuration.name,
        }
        configuration_ids.append(
            graph.add(
                object_id("XCBuildConfiguration", owner_isa, owner_name, configuration.name),
                obj,
                configuration.name,
            )
        )

    default = configurations[-1].name if configurations else ""
    obj = {
        "isa": "XCConfigurationList",
        "buildConfigurations": configuration_ids,
        "defaultConfigurationIsVisible": 0,
        "defaultConfigurationName": default,
    }
    return graph.add(
        object_id("XCConfigurationList", owner_isa, owner_name),
        obj,
        f'Build configuration list for {owner_isa} "{owner_name}"',
    )


def _add_target(
    graph: _ObjectGraph,
    target: NativeTarget,
    file_ids: Mapping[str, str],
    framework_ids: Mapping[str, str],
    product_id: str,
) -> str:
    source_build_ids = []
    for description in target.source_files:
        reference = description.file
        if reference.path not in file_ids:
            raise SerializationError(target.name, f"source file {reference.path!r} is not in any group")
        obj: dict[str, Any] = {"isa": "PBXBuildFile", "fileRef": file_ids[reference.path]}
        if description.compiler_flags:
            obj["settings"] = {"COMPILER_FLAGS": description.compiler_flags}
        source_build_ids.append(
            graph.add(
                object_id("PBXBuildFile", target.name, reference.path),
                obj,
                f"{reference.name} in Sources",
            )
        )

    framework_build_ids = []
    for name, reference_id in framework_ids.items():
        framework_build_ids.append(
            graph.add(
                object_id("PBXBuildFile", target.name, XcodeProject.framework_path(name)),
                {"isa": "PBXBuildFile", "fileRef": reference_id},
                f"{name}.framework in Frameworks",
            )
        )

    phases = []
    for isa, label, files in (
        ("PBXSourcesBuildPhase", "Sources", source_build_ids),
        ("PBXFrameworksBuildPhase", "Frameworks", framework_build_ids),
        ("PBXResourcesBuildPhase", "Resources", []),
    ):
        obj = {
            "isa": isa,
            "buildActionMask": 2147483647,
            "files": files,
            "runOnlyForDeploymentPostprocessing": 0,
        }
        phases.append(graph.add(object_id(isa, target.name), obj, label))

    obj = {
        "isa": "PBXNativeTarget",
        "buildConfigurationList": _add_configuration_list(
            graph, "PBXNativeTarget", target.name, target.build_configurations
        ),
        "buildPhases": phases,
        "buildRules": [],
        "dependencies": [],
        "name": target.name,
        "productName": target.product_name,
        "productReference": product_id,
        "productType": target.product_type,
    }
    return graph.add(object_id("PBXNativeTarget", target.name), obj, target.name)


def _build_graph(project: XcodeProject) -> tuple[_ObjectGraph, str]:
    graph = _ObjectGraph()

    main_group_id, file_ids = _add_group(graph, project.main_group, "<main>")
    main_group = graph.objects[main_group_id]

    framework_ids: dict[str, str] = {}
    for name in project.frameworks:
        path = XcodeProject.framework_path(name)
        obj = {
            "isa": "PBXFileReference",
            "lastKnownFileType": "wrapper.framework",
            "name": f"{name}.framework",
            "path": path,
            "sourceTree": "SDKROOT",
        }
        framework_ids[name] = graph.add(object_id("PBXFileReference", path), obj, f"{name}.framework")
    frameworks_group_id = graph.add(
        object_id("PBXGroup", "<frameworks>"),
        {
            "isa": "PBXGroup",
            "children": list(framework_ids.values()),
            "name": "Frameworks",
            "sourceTree": "<group>",
        },
        "Frameworks",
    )

    product_ids: list[str] = []
    target_ids: list[str] = []
    for target in project.targets:
        product_id = graph.add(
            object_id("PBXFileReference", "<product>", target.name),
            {
                "isa": "PBXFileReference",
                "explicitFileType": "wrapper.application",
                "includeInIndex": 0,
                "path": target.product_path,
                "sourceTree": "BUILT_PRODUCTS_DIR",
            },
            target.product_path,
        )
        product_ids.append(product_id)
        target_ids.append(_add_target(graph, target, file_ids, framework_ids, product_id))

    products_group_id = graph.add(
        object_id("PBXGroup", "<products>"),
        {"isa": "PBXGroup", "children": product_ids, "name": "Products", "sourceTree": "<group>"},
        "Products",
    )
    main_group["children"] = [*main_group["children"], frameworks_group_id, products_group_id]

    root_id = graph.add(
        object_id("PBXProject", project.name),
        {
            "isa": "PBXProject",
            "attributes": {"LastUpgradeCheck": "0450"},
            "buildConfigurationList": _add_configuration_list(
                graph, "PBXProject", project.name, project.build_configurations
            ),
            "compatibilityVersion": "Xcode 3.2",
            "developmentRegion": "English",
            "hasScannedForEncodings": 0,
            "knownRegions": ["en"],
            "mainGroup": main_group_id,
            "productRefGroup": products_group_id,
            "projectDirPath": "",
            "projectRoot": "",
            "targets": target_ids,
        },
        "Project object",
    )
    return graph, root_id


class _Writer:
    def __init__(self, comments: Mapping[str, str], target: str) -> None:
        self._comments = comments
        self._target = target

    def scalar(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise SerializationError(self._target, f"unsupported value {value!r} of type {type(value).__name__}")
        if isinstance(value, int):
            return str(value)
        encoded = _quote(value)
        comment = self._comments.get(value)
        if comment:
            encoded += f" /* {comment.replace('*/', '* /')} */"
        return encoded

    def value(self, value: Any, indent: int, inline: bool) -> str:
        if isinstance(value, Mapping):
            return self.mapping(value, indent, inline)
        if isinstance(value, (list, tuple)):
            if inline:
                return "(" + "".join(f"{self.value(item, indent, True)}, " for item in value) + ")"
            pad = "\t" * (indent + 1)
            items = "".join(f"{pad}{self.value(item, indent + 1, False)},\n" for item in value)
            return "(\n" + items + "\t" * indent + ")"
        return self.scalar(value)

    def mapping(self, value: Mapping[str, Any], indent: int, inline: bool) -> str:
        entries = [(key, value[key]) for key in value]
        if inline:
            return "{" + "".join(f"{_quote(str(key))} = {self.value(item, indent, True)}; " for key, item in entries) + "}"
        pad = "\t" * (indent + 1)
        body = "".join(f"{pad}{_quote(str(key))} = {self.value(item, indent + 1, False)};\n" for key, item in entries)
        return "{\n" + body + "\t" * indent + "}"


def serialize(project: XcodeProject) -> str:
    """Return the complete ``project.pbxproj`` text for ``project``.

    Objects are grouped into ``/* Begin <isa> section */`` blocks sorted by isa
    and by id within a block. Identifiers are derived from each object's role and
    path, so serializing the same model twice yields identical text.

    Raises
    ------
    SerializationError
        If a build setting or attribute holds a value the format cannot encode,
        or a target compiles a file that no group references.
    """

    graph, root_id = _build_graph(project)
    writer = _Writer(graph.comments, f"{project.name}.xcodeproj")

    sections: dict[str, list[str]] = {}
    for identifier in sorted(graph.objects):
        obj = graph.objects[identifier]
        isa = obj["isa"]
        inline = isa in _SINGLE_LINE_ISAS
        sections.setdefault(isa, []).append(
            f"\t\t{writer.scalar(identifier)} = {writer.mapping(obj, 2, inline)};\n"
        )

    lines = [
        "// !$*UTF8*$!\n",
        "{\n",
        f"\tarchiveVersion = {ARCHIVE_VERSION};\n",
        "\tclasses = {\n\t};\n",
        f"\tobjectVersion = {OBJECT_VERSION};\n",
        "\tobjects = {\n",
    ]
    for isa in sorted(sections):
        lines.append(f"\n/* Begin {isa} section */\n")
        lines.extend(sections[isa])
        lines.append(f"/* End {isa} section */\n")
    lines.append("\t};\n")
    lines.append(f"\trootObject = {writer.scalar(root_id)};\n")
    lines.append("}\n")
    return "".join(lines)
