"""Snapshot a directory tree and mirror it as Xcode groups."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Union

from ..errors import IoError, UnsupportedEntryError
from .model import Group, SourceFileDescription

__all__ = ["DirectoryNode", "FileNode", "FileTreeNode", "build_group", "scan_tree"]


@dataclass(frozen=True, slots=True)
class FileNode:
    name: str
    relative_path: str


@dataclass(frozen=True, slots=True)
class DirectoryNode:
    name: str
    children: tuple[FileTreeNode, ...] = field(default_factory=tuple)


FileTreeNode = Union[DirectoryNode, FileNode]


def _list_directory(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise IoError(directory, exc) from exc


def scan_tree(directory: str | Path, base_dir: str | Path | None = None) -> DirectoryNode:
    """Return a :class:`DirectoryNode` describing everything below ``directory``.

    Entries are sorted by name. File nodes record their path relative to
    ``base_dir`` (``directory`` itself when omitted) using ``/`` separators.
    Anything that is neither a regular file nor a directory, such as a socket,
    a FIFO or a dangling symlink, raises :class:`UnsupportedEntryError`.
    """

    directory = Path(directory)
    base = Path(base_dir) if base_dir is not None else directory
    return _scan(directory, base, frozenset())


def _scan(directory: Path, base: Path, ancestors: frozenset[Path]) -> DirectoryNode:
    resolved = directory.resolve()
    if resolved in ancestors:
        # symlink pointing back up the tree
        raise UnsupportedEntryError(directory)
    ancestors = ancestors | {resolved}

    children: list[FileTreeNode] = []
    for entry in _list_directory(directory):
        if entry.is_dir():
            children.append(_scan(entry, base, ancestors))
        elif entry.is_file():
            relative = PurePosixPath(*entry.relative_to(base).parts)
            children.append(FileNode(name=entry.name, relative_path=str(relative)))
        else:
            raise UnsupportedEntryError(entry)
    return DirectoryNode(name=os.path.basename(os.path.normpath(directory)), children=tuple(children))


def build_group(node: DirectoryNode, group: Group) -> list[SourceFileDescription]:
    """Mirror the children of ``node`` into ``group``.

    Every directory becomes a child group of the same name and every file a
    file reference. The source descriptions for all files below ``node`` are
    returned in tree order; the caller owns attaching them to a target.
    """

    sources: list[SourceFileDescription] = []
    for child in node.children:
        if isinstance(child, DirectoryNode):
            sources.extend(build_group(child, group.create_group(child.name)))
        else:
            reference = group.create_file(child.relative_path)
            sources.append(SourceFileDescription(reference))
    return sources
