from __future__ import annotations

import os
import socket
from pathlib import Path

import pytest

from calatrava.errors import IoError, UnsupportedEntryError
from calatrava.xcode.model import Group
from calatrava.xcode.tree import DirectoryNode, FileNode, build_group, scan_tree


def _shape(node: DirectoryNode) -> list:
    return [
        (child.name, _shape(child)) if isinstance(child, DirectoryNode) else child.name
        for child in node.children
    ]


def _group_shape(group: Group) -> list:
    return [
        (child.name, _group_shape(child)) if isinstance(child, Group) else child.name
        for child in group.children
    ]


def test_scan_tree_sorts_entries(make_tree):
    root = make_tree({"src/b.m": "", "src/a.h": "", "src/Views/z.m": "", "src/Models": None})
    node = scan_tree(root / "src", root)
    assert node.name == "src"
    assert _shape(node) == [("Models", []), ("Views", ["z.m"]), "a.h", "b.m"]


def test_file_nodes_are_relative_to_base(make_tree):
    root = make_tree({"src/Views/z.m": ""})
    node = scan_tree(root / "src", root)
    views = node.children[0]
    assert isinstance(views, DirectoryNode)
    assert views.children == (FileNode(name="z.m", relative_path="src/Views/z.m"),)


def test_group_tree_is_isomorphic_to_filesystem(make_tree):
    root = make_tree(
        {
            "src/AppDelegate.m": "",
            "src/AppDelegate.h": "",
            "src/Controllers/Home.m": "",
            "src/Controllers/Detail/Detail.m": "",
            "src/Empty": None,
        }
    )
    node = scan_tree(root / "src", root)
    group = Group()
    sources = build_group(node, group)

    assert _group_shape(group) == _shape(node)
    assert group.name is None
    references = list(group.walk_files())
    assert [ref.path for ref in references] == [
        "src/AppDelegate.h",
        "src/AppDelegate.m",
        "src/Controllers/Detail/Detail.m",
        "src/Controllers/Home.m",
    ]
    assert [description.file for description in sources] == references


def test_build_group_per_subtree(make_tree):
    root = make_tree({"src/Lib/one.c": "", "src/Lib/two.c": ""})
    lib = scan_tree(root / "src" / "Lib", root)
    group = Group("Lib")
    sources = build_group(lib, group)
    assert [description.file.path for description in sources] == ["src/Lib/one.c", "src/Lib/two.c"]
    assert group.groups == []
    assert [ref.name for ref in group.files] == ["one.c", "two.c"]


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires os.mkfifo")
def test_fifo_is_unsupported(make_tree):
    root = make_tree({"src/ok.m": ""})
    os.mkfifo(root / "src" / "pipe")
    with pytest.raises(UnsupportedEntryError) as excinfo:
        scan_tree(root / "src", root)
    assert excinfo.value.path.name == "pipe"


@pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="requires unix sockets")
def test_socket_is_unsupported(tmp_path: Path):
    # unix socket paths are length limited, keep the tree shallow
    src = tmp_path / "s"
    src.mkdir()
    server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        server.bind(str(src / "sock"))
    except OSError:
        server.close()
        pytest.skip("cannot bind a unix socket here")
    try:
        with pytest.raises(UnsupportedEntryError):
            scan_tree(src, tmp_path)
    finally:
        server.close()


@pytest.mark.skipif(os.name != "posix", reason="requires symlinks")
def test_dangling_symlink_is_unsupported(make_tree):
    root = make_tree({"src/ok.m": ""})
    (root / "src" / "broken").symlink_to(root / "does-not-exist")
    with pytest.raises(UnsupportedEntryError):
        scan_tree(root / "src", root)


@pytest.mark.skipif(os.name != "posix", reason="requires symlinks")
def test_symlink_cycle_is_unsupported(make_tree):
    root = make_tree({"src/inner/ok.m": ""})
    (root / "src" / "inner" / "loop").symlink_to(root / "src", target_is_directory=True)
    with pytest.raises(UnsupportedEntryError):
        scan_tree(root / "src", root)


def test_missing_directory_is_io_error(tmp_path: Path):
    with pytest.raises(IoError):
        scan_tree(tmp_path / "absent", tmp_path)
