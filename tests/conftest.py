from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Mapping

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


TemplateFactory = Callable[..., Path]


@pytest.fixture()
def make_tree(tmp_path: Path) -> TemplateFactory:
    """Write a directory tree described by ``{relative path: contents}``.

    A value of ``None`` creates an empty directory, ``bytes`` are written as-is
    and strings as UTF-8 text.
    """

    def factory(entries: Mapping[str, str | bytes | None], name: str = "template") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for relative, contents in entries.items():
            path = root / relative
            if contents is None:
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(contents, bytes):
                path.write_bytes(contents)
            else:
                path.write_text(contents, encoding="utf-8")
        return root

    return factory
