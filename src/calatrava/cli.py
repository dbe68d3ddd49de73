"""Command line interface for the calatrava utilities."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .errors import CalatravaError
from .project import Project
from .source import Template
from .template import TemplateRenderer


def _parse_key_value_pairs(pairs: Iterable[str]) -> dict[str, str]:
    context: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise argparse.ArgumentTypeError(
                f"invalid key/value pair '{pair}'. Expected KEY=VALUE syntax."
            )
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise argparse.ArgumentTypeError("keys must not be empty")
        context[key] = value
    return context


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="calatrava", description="Scaffold cross-platform calatrava apps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every file written")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser("create", help="create a new project from a template")
    create_parser.add_argument("name", help="Name of the new project")
    create_parser.add_argument("-t", "--template", type=Path, required=True, help="Template directory")
    create_parser.add_argument(
        "-d",
        "--directory",
        type=Path,
        default=None,
        help="Directory in which the project directory is created",
    )
    create_parser.add_argument("--dev", action="store_true", help="Render development-only blocks")
    create_parser.add_argument(
        "-s",
        "--set",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Extra project options",
    )
    create_parser.add_argument("--no-android", action="store_true", help="Skip the Android project")
    create_parser.add_argument("--no-ios", action="store_true", help="Skip the Xcode project")

    render_parser = subparsers.add_parser(
        "render", help="render a template file with simple moustache style placeholders"
    )
    render_parser.add_argument("template", type=Path, help="Path to the template file")
    render_parser.add_argument(
        "-c",
        "--context",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Values exposed to the template renderer",
    )
    render_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the rendered template to this path instead of stdout",
    )
    render_parser.add_argument(
        "--missing",
        choices=["keep", "empty", "error"],
        default="keep",
        help="Behaviour when a placeholder cannot be resolved",
    )

    for command, help_text in (
        ("modules", "list the kernel modules of a project"),
        ("src-paths", "print the colon separated module source paths"),
    ):
        query_parser = subparsers.add_parser(command, help=help_text)
        query_parser.add_argument("project", type=Path, help="Project directory")

    return parser


def _handle_create(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = dict(_parse_key_value_pairs(args.set))
    if args.dev:
        overrides["is_dev"] = True
    template = Template(args.template)
    project = Project.open(args.name, overrides, base_dir=args.directory)
    path = project.create(template, android=not args.no_android, ios=not args.no_ios)
    print(f"Project created at {path}")
    return 0


def _handle_render(args: argparse.Namespace) -> int:
    renderer = TemplateRenderer()
    context = _parse_key_value_pairs(args.context)
    rendered = renderer.render_file(args.template, context, missing=args.missing)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered, encoding="utf-8")
    else:
        sys.stdout.write(rendered)
        if not rendered.endswith("\n"):
            sys.stdout.write("\n")
    return 0


def _handle_query(args: argparse.Namespace) -> int:
    project = Project.open(str(args.project.resolve()))
    if args.command == "modules":
        for module in project.modules():
            print(module)
    else:
        print(project.src_paths())
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    handlers = {
        "create": _handle_create,
        "render": _handle_render,
        "modules": _handle_query,
        "src-paths": _handle_query,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error("no command provided")
        return 2
    try:
        return handler(args)
    except (CalatravaError, ValueError, argparse.ArgumentTypeError) as exc:
        print(f"calatrava: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
