"""Lightweight string templating utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, Union

from .errors import TemplateRenderingError, TemplateSyntaxError
from .naming import normalize_class_name, normalize_module_name, slugify

__all__ = [
    "TemplateRenderer",
    "TemplateRenderingError",
    "TemplateSyntaxError",
]


_TAG_PATTERN = re.compile(r"{{(?P<body>[^{}]*)}}")
_MISSING_POLICIES = {"keep", "empty", "error"}


def _location(template: str, offset: int) -> str:
    line = template.count("\n", 0, offset) + 1
    column = offset - (template.rfind("\n", 0, offset) + 1) + 1
    return f"line {line}, column {column}"


def _resolve_value(context: Mapping[str, Any], dotted_path: str) -> Any:
    value: Any = context
    for segment in dotted_path.split("."):
        if isinstance(value, Mapping):
            if segment not in value:
                raise KeyError(segment)
            value = value[segment]
            continue
        if hasattr(value, segment):
            value = getattr(value, segment)
            if callable(value):
                value = value()
            continue
        raise KeyError(segment)
    return value


def _apply_filter(value: Any, filter_name: str, filters: Mapping[str, Callable[[Any], Any]]) -> Any:
    try:
        filter_func = filters[filter_name]
    except KeyError as exc:
        raise TemplateRenderingError(f"unknown filter '{filter_name}'") from exc

    return filter_func(value)


@dataclass(slots=True)
class _Variable:
    expression: str
    source: str


@dataclass(slots=True)
class _Section:
    key: str
    inverted: bool
    location: str
    children: list[_Node] = field(default_factory=list)


_Node = Union[str, _Variable, _Section]


def _check_unterminated(template: str, start: int, end: int) -> None:
    opening = template.find("{{", start, end)
    if opening != -1 and "}}" not in template[opening:]:
        raise TemplateSyntaxError("unterminated tag", _location(template, opening))


def _standalone_span(template: str, position: int, start: int, end: int) -> tuple[int, int] | None:
    """Return ``(text_end, next_position)`` when the tag at ``start:end`` owns its line.

    A section tag surrounded only by blank space on its line is dropped along
    with that space and the line's newline.
    """

    line_start = template.rfind("\n", 0, start) + 1
    if position > line_start or template[line_start:start].strip(" \t"):
        return None
    line_end = template.find("\n", end)
    after = template[end:] if line_end == -1 else template[end:line_end]
    if after.strip(" \t\r"):
        return None
    return line_start, len(template) if line_end == -1 else line_end + 1


def _parse(template: str) -> list[_Node]:
    root: list[_Node] = []
    stack: list[_Section] = []
    position = 0

    def current() -> list[_Node]:
        return stack[-1].children if stack else root

    for match in _TAG_PATTERN.finditer(template):
        _check_unterminated(template, position, match.start())
        body = match.group("body").strip()
        sigil = body[:1]
        is_section_tag = sigil in ("#", "^", "/")

        text_end, next_position = match.start(), match.end()
        if is_section_tag:
            standalone = _standalone_span(template, position, match.start(), match.end())
            if standalone is not None:
                text_end, next_position = standalone
        if text_end > position:
            current().append(template[position:text_end])
        position = next_position

        if is_section_tag:
            key = body[1:].strip()
            location = _location(template, match.start())
            if not key:
                raise TemplateSyntaxError("section tag without a key", location)
            if sigil == "/":
                if not stack:
                    raise TemplateSyntaxError(f"closing tag '{key}' without an open section", location)
                if stack[-1].key != key:
                    raise TemplateSyntaxError(
                        f"closing tag '{key}' does not match open section '{stack[-1].key}'",
                        location,
                    )
                stack.pop()
                continue
            section = _Section(key=key, inverted=sigil == "^", location=location)
            current().append(section)
            stack.append(section)
            continue

        current().append(_Variable(expression=body, source=match.group(0)))

    _check_unterminated(template, position, len(template))
    if position < len(template):
        current().append(template[position:])

    if stack:
        raise TemplateSyntaxError(f"section '{stack[-1].key}' is never closed", stack[-1].location)
    return root


@dataclass(slots=True)
class TemplateRenderer:
    """Render templates with ``{{ placeholder|filters }}`` expressions.

    Besides plain placeholders, ``{{#key}}...{{/key}}`` includes its block when
    ``key`` is truthy and ``{{^key}}...{{/key}}`` when it is falsy or missing.
    """

    filters: MutableMapping[str, Callable[[Any], Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.filters:
            self.filters.update(
                {
                    "upper": lambda value: str(value).upper(),
                    "lower": lambda value: str(value).lower(),
                    "title": lambda value: str(value).title(),
                    "slug": lambda value: slugify(value),
                    "module": lambda value: normalize_module_name(str(value)),
                    "class": lambda value: normalize_class_name(str(value)),
                    "repr": lambda value: repr(value),
                    "strip": lambda value: str(value).strip(),
                }
            )

    def render_string(
        self,
        template: str,
        context: Mapping[str, Any],
        *,
        missing: str = "keep",
    ) -> str:
        """Render ``template`` using ``context``.

        Parameters
        ----------
        template:
            The template string to evaluate.
        context:
            Mapping providing values for placeholders.
        missing:
            Controls what happens when a placeholder cannot be resolved. The
            supported policies are ``"keep"`` (return the placeholder unchanged),
            ``"empty"`` (replace with an empty string) and ``"error"`` (raise
            :class:`TemplateRenderingError`). Sections whose key is missing are
            treated as falsy unless the policy is ``"error"``.

        Raises
        ------
        TemplateSyntaxError
            If the template contains unbalanced sections or unterminated tags.
        """

        if missing not in _MISSING_POLICIES:
            raise ValueError("missing must be 'keep', 'empty', or 'error'")

        nodes = _parse(template)
        parts: list[str] = []
        self._render_nodes(nodes, context, missing, parts)
        return "".join(parts)

    def _render_nodes(
        self,
        nodes: list[_Node],
        context: Mapping[str, Any],
        missing: str,
        parts: list[str],
    ) -> None:
        for node in nodes:
            if isinstance(node, str):
                parts.append(node)
            elif isinstance(node, _Variable):
                parts.append(self._substitute(node, context, missing))
            elif self._section_enabled(node, context, missing):
                self._render_nodes(node.children, context, missing, parts)

    def _substitute(self, node: _Variable, context: Mapping[str, Any], missing: str) -> str:
        parts = [part.strip() for part in node.expression.split("|") if part.strip()]
        if not parts:
            return node.source

        key, *filters = parts
        try:
            value = _resolve_value(context, key)
        except KeyError:
            if missing == "keep":
                return node.source
            if missing == "empty":
                return ""
            raise TemplateRenderingError(f"missing value for '{key}'")

        for filter_name in filters:
            value = _apply_filter(value, filter_name, self.filters)

        return str(value)

    def _section_enabled(self, node: _Section, context: Mapping[str, Any], missing: str) -> bool:
        try:
            value = _resolve_value(context, node.key)
        except KeyError:
            if missing == "error":
                raise TemplateRenderingError(f"missing value for section '{node.key}'")
            value = None
        return not value if node.inverted else bool(value)

    def render_file(
        self,
        template_path: str | Path,
        context: Mapping[str, Any],
        *,
        target: str | Path | None = None,
        encoding: str = "utf-8",
        missing: str = "keep",
    ) -> str:
        """Render ``template_path`` and optionally write the result to ``target``."""

        template_path = Path(template_path)
        if not template_path.is_file():
            raise FileNotFoundError(template_path)

        text = template_path.read_text(encoding=encoding)
        rendered = self.render_string(text, context, missing=missing)

        if target is not None:
            target_path = Path(target)
            target_path.parent.mkdir(parents=True, exist_ok=True)
            target_path.write_text(rendered, encoding=encoding)

        return rendered
