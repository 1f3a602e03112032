"""Prompt template compilation and rendering.

Placeholders are written ``{{ name }}`` or ``{{ .name }}``. A quoted string
such as ``{{ "{{" }}`` renders literally. Keys absent from the argument map
render as an empty string.

Actions may also be:

- comments, ``{{/* note */}}``, which render nothing;
- trimmed, ``{{- .name -}}``, which strips the whitespace next to the action;
- conditionals, ``{{if .name}}...{{else if .other}}...{{else}}...{{end}}``,
  where an absent or empty argument is false.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Final

OPEN_DELIMITER: Final[str] = "{{"
CLOSE_DELIMITER: Final[str] = "}}"
COMMENT_OPEN: Final[str] = "/*"
COMMENT_CLOSE: Final[str] = "*/"
TRIM_MARKER: Final[str] = "-"
TRIM_WHITESPACE: Final[str] = " \t\r\n"
FIELD_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\.?([A-Za-z_][A-Za-z0-9_-]*)$")
STRING_LITERAL_PATTERN: Final[re.Pattern[str]] = re.compile(r'^"((?:[^"\\]|\\.)*)"$')
IF_PATTERN: Final[re.Pattern[str]] = re.compile(r"^if\s+(.+)$", re.DOTALL)
ELSE_IF_PATTERN: Final[re.Pattern[str]] = re.compile(r"^else\s+if\s+(.+)$", re.DOTALL)
COMMENT_END_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?:[ \t\r\n](-))?\}\}")


class TemplateSyntaxError(ValueError):
    """Raised when a prompt template cannot be compiled."""

    def __init__(self, template_name: str, reason: str, offset: int) -> None:
        super().__init__(f"{template_name}: {reason} at offset {offset}")
        self.template_name = template_name
        self.reason = reason
        self.offset = offset


@dataclass(slots=True, frozen=True)
class _Literal:
    text: str


@dataclass(slots=True, frozen=True)
class _Field:
    name: str


@dataclass(slots=True, frozen=True)
class _Directive:
    keyword: str
    condition: str | None = None


@dataclass(slots=True, frozen=True)
class _Branch:
    condition: str | None
    body: tuple[_Node, ...]


@dataclass(slots=True, frozen=True)
class _Conditional:
    branches: tuple[_Branch, ...]


_Node = _Literal | _Field | _Conditional


@dataclass(slots=True)
class _OpenConditional:
    offset: int
    branches: list[tuple[str | None, list[_Node]]] = field(default_factory=list)
    has_else: bool = False


@dataclass(slots=True, frozen=True)
class PromptTemplate:
    """Compiled template: literal text, argument fields and conditionals."""

    name: str
    segments: tuple[_Node, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        """Return referenced argument names in first-use order."""
        seen: dict[str, None] = {}
        _collect_fields(self.segments, seen)
        return tuple(seen)

    def render(self, arguments: Mapping[str, str]) -> str:
        """Render the template against an argument map."""
        parts: list[str] = []
        _render(self.segments, arguments, parts)
        return "".join(parts)


def compile_template(name: str, text: str) -> PromptTemplate:
    """Compile template text, raising TemplateSyntaxError on bad actions."""
    root: list[_Node] = []
    stack: list[_OpenConditional] = []

    def current() -> list[_Node]:
        return stack[-1].branches[-1][1] if stack else root

    for offset, token in _lex(name, text):
        if not isinstance(token, _Directive):
            current().append(token)
        elif token.keyword == "if":
            stack.append(_OpenConditional(offset=offset, branches=[(token.condition, [])]))
        elif token.keyword == "else":
            if not stack:
                raise TemplateSyntaxError(name, "unexpected {{else}}", offset)
            if stack[-1].has_else:
                raise TemplateSyntaxError(name, "{{else}} after final {{else}}", offset)
            stack[-1].branches.append((token.condition, []))
            stack[-1].has_else = token.condition is None
        else:
            if not stack:
                raise TemplateSyntaxError(name, "unexpected {{end}}", offset)
            opened = stack.pop()
            current().append(
                _Conditional(
                    tuple(
                        _Branch(condition, tuple(_merge_literals(body)))
                        for condition, body in opened.branches
                    )
                )
            )
    if stack:
        raise TemplateSyntaxError(name, "unclosed {{if}}", stack[-1].offset)
    return PromptTemplate(name=name, segments=tuple(_merge_literals(root)))


def _lex(name: str, text: str) -> Iterator[tuple[int, _Literal | _Field | _Directive]]:
    cursor = 0
    trim_next = False
    while True:
        start = text.find(OPEN_DELIMITER, cursor)
        chunk = text[cursor:] if start < 0 else text[cursor:start]
        if trim_next:
            chunk = chunk.lstrip(TRIM_WHITESPACE)
        if start < 0:
            if chunk:
                yield cursor, _Literal(chunk)
            return
        inner_start = start + len(OPEN_DELIMITER)
        if _has_left_trim(text, inner_start):
            chunk = chunk.rstrip(TRIM_WHITESPACE)
            inner_start += len(TRIM_MARKER)
        if chunk:
            yield cursor, _Literal(chunk)

        body_start = _skip_whitespace(text, inner_start)
        if text.startswith(COMMENT_OPEN, body_start):
            cursor, trim_next = _close_comment(name, text, body_start, start)
            continue

        end = _find_close(text, inner_start)
        if end < 0:
            raise TemplateSyntaxError(name, "unclosed action", start)
        inner = text[inner_start:end]
        trim_next = (
            len(inner) >= 2 and inner[-1] == TRIM_MARKER and inner[-2] in TRIM_WHITESPACE
        )
        if trim_next:
            inner = inner[: -len(TRIM_MARKER)]
        yield start, _compile_expression(name, inner.strip(TRIM_WHITESPACE), start)
        cursor = end + len(CLOSE_DELIMITER)


def _has_left_trim(text: str, offset: int) -> bool:
    marker_end = offset + len(TRIM_MARKER)
    return (
        text.startswith(TRIM_MARKER, offset)
        and marker_end < len(text)
        and text[marker_end] in TRIM_WHITESPACE
    )


def _skip_whitespace(text: str, offset: int) -> int:
    while offset < len(text) and text[offset] in TRIM_WHITESPACE:
        offset += 1
    return offset


def _close_comment(name: str, text: str, body_start: int, start: int) -> tuple[int, bool]:
    comment_end = text.find(COMMENT_CLOSE, body_start + len(COMMENT_OPEN))
    if comment_end < 0:
        raise TemplateSyntaxError(name, "unclosed comment", start)
    closing = COMMENT_END_PATTERN.match(text, comment_end + len(COMMENT_CLOSE))
    if closing is None:
        raise TemplateSyntaxError(name, "comment ends before closing delimiter", start)
    return closing.end(), closing.group(1) is not None


def _find_close(text: str, offset: int) -> int:
    # Skip over a quoted literal so "}}" inside quotes does not close the action.
    index = offset
    in_string = False
    while index < len(text):
        char = text[index]
        if in_string:
            if char == "\\":
                index += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif text.startswith(CLOSE_DELIMITER, index):
            return index
        index += 1
    return -1


def _compile_expression(name: str, expression: str, offset: int) -> _Literal | _Field | _Directive:
    if not expression:
        raise TemplateSyntaxError(name, "empty action", offset)
    if expression == "else":
        return _Directive("else")
    if expression == "end":
        return _Directive("end")
    conditional = IF_PATTERN.match(expression)
    if conditional is not None:
        return _Directive("if", _condition_field(name, conditional.group(1), offset))
    conditional = ELSE_IF_PATTERN.match(expression)
    if conditional is not None:
        return _Directive("else", _condition_field(name, conditional.group(1), offset))
    literal = STRING_LITERAL_PATTERN.match(expression)
    if literal is not None:
        return _Literal(re.sub(r"\\(.)", r"\1", literal.group(1)))
    reference = FIELD_PATTERN.match(expression)
    if reference is None:
        raise TemplateSyntaxError(name, f"unsupported expression {expression!r}", offset)
    return _Field(reference.group(1))


def _condition_field(name: str, condition: str, offset: int) -> str:
    reference = FIELD_PATTERN.match(condition.strip(TRIM_WHITESPACE))
    if reference is None:
        raise TemplateSyntaxError(name, f"unsupported condition {condition!r}", offset)
    return reference.group(1)


def _lookup(arguments: Mapping[str, str], name: str) -> str:
    value = arguments.get(name)
    return "" if value is None else str(value)


def _render(nodes: tuple[_Node, ...], arguments: Mapping[str, str], parts: list[str]) -> None:
    for node in nodes:
        if isinstance(node, _Literal):
            parts.append(node.text)
        elif isinstance(node, _Field):
            parts.append(_lookup(arguments, node.name))
        else:
            for branch in node.branches:
                if branch.condition is None or _lookup(arguments, branch.condition):
                    _render(branch.body, arguments, parts)
                    break


def _collect_fields(nodes: tuple[_Node, ...], seen: dict[str, None]) -> None:
    for node in nodes:
        if isinstance(node, _Field):
            seen.setdefault(node.name, None)
        elif isinstance(node, _Conditional):
            for branch in node.branches:
                if branch.condition is not None:
                    seen.setdefault(branch.condition, None)
                _collect_fields(branch.body, seen)


def _merge_literals(segments: list[_Node]) -> list[_Node]:
    merged: list[_Node] = []
    for segment in segments:
        if merged and isinstance(segment, _Literal) and isinstance(merged[-1], _Literal):
            merged[-1] = _Literal(merged[-1].text + segment.text)
            continue
        merged.append(segment)
    return merged
