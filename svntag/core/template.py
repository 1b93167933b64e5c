"""Template resolution for tag URLs and commit comments.

Templates are plain text with ``${...}`` references:

- ``${NAME}`` looks up ``NAME`` in the build environment
- ``${env['NAME']}`` is the same lookup in the bracket form
- ``${NAME:-fallback}`` uses ``fallback`` when ``NAME`` is unset or empty
- ``$$`` is a literal ``$``

Resolution is a pure function of the template and the environment.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping

from svntag.core.exceptions import TemplateError

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")
_ENV_LOOKUP = re.compile(r"env\s*\[\s*(['\"])(?P<name>[^'\"]+)\1\s*\]")

_OPENERS = {"[": "]", "{": "}"}
_CLOSERS = {"]": "[", "}": "{"}
_NAMES = {"[": "brackets", "{": "braces"}


@dataclass(frozen=True)
class Literal:
    """Literal text."""

    text: str


@dataclass(frozen=True)
class Reference:
    """A ``${...}`` variable reference."""

    name: str
    default: str | None
    position: int


def _find_reference_end(template: str, start: int) -> int:
    """Return the index of the ``}`` closing the reference opened at ``start``."""
    stack: list[str] = []
    quote: str | None = None
    quote_at = 0
    i = start + 2

    while i < len(template):
        ch = template[i]
        if quote:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote, quote_at = ch, i
        elif ch in _OPENERS:
            stack.append(ch)
        elif ch in _CLOSERS:
            if not stack:
                if ch == "}":
                    return i
                raise TemplateError(
                    f"Unbalanced brackets: unexpected '{ch}' at position {i}",
                    template,
                    i,
                )
            opener = stack.pop()
            if opener != _CLOSERS[ch]:
                raise TemplateError(
                    f"Unbalanced {_NAMES[opener]}: '{opener}' closed by '{ch}' at position {i}",
                    template,
                    i,
                )
        i += 1

    if quote:
        raise TemplateError(
            f"Unbalanced quotes: {quote} opened at position {quote_at} is never closed",
            template,
            quote_at,
        )
    if stack:
        raise TemplateError(
            f"Unbalanced {_NAMES[stack[-1]]}: '{stack[-1]}' inside reference at position {start} is never closed",
            template,
            start,
        )
    raise TemplateError(
        f"Unbalanced braces: '${{' at position {start} is never closed",
        template,
        start,
    )


def _split_default(body: str) -> tuple[str, str | None]:
    """Split ``expr:-default`` at the first ``:-`` outside quotes and brackets."""
    quote: str | None = None
    depth = 0
    for i, ch in enumerate(body):
        if quote:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == ":" and depth == 0 and body.startswith(":-", i):
            return body[:i], body[i + 2 :]
    return body, None


def _unquote(value: str) -> str:
    stripped = value.strip()
    if len(stripped) >= 2 and stripped[0] == stripped[-1] and stripped[0] in "'\"":
        return stripped[1:-1]
    return value


def _parse_reference(template: str, body: str, position: int) -> Reference:
    expr, default = _split_default(body)
    expr = expr.strip()

    if not expr:
        raise TemplateError(f"Empty reference at position {position}", template, position)

    match = _ENV_LOOKUP.fullmatch(expr)
    if match:
        name = match.group("name")
    elif _IDENTIFIER.fullmatch(expr):
        name = expr
    else:
        raise TemplateError(
            f"Unsupported expression '{expr}' at position {position}; "
            "use ${NAME}, ${env['NAME']} or ${NAME:-default}",
            template,
            position,
        )

    return Reference(
        name=name,
        default=_unquote(default) if default is not None else None,
        position=position,
    )


@lru_cache(maxsize=256)
def parse(template: str) -> tuple[Literal | Reference, ...]:
    """Parse a template into literal and reference parts.

    Raises:
        TemplateError: if the template is malformed
    """
    parts: list[Literal | Reference] = []
    buffer: list[str] = []
    i = 0

    while i < len(template):
        ch = template[i]
        nxt = template[i + 1] if i + 1 < len(template) else ""

        if ch == "$" and nxt == "$":
            buffer.append("$")
            i += 2
        elif ch == "$" and nxt == "{":
            end = _find_reference_end(template, i)
            if buffer:
                parts.append(Literal("".join(buffer)))
                buffer = []
            parts.append(_parse_reference(template, template[i + 2 : end], i))
            i = end + 1
        else:
            buffer.append(ch)
            i += 1

    if buffer:
        parts.append(Literal("".join(buffer)))

    return tuple(parts)


def check(template: str) -> None:
    """Validate template syntax without an environment.

    Raises:
        TemplateError: if the template is malformed
    """
    parse(template)


def references(template: str) -> list[str]:
    """Names referenced by a template, in order of first appearance."""
    names: list[str] = []
    for part in parse(template):
        if isinstance(part, Reference) and part.name not in names:
            names.append(part.name)
    return names


def resolve(template: str, env: Mapping[str, str]) -> str:
    """Expand a template against a build environment.

    Raises:
        TemplateError: if the template is malformed or references an
            undefined variable that has no default
    """
    out: list[str] = []
    for part in parse(template):
        if isinstance(part, Literal):
            out.append(part.text)
            continue

        value = env.get(part.name)
        if part.default is not None and not value:
            value = part.default
        if value is None:
            raise TemplateError(
                f"Undefined variable '{part.name}' at position {part.position}",
                template,
                part.position,
            )
        out.append(value)

    return "".join(out)
