"""A small text template engine for ``pkg.yaml`` files."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Callable

_ACTION = re.compile(r"\{\{(-\s)?(.*?)(\s-)?\}\}", re.S)
_LEXEME = re.compile(
    r'\s*(?:(?P<str>"(?:[^"\\]|\\.)*")|(?P<raw>`[^`]*`)|(?P<pipe>\|)'
    r"|(?P<field>\.[A-Za-z_][A-Za-z0-9_]*|\.)|(?P<ident>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<num>-?\d+))"
)
_KEYWORDS = {"if", "else", "end", "range", "with", "define", "template", "block"}
_NO_VALUE = "<no value>"


class TemplateError(ValueError):
    """Raised when a template cannot be parsed or executed."""


def _text(value: Any) -> str:
    return "" if value is None else _format(value)


def _format(value: Any) -> str:
    if value is None:
        return _NO_VALUE
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _default(fallback: Any, given: Any = None) -> Any:
    return given if given not in (None, "", 0, False) else fallback


_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "lower": lambda s: _text(s).lower(),
    "upper": lambda s: _text(s).upper(),
    "trim": lambda s: _text(s).strip(),
    "quote": lambda s: json.dumps(_text(s)),
    "squote": lambda s: f"'{_text(s)}'",
    "default": _default,
    "replace": lambda old, new, s: _text(s).replace(_text(old), _text(new)),
    "trimPrefix": lambda prefix, s: _text(s).removeprefix(_text(prefix)),
    "trimSuffix": lambda suffix, s: _text(s).removesuffix(_text(suffix)),
}


def _lex(action: str) -> list[tuple[str, str]]:
    items = []
    pos = 0
    while action[pos:].strip():
        match = _LEXEME.match(action, pos)
        if not match or match.end() == pos:
            raise TemplateError(f"unexpected input in action: {action[pos:].strip()!r}")
        items.append((match.lastgroup, match.group(match.lastgroup)))
        pos = match.end()
    return items


def _literal(kind: str, text: str, variables: Mapping[str, Any]) -> Any:
    if kind == "str":
        return json.loads(text)
    if kind == "raw":
        return text[1:-1]
    if kind == "num":
        return int(text)
    if kind == "field":
        return variables if text == "." else variables.get(text[1:])
    raise TemplateError(f'function "{text}" used as value')


def _command(items: list[tuple[str, str]], variables: Mapping[str, Any], piped: list[Any]) -> Any:
    if not items:
        raise TemplateError("empty command")
    kind, text = items[0]
    if kind == "ident":
        if text in _KEYWORDS:
            raise TemplateError(f'unsupported action "{text}"')
        func = _FUNCTIONS.get(text)
        if func is None:
            raise TemplateError(f'function "{text}" not defined')
        args = [_literal(k, t, variables) for k, t in items[1:]] + piped
        try:
            return func(*args)
        except TypeError as error:
            raise TemplateError(f"wrong number of args for {text}: {error}") from None
    if len(items) > 1 or piped:
        raise TemplateError(f"can't give argument to non-function {text}")
    return _literal(kind, text, variables)


def _evaluate(action: str, variables: Mapping[str, Any]) -> str:
    if action.startswith("/*") and action.endswith("*/"):
        return ""
    commands: list[list[tuple[str, str]]] = [[]]
    for item in _lex(action):
        if item[0] == "pipe":
            commands.append([])
        else:
            commands[-1].append(item)
    if commands == [[]]:
        raise TemplateError("missing value for command")
    piped: list[Any] = []
    value: Any = None
    for items in commands:
        value = _command(items, variables, piped)
        piped = [value]
    return _format(value)


def render(text: str, variables: Mapping[str, Any]) -> str:
    """Expand ``{{ ... }}`` actions in ``text`` using ``variables``."""
    out: list[str] = []
    pos = 0
    trim_next = False

    def literal(segment: str, trim_right: bool) -> None:
        if trim_next:
            segment = segment.lstrip()
        if trim_right:
            segment = segment.rstrip()
        if "{{" in segment:
            raise TemplateError("unclosed action")
        out.append(segment)

    for match in _ACTION.finditer(text):
        literal(text[pos : match.start()], bool(match.group(1)))
        out.append(_evaluate(match.group(2).strip(), variables))
        trim_next = bool(match.group(3))
        pos = match.end()
    literal(text[pos:], False)
    return "".join(out)