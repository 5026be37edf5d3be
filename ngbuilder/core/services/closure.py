"""
Closure analysis — detect a self-invoking function wrapping a whole file.

Accepted shapes (the text must already be trimmed of surrounding white
space and comments)::

    (function () { ... })();
    (function (mod) { ... })(angular.module('name'));
    (function (mod) { ... }(angular.module('name', ['dep'])));
    !function (mod) { ... }(angular.module('name'));

The trailing semicolon is optional. An invocation argument other than a
single declaration expression means the file is not a module closure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ngbuilder.core.models.options import DeclarationSyntax
from ngbuilder.core.services import js_scan
from ngbuilder.core.services.header_extract import parse_declaration_expression

_CLOSURE_HEAD = re.compile(
    r"^([(!])\s*function\s*\(\s*(" + js_scan.IDENTIFIER + r")?\s*\)\s*\{"
)


@dataclass
class ClosureInfo:
    """What a module closure looks like from the outside."""

    param_name: str | None           # injected module variable, if any
    body: str                        # text between the function braces
    invocation_args: str             # raw text passed to the invocation
    declared_name: str | None = None
    declared_dependencies: list[str] | None = None  # None for append references

    @property
    def has_declaration(self) -> bool:
        return self.declared_name is not None


def _skip_ws(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def analyze_closure(
    clean: str,
    syntax: DeclarationSyntax | None = None,
) -> ClosureInfo | None:
    """Return closure details if ``clean`` is entirely one module closure."""
    syntax = syntax or DeclarationSyntax()
    m = _CLOSURE_HEAD.match(clean)
    if not m:
        return None
    opener, param = m.group(1), m.group(2)

    body_open = m.end() - 1
    body_close = js_scan.find_closing(clean, body_open)
    if body_close < 0:
        return None
    body = clean[body_open + 1:body_close]
    rest = clean[body_close + 1:]

    i = _skip_ws(rest, 0)
    closed_before_call = False
    if opener == "(" and rest[i:i + 1] == ")":
        closed_before_call = True
        i = _skip_ws(rest, i + 1)
    if rest[i:i + 1] != "(":
        return None
    call_close = js_scan.find_closing(rest, i)
    if call_close < 0:
        return None
    args = rest[i + 1:call_close].strip()

    j = _skip_ws(rest, call_close + 1)
    if opener == "(" and not closed_before_call:
        if rest[j:j + 1] != ")":
            return None
        j = _skip_ws(rest, j + 1)
    if rest[j:j + 1] == ";":
        j = _skip_ws(rest, j + 1)
    if j != len(rest):
        return None

    info = ClosureInfo(param_name=param, body=body, invocation_args=args)
    if args:
        header = parse_declaration_expression(args, syntax)
        if header is None:
            return None
        info.declared_name = header.name
        info.declared_dependencies = None if header.append else header.dependencies
    return info


def wrap_closure(
    body: str,
    param_name: str = "",
    invocation_args: str = "",
) -> str:
    """Inverse of :func:`analyze_closure` for the parenthesized form."""
    return f"(function ({param_name}) {{{body}}})({invocation_args});"
