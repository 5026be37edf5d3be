"""
Header extraction — find module declarations in raw script text.

Recognized forms (namespace and method are configurable)::

    angular.module('name', ['dep1', 'dep2'])          declares 'name'
    angular.module('name', [], function (...) {...})  declares, with a config trailer
    angular.module('name')                            appends to 'name'

Calls that sit inside comments or string literals are ignored, including
everything after an unterminated ``/*``. Dependency lists are read
leniently: comments and trailing commas are dropped and single quotes
are accepted before parsing the list as JSON.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterator

from ngbuilder.core.models.module import ModuleHeader
from ngbuilder.core.models.options import DeclarationSyntax
from ngbuilder.core.services import js_scan

logger = logging.getLogger(__name__)

_DEFAULT_SYNTAX = DeclarationSyntax()

_STRING_LITERAL = re.compile(r"""^(['"])((?:[^\\]|\\.)*?)\1$""", re.DOTALL)
_SINGLE_QUOTED = re.compile(r"'((?:[^'\\]|\\.)*)'")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")


class DependencyListError(ValueError):
    """A dependency list argument is not a literal array of strings."""


@lru_cache(maxsize=16)
def call_pattern(syntax: DeclarationSyntax) -> re.Pattern[str]:
    """Regex matching ``<namespace>.<method>(`` up to and including the paren."""
    return re.compile(
        r"(?<![\w$.])"
        + re.escape(syntax.namespace)
        + r"\s*\.\s*"
        + re.escape(syntax.method)
        + r"\s*\("
    )


def parse_dependency_list(text: str) -> list[str]:
    """Leniently parse an array literal of module names."""
    clean = js_scan.strip_comments(text).strip()
    if not clean.startswith("[") or not clean.endswith("]"):
        raise DependencyListError(f"not an array literal: {text.strip()!r}")
    clean = _SINGLE_QUOTED.sub(
        lambda m: json.dumps(m.group(1).replace("\\'", "'")), clean
    )
    clean = _TRAILING_COMMA.sub(r"\1", clean)
    try:
        deps = json.loads(clean)
    except json.JSONDecodeError as e:
        raise DependencyListError(f"unreadable dependency list {text.strip()!r}: {e}") from e
    if not all(isinstance(d, str) for d in deps):
        raise DependencyListError(f"dependency names must be strings: {text.strip()!r}")
    return deps


def parse_header_arguments(args: list[str]) -> ModuleHeader | None:
    """Build a header from the raw argument texts of one declaration call.

    Returns None when the first argument is not a string literal
    (a computed module name cannot be tracked).

    Raises:
        DependencyListError: The second argument is not a literal array.
    """
    if not args:
        return None
    m = _STRING_LITERAL.match(js_scan.strip_comments(args[0]).strip())
    if not m:
        return None
    name = m.group(2)
    if len(args) == 1:
        return ModuleHeader(name=name, append=True)

    deps = parse_dependency_list(args[1])
    trailer = ", ".join(a.strip() for a in args[2:] if a.strip()) or None
    return ModuleHeader(name=name, dependencies=deps, config_trailer=trailer)


@dataclass
class DeclarationCall:
    """One declaration-API call located in a source text."""

    start: int
    end: int                         # just past the closing parenthesis
    header: ModuleHeader | None
    problem: str | None = None       # why the header is partial, if it is


def iter_declaration_calls(
    source: str,
    syntax: DeclarationSyntax = _DEFAULT_SYNTAX,
) -> Iterator[DeclarationCall]:
    """Yield every declaration-API call that appears in code."""
    code = js_scan.code_spans(source)
    for m in call_pattern(syntax).finditer(source):
        if m.start() not in code:
            continue
        open_paren = m.end() - 1
        close = js_scan.find_closing(source, open_paren)
        if close < 0:
            continue
        args = js_scan.split_top_level(source[open_paren + 1:close])
        try:
            header = parse_header_arguments(args)
            problem = None
        except DependencyListError as e:
            # Still a declaration; its dependencies just can't be read.
            name_call = parse_header_arguments(args[:1])
            header = (
                ModuleHeader(name=name_call.name, dependencies=[])
                if name_call else None
            )
            problem = str(e)
        yield DeclarationCall(start=m.start(), end=close + 1, header=header, problem=problem)


def parse_declaration_expression(
    text: str,
    syntax: DeclarationSyntax = _DEFAULT_SYNTAX,
) -> ModuleHeader | None:
    """Parse ``text`` if it is exactly one declaration call, else None."""
    clean = js_scan.trim_comments(text)
    m = call_pattern(syntax).match(clean)
    if not m:
        return None
    close = js_scan.find_closing(clean, m.end() - 1)
    if close != len(clean) - 1:
        return None
    try:
        return parse_header_arguments(js_scan.split_top_level(clean[m.end():close]))
    except DependencyListError:
        return None


@dataclass
class ExtractionResult:
    """Headers found in one file plus any non-fatal problems."""

    headers: list[ModuleHeader] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def declared(self) -> list[str]:
        return [h.name for h in self.headers if h.is_declaration]

    @property
    def appended(self) -> list[str]:
        return [h.name for h in self.headers if h.append]


def extract_module_headers(
    source: str,
    syntax: DeclarationSyntax = _DEFAULT_SYNTAX,
) -> ExtractionResult:
    """Scan one file's text for module declarations and append references.

    Each module name yields at most one header; a file that both declares
    and appends to the same module yields the declaration only.
    """
    result = ExtractionResult()
    by_name: dict[str, ModuleHeader] = {}

    for call in iter_declaration_calls(source, syntax):
        header = call.header
        if header is None:
            continue
        if call.problem:
            result.warnings.append(
                f"Module '{header.name}' has an unreadable dependency list ({call.problem})."
            )
        existing = by_name.get(header.name)
        if existing is None:
            by_name[header.name] = header
        elif existing.append and header.is_declaration:
            by_name[header.name] = header
        elif existing.is_declaration and header.is_declaration:
            result.warnings.append(
                f"Module '{header.name}' is declared more than once in the same file; "
                "only the first declaration is used."
            )

    result.headers = list(by_name.values())

    declared = set(result.declared)
    foreign_appends = [n for n in result.appended if n not in declared]
    if len(declared) > 1 and foreign_appends:
        result.warnings.append(
            "Definitions for multiple modules were found on the same file "
            f"(declares {', '.join(sorted(declared))}; "
            f"appends to {', '.join(foreign_appends)})."
        )

    logger.debug(
        "Extracted %d header(s): %s",
        len(result.headers),
        ", ".join(h.name for h in result.headers),
    )
    return result
