"""
Source transformation — prepare one file of a module for concatenation.

A module's files are emitted inside a single closure that receives the
module handle as its parameter. Each file is classified first:

    WRAPPED                already a closure for this module; unwrap it
    NEEDS_RENAME           a closure whose module parameter has another name
    NEEDS_VALIDATION       bare code; must be checked for global leakage
    MALFORMED_DECLARATION  a closure declaring some other module

Declaration expressions for the module are then replaced by the module
variable, or dropped when they are statements with nothing attached.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ngbuilder.core.models.options import DeclarationSyntax
from ngbuilder.core.services import js_scan
from ngbuilder.core.services.closure import ClosureInfo, analyze_closure
from ngbuilder.core.services.header_extract import iter_declaration_calls

# Dropping a declaration statement is only safe where a statement may begin.
_STATEMENT_BOUNDARY = ("", ";", "{", "}")


class TransformStatus(str, Enum):
    WRAPPED = "wrapped"
    NEEDS_RENAME = "needs_rename"
    NEEDS_VALIDATION = "needs_validation"
    MALFORMED_DECLARATION = "malformed_declaration"


@dataclass
class TransformResult:
    """Classification of one source block plus the text to carry forward."""

    status: TransformStatus
    text: str
    clean: str = ""                      # source without surrounding comments
    closure: ClosureInfo | None = None

    @property
    def indented(self) -> bool:
        """Whether ``text`` already has closure-body indentation."""
        return self.status in (TransformStatus.WRAPPED, TransformStatus.NEEDS_RENAME)


def _strip_blank_edges(text: str) -> str:
    """Drop blank lines at both ends without touching the first line's indent."""
    text = re.sub(r"^(?:[ \t]*\r?\n)+", "", text)
    return text.rstrip()


def unwrap_closure(
    before: str,
    info: ClosureInfo,
    after: str,
    indent_str: str = "  ",
) -> str:
    """The closure body, keeping comments that surrounded the closure."""
    parts = []
    if before.strip():
        parts.append(js_scan.indent(before.strip(), 1, indent_str))
    body = _strip_blank_edges(info.body)
    if body:
        parts.append(body)
    if after.strip():
        parts.append(js_scan.indent(after.strip(), 1, indent_str))
    return "\n".join(parts)


def transform_source(
    source: str,
    module_name: str,
    module_var: str = "module",
    syntax: DeclarationSyntax | None = None,
    indent_str: str = "  ",
) -> TransformResult:
    """Classify ``source`` and unwrap it when it is a module closure."""
    syntax = syntax or DeclarationSyntax()
    before, clean, after = js_scan.split_trivia(source)
    info = analyze_closure(clean, syntax)

    if info is None:
        return TransformResult(TransformStatus.NEEDS_VALIDATION, text=source, clean=clean)

    if info.declared_name is not None and info.declared_name != module_name:
        return TransformResult(
            TransformStatus.MALFORMED_DECLARATION, text=source, clean=clean, closure=info
        )

    text = unwrap_closure(before, info, after, indent_str)
    if info.param_name and info.has_declaration and info.param_name != module_var:
        return TransformResult(TransformStatus.NEEDS_RENAME, text=text, clean=clean, closure=info)
    return TransformResult(TransformStatus.WRAPPED, text=text, clean=clean, closure=info)


def _previous_code_char(masked: str, pos: int) -> str:
    j = pos - 1
    while j >= 0 and masked[j].isspace():
        j -= 1
    return masked[j] if j >= 0 else ""


def rename_module_ref_exps(
    source: str,
    module_name: str,
    module_var: str = "module",
    syntax: DeclarationSyntax | None = None,
) -> str:
    """Replace declaration expressions for ``module_name`` by ``module_var``.

    ``angular.module('App').controller(...)`` becomes
    ``module.controller(...)``; a lone ``angular.module('App', []);``
    statement is removed because the closure re-creates it.
    """
    syntax = syntax or DeclarationSyntax()
    masked = js_scan.mask_comments(source)
    out: list[str] = []
    last = 0
    for call in iter_declaration_calls(source, syntax):
        if call.start < last:
            continue  # nested inside a call already rewritten
        if call.header is None or call.header.name != module_name:
            continue
        out.append(source[last:call.start])
        j = call.end
        while j < len(source) and source[j] in " \t":
            j += 1
        standalone = (
            source[j:j + 1] == ";"
            and _previous_code_char(masked, call.start) in _STATEMENT_BOUNDARY
        )
        if standalone:
            last = j + 1
        else:
            out.append(module_var)
            last = call.end
    out.append(source[last:])
    return "".join(out)


def rename_module_variable_refs(source: str, old_var: str, new_var: str) -> str:
    """Rename a closure's module parameter inside its (unwrapped) body."""
    return js_scan.rename_identifier(source, old_var, new_var)
