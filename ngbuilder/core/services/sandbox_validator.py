"""
Sandbox validation — decide whether unwrapped code is safe to wrap.

Code that is not already enclosed in a module closure will be moved into
one by the release build. If it declares globals (function declarations,
``var`` at top level, implicit assignments), those names would become
closure-local and stop being visible to other scripts. Such code must be
reported instead of silently changed.

The check runs the code once in a sandbox and complements the runtime
result with a lexical scan for top-level ``let``/``const``/``class``,
which a script context does not expose as properties.
"""

from __future__ import annotations

import logging
import re

from ngbuilder.adapters.sandbox.base import ScriptSandbox
from ngbuilder.core.errors import SandboxUnavailableError
from ngbuilder.core.models.options import DeclarationSyntax, SandboxOptions
from ngbuilder.core.models.validation import LeakedGlobal, ValidationReport
from ngbuilder.core.services import js_scan

logger = logging.getLogger(__name__)

_LEXICAL_DECLARATION = re.compile(
    r"(?<![\w$.])(let|const|class)\s+(" + js_scan.IDENTIFIER + r")"
)


def find_lexical_globals(source: str) -> list[LeakedGlobal]:
    """Top-level ``let``/``const``/``class`` names declared by ``source``."""
    leaks: list[LeakedGlobal] = []
    seen: set[str] = set()
    for m in _LEXICAL_DECLARATION.finditer(js_scan.top_level_code(source)):
        keyword, name = m.group(1), m.group(2)
        if name in seen:
            continue
        seen.add(name)
        leaks.append(LeakedGlobal(name=name, kind="function" if keyword == "class" else "var"))
    return leaks


class SandboxValidator:
    """Runs source blocks through a sandbox and reports leakage."""

    def __init__(
        self,
        sandbox: ScriptSandbox,
        syntax: DeclarationSyntax | None = None,
        options: SandboxOptions | None = None,
    ):
        self._sandbox = sandbox
        self._syntax = syntax or DeclarationSyntax()
        self._options = options or SandboxOptions()
        self._checked = False

    @property
    def sandbox(self) -> ScriptSandbox:
        return self._sandbox

    def ensure_available(self) -> None:
        """Raise SandboxUnavailableError if the sandbox cannot run."""
        if self._checked:
            return
        if not self._sandbox.is_available():
            raise SandboxUnavailableError(
                f"The '{self._sandbox.name}' script sandbox is not available; "
                "install it or disable validation of unwrapped code."
            )
        self._checked = True

    def validate(self, source: str, filename: str | None = None) -> ValidationReport:
        """Execute ``source`` in isolation and return the leakage report.

        Raises:
            SandboxUnavailableError: The sandbox runtime is missing.
        """
        self.ensure_available()
        report = self._sandbox.run(
            source, self._syntax, self._options.timeout, filename=filename
        )
        if report.status in ("valid", "leaked"):
            report = report.merge_leaks(find_lexical_globals(source))
        logger.debug(
            "Validated %s: %s (%dms)", filename or "<source>", report.describe(), report.duration_ms
        )
        return report
