"""
Mock sandbox — test double for script validation.

Returns a valid report by default. Reports can be scripted per source
fragment: the first registered fragment found in the source wins.
"""

from __future__ import annotations

from ngbuilder.adapters.sandbox.base import ScriptSandbox
from ngbuilder.core.models.options import DeclarationSyntax
from ngbuilder.core.models.validation import LeakedGlobal, ValidationReport


class MockSandbox(ScriptSandbox):
    """Scripted sandbox for testing."""

    def __init__(self, available: bool = True):
        self._available = available
        self._responses: list[tuple[str, ValidationReport]] = []
        self._call_log: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[str]:
        """Every source this sandbox was asked to run."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_response(self, fragment: str, report: ValidationReport) -> None:
        """Return ``report`` for any source containing ``fragment``."""
        self._responses.append((fragment, report))

    def set_leak(self, fragment: str, *names: str, kind: str = "var") -> None:
        """Report ``names`` as leaked globals for sources containing ``fragment``."""
        self.set_response(
            fragment,
            ValidationReport.leaked([LeakedGlobal(name=n, kind=kind) for n in names]),
        )

    def run(
        self,
        source: str,
        syntax: DeclarationSyntax,
        timeout: float,
        filename: str | None = None,
    ) -> ValidationReport:
        self._call_log.append(source)
        for fragment, report in self._responses:
            if fragment in source:
                return report
        return ValidationReport.valid()

    def reset(self) -> None:
        self._call_log.clear()
        self._responses.clear()
