"""
Sandbox base — the contract between the builder and a script runtime.

A sandbox executes one block of JavaScript in a fresh global context
that exposes only the module declaration API (every registration method
returns the module again), an inert ``console`` and an empty ``window``.
It reports which globals the block created.

Like any adapter, a sandbox NEVER raises for script failures; they are
captured in the returned ``ValidationReport``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ngbuilder.core.models.options import DeclarationSyntax
from ngbuilder.core.models.validation import ValidationReport

# Registration methods of the module stand-in; each returns the module.
CHAINABLE_METHODS = (
    "animation",
    "component",
    "config",
    "constant",
    "controller",
    "decorator",
    "directive",
    "factory",
    "filter",
    "provider",
    "run",
    "service",
    "value",
)


class ScriptSandbox(ABC):
    """Abstract base class for script sandboxes.

    To create a new sandbox:
        1. Subclass ScriptSandbox
        2. Implement name, is_available, run
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The sandbox identifier (e.g., 'node', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying runtime can be used. Fast, never raises."""

    @abstractmethod
    def run(
        self,
        source: str,
        syntax: DeclarationSyntax,
        timeout: float,
        filename: str | None = None,
    ) -> ValidationReport:
        """Execute ``source`` once and report leaked globals.

        MUST never raise for script errors or timeouts.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
