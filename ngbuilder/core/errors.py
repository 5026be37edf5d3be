"""
Build errors — the typed failure taxonomy of a build target.

Fatal conditions raise a ``BuildError`` subclass and abort the current
target only. Recoverable conditions are recorded as diagnostics on the
build context and become ``BuildWarningError`` when ``force`` is off.

    BuildError
    ├── BuildConfigError
    │   └── SandboxUnavailableError
    ├── RegistryError
    │   ├── DuplicateModuleError
    │   ├── MissingModuleError
    │   └── DependencyCycleError
    └── BuildWarningError
"""

from __future__ import annotations


class BuildError(Exception):
    """Base class for everything that stops a build target."""

    def __init__(
        self,
        message: str,
        module: str | None = None,
        path: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.module = module
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message}\n  File: {self.path}"
        return self.message

    def to_dict(self) -> dict:
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "module": self.module,
            "path": self.path,
        }


class BuildConfigError(BuildError):
    """Missing entry module, sources, or output target."""


class SandboxUnavailableError(BuildConfigError):
    """The script sandbox provider cannot run on this machine."""


class RegistryError(BuildError):
    """The module graph is inconsistent."""


class DuplicateModuleError(RegistryError):
    """A non-external module was declared by more than one file."""


class MissingModuleError(RegistryError):
    """An entry or dependency module is not in the registry."""

    def __init__(self, name: str, required_by: str | None = None):
        if required_by:
            message = f"Module '{name}' was not found (required by '{required_by}')."
        else:
            message = f"Module '{name}' was not found."
        super().__init__(message, module=name)
        self.required_by = required_by


class DependencyCycleError(RegistryError):
    """The dependency graph loops back on a module still being resolved."""

    def __init__(self, cycle: list[str]):
        super().__init__(
            f"Circular dependency: {' → '.join(cycle)}",
            module=cycle[0] if cycle else None,
        )
        self.cycle = cycle


class BuildWarningError(BuildError):
    """A warning escalated to a failure because ``force`` is off."""
