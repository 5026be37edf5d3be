"""
Build context — the state shared by every stage of one target's build.

A context is created per target and discarded afterwards; nothing here
is global. Stages record warnings through ``warn()``, which applies the
force policy: without ``force`` the first warning aborts the target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from ngbuilder.core.errors import BuildWarningError
from ngbuilder.core.models.module import StandaloneFile
from ngbuilder.core.models.options import BuildOptions, BuildTarget
from ngbuilder.core.services.registry import ModuleRegistry

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    """A recoverable problem noticed during a build."""

    level: str                      # "warning" | "info"
    message: str
    path: str | None = None
    module: str | None = None

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "message": self.message,
            "path": self.path,
            "module": self.module,
        }

    def __str__(self) -> str:
        if self.path:
            return f"{self.message}\n  File: {self.path}"
        return self.message


@dataclass
class BuildContext:
    """Everything one target build reads and accumulates."""

    target: BuildTarget
    options: BuildOptions
    registry: ModuleRegistry
    read_file: Callable[[str], str] | None = None

    standalone_scripts: list[StandaloneFile] = field(default_factory=list)
    emitted_files: set[str] = field(default_factory=set)
    prepend_output: str = ""
    append_output: str = ""
    exports: dict[str, list[str]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def debug_build(self) -> bool:
        return self.options.debug

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level == "warning"]

    def info(self, message: str, path: str | None = None, module: str | None = None) -> None:
        self.diagnostics.append(Diagnostic("info", message, path, module))
        logger.info("%s", message if not path else f"{message} ({path})")

    def warn(self, message: str, path: str | None = None, module: str | None = None) -> None:
        """Record a warning; abort the target unless ``force`` is set.

        Raises:
            BuildWarningError: ``force`` is off.
        """
        self.diagnostics.append(Diagnostic("warning", message, path, module))
        if not self.options.force:
            raise BuildWarningError(message, module=module, path=path)
        logger.warning("%s", message if not path else f"{message}\n  File: {path}")

    def has_emitted(self, path: str | None) -> bool:
        return bool(path) and path in self.emitted_files

    def mark_emitted(self, path: str | None) -> None:
        if path:
            self.emitted_files.add(path)
