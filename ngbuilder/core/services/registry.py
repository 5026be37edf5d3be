"""
Module registry — one record per module name.

Records are created on first mention: by a declaration, an append, or
registration as external. External modules are satisfied outside the
build, so their records never receive source text.
"""

from __future__ import annotations

import logging
from typing import Iterator

from ngbuilder.core.errors import DuplicateModuleError, RegistryError
from ngbuilder.core.models.module import ModuleRecord

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Mutable name → ModuleRecord mapping built during analysis."""

    def __init__(self, externals: list[str] | None = None):
        self._records: dict[str, ModuleRecord] = {}
        for name in externals or []:
            self.register_external(name)

    # ── Queries ─────────────────────────────────────────────────

    def get(self, name: str) -> ModuleRecord | None:
        return self._records.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[ModuleRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def names(self) -> list[str]:
        """Module names in first-seen order."""
        return list(self._records)

    def externals(self) -> list[str]:
        return [r.name for r in self._records.values() if r.is_external]

    # ── Mutation ────────────────────────────────────────────────

    def _record(self, name: str) -> ModuleRecord:
        record = self._records.get(name)
        if record is None:
            record = ModuleRecord(name=name)
            self._records[name] = record
        return record

    def register_external(self, name: str) -> ModuleRecord:
        """Mark ``name`` as provided outside the build.

        Raises:
            RegistryError: Source text was already ingested for it.
        """
        record = self._record(name)
        if record.is_declared or record.appended_paths:
            raise RegistryError(
                f"Module '{name}' already has source files and cannot be made external.",
                module=name,
            )
        record.is_external = True
        return record

    def ingest_declaration(
        self,
        name: str,
        source: str,
        path: str,
        dependencies: list[str],
        config_trailer: str | None = None,
    ) -> ModuleRecord:
        """Record the file declaring ``name``.

        Declarations of external modules are ignored.

        Raises:
            DuplicateModuleError: Another file already declared the module.
        """
        record = self._record(name)
        if record.is_external:
            logger.debug("Ignoring declaration of external module %s in %s", name, path)
            return record
        if record.is_declared:
            raise DuplicateModuleError(
                f"Module '{name}' is declared more than once "
                f"(first in {record.declaring_path}).",
                module=name,
                path=path,
            )
        record.declaring_source = source
        record.declaring_path = path
        record.dependencies = list(dependencies)
        record.config_trailer = config_trailer
        return record

    def ingest_append(self, name: str, source: str, path: str) -> ModuleRecord:
        """Record a file that adds definitions to ``name``.

        The same path is only recorded once; appends to external modules
        are ignored.
        """
        record = self._record(name)
        if record.is_external:
            logger.debug("Ignoring append to external module %s in %s", name, path)
            return record
        if path in record.appended_paths or path == record.declaring_path:
            return record
        record.appended_sources.append(source)
        record.appended_paths.append(path)
        return record

    def override_declaration(self, name: str, dependencies: list[str]) -> ModuleRecord:
        """Replace ``name`` by a synthesized, file-less declaration."""
        record = ModuleRecord(
            name=name,
            declaring_source="",
            dependencies=list(dependencies),
        )
        self._records[name] = record
        return record
