"""
Module models — declarations found in source files and the registry records
built from them.

A module is identified by its name. Exactly one file may declare it (and
list its dependencies); any number of files may append definitions to it.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SourceFile(BaseModel):
    """A script file handed to the builder: identifying path + raw text."""

    path: str
    content: str


class StandaloneFile(SourceFile):
    """A file with no module declaration that is included anyway."""


class ModuleHeader(BaseModel):
    """One module declaration (or append reference) found in a file.

    Declaring headers carry a dependency list; appending headers only
    name the module they add definitions to.
    """

    name: str
    append: bool = False
    dependencies: list[str] = Field(default_factory=list)
    config_trailer: str | None = None  # extra declaration arguments, verbatim

    @property
    def is_declaration(self) -> bool:
        return not self.append


class ModuleRecord(BaseModel):
    """Everything the registry knows about one module name."""

    name: str

    # ── Declaring file ───────────────────────────────────────────
    declaring_source: str | None = None
    declaring_path: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    config_trailer: str | None = None

    # ── Appending files (discovery order) ────────────────────────
    appended_sources: list[str] = Field(default_factory=list)
    appended_paths: list[str] = Field(default_factory=list)

    is_external: bool = False

    @property
    def is_declared(self) -> bool:
        """Whether a declaring file has been seen."""
        return self.declaring_source is not None

    @property
    def file_paths(self) -> list[str]:
        """All file paths of the module, declaring file first."""
        paths = [self.declaring_path] if self.declaring_path else []
        return paths + list(self.appended_paths)

    def sources(self) -> list[SourceFile]:
        """All file contents of the module, declaring file first."""
        files: list[SourceFile] = []
        if self.declaring_source is not None:
            files.append(
                SourceFile(path=self.declaring_path or "", content=self.declaring_source)
            )
        for path, content in zip(self.appended_paths, self.appended_sources):
            files.append(SourceFile(path=path, content=content))
        return files
