"""
Build configuration models — loaded from ngbuilder.yml.

Shared ``options`` apply to every target; each target may override any
of them. Overrides are shallow: a nested ``syntax`` or ``sandbox``
mapping replaces the shared one wholesale.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_list(value: Any) -> Any:
    """Accept a bare string wherever a list of strings is expected."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return value


class DeclarationSyntax(BaseModel):
    """The module declaration API: ``<namespace>.<method>('name', [deps])``."""

    model_config = ConfigDict(frozen=True)

    namespace: str = "angular"
    method: str = "module"

    def expression(
        self,
        name: str,
        dependencies: list[str] | None = None,
        config_trailer: str | None = None,
    ) -> str:
        """Render a declaration (or, without dependencies, an append reference)."""
        args = [f"'{name}'"]
        if dependencies is not None:
            args.append(quoted_list(dependencies))
            if config_trailer:
                args.append(config_trailer)
        return f"{self.namespace}.{self.method}({', '.join(args)})"


class SandboxOptions(BaseModel):
    """How unwrapped code is executed for global-leak validation."""

    timeout: float = 2.0          # seconds of script execution
    node_binary: str = "node"


class UrlRebase(BaseModel):
    """A regex replacement applied to each URL of a debug build."""

    match: str
    replace_with: str = ""


class BuildOptions(BaseModel):
    """Options for one build target (after merging shared + target)."""

    # ── Graph ────────────────────────────────────────────────────
    main_module: str = ""
    external_modules: list[str] = Field(default_factory=list)
    builtin_modules: list[str] = Field(default_factory=lambda: ["ng"])
    excluded_modules: list[str] = Field(default_factory=list)
    override_dependencies: list[str] = Field(default_factory=list)
    require: list[str] = Field(default_factory=list)  # prepended standalone scripts

    # ── Release output ───────────────────────────────────────────
    module_var: str = "module"
    rename_module_refs: bool = False
    indent: str = "  "
    module_footer: str = "\n\n\n"
    output_module_names: bool = False
    output_file_names: bool = False

    # ── Debug output ─────────────────────────────────────────────
    debug: bool = False
    rebase_debug_urls: list[UrlRebase] = Field(default_factory=list)

    # ── Checks ───────────────────────────────────────────────────
    validate_unwrapped: bool = True
    force: bool = False

    syntax: DeclarationSyntax = Field(default_factory=DeclarationSyntax)
    sandbox: SandboxOptions = Field(default_factory=SandboxOptions)

    @field_validator(
        "external_modules",
        "builtin_modules",
        "excluded_modules",
        "override_dependencies",
        "require",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        return _as_list(value)

    @property
    def all_external_modules(self) -> list[str]:
        """Configured external modules plus built-ins, without repeats."""
        seen: dict[str, None] = {}
        for name in [*self.external_modules, *self.builtin_modules]:
            seen.setdefault(name, None)
        return list(seen)


class BuildTarget(BaseModel):
    """One independent build: a file set, an output, and option overrides."""

    name: str = ""
    src: list[str] = Field(default_factory=list)
    dest: str = ""
    force_include: list[str] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("src", "force_include", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        return _as_list(value)


class BuilderConfig(BaseModel):
    """Root of ngbuilder.yml."""

    options: BuildOptions = Field(default_factory=BuildOptions)
    targets: dict[str, BuildTarget] = Field(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        for name, target in self.targets.items():
            if not target.name:
                target.name = name

    def get_target(self, name: str) -> BuildTarget | None:
        return self.targets.get(name)

    def effective_options(self, target: BuildTarget) -> BuildOptions:
        """Shared options with the target's overrides applied on top."""
        if not target.options:
            return self.options.model_copy(deep=True)
        merged = self.options.model_dump()
        merged.update(target.options)
        return BuildOptions.model_validate(merged)


def quoted_list(names: list[str]) -> str:
    """Render names as a single-quoted array literal: ``['a', 'b']``."""
    if not names:
        return "[]"
    return "['" + "', '".join(names) + "']"
