"""
Build pipeline — one target, start to finish.

Flow:
    check → ingest sources → on_analyze → resolve order
          → on_visit_module + emit (per module) → on_emit → artifact

All state lives in a ``BuildContext`` created here and dropped when the
run ends; running the same pipeline twice gives the same output.
"""

from __future__ import annotations

import logging
from typing import Callable

from ngbuilder.adapters.files import path_matches
from ngbuilder.adapters.sandbox.base import ScriptSandbox
from ngbuilder.adapters.sandbox.node import NodeSandbox
from ngbuilder.core.engine.context import BuildContext
from ngbuilder.core.engine.emitter import BuildOutput, BundleEmitter, Emitter, ReferenceListEmitter
from ngbuilder.core.engine.resolver import resolve_order
from ngbuilder.core.errors import BuildConfigError
from ngbuilder.core.extensions.base import Extension, default_extensions
from ngbuilder.core.models.module import SourceFile, StandaloneFile
from ngbuilder.core.models.options import BuildOptions, BuildTarget
from ngbuilder.core.services.header_extract import extract_module_headers
from ngbuilder.core.services.registry import ModuleRegistry
from ngbuilder.core.services.sandbox_validator import SandboxValidator

logger = logging.getLogger(__name__)


class BuildPipeline:
    """Builds one target from already-read source files."""

    def __init__(
        self,
        target: BuildTarget,
        options: BuildOptions,
        sources: list[SourceFile],
        *,
        missing_sources: list[str] | None = None,
        read_file: Callable[[str], str] | None = None,
        sandbox: ScriptSandbox | None = None,
        extensions: list[Extension] | None = None,
    ):
        self.target = target
        self.options = options
        self.sources = sources
        self.missing_sources = missing_sources or []
        self.read_file = read_file
        self.sandbox = sandbox
        self.extensions = default_extensions() if extensions is None else extensions
        self.context: BuildContext | None = None

    # ── Stages ──────────────────────────────────────────────────

    def check(self) -> None:
        """Raise BuildConfigError for settings that make a build impossible."""
        if not self.options.main_module:
            raise BuildConfigError("No main module is defined.")
        if not self.sources and not self.missing_sources:
            raise BuildConfigError(
                f"No source files were defined for target '{self.target.name}'."
            )

    def analyze(self) -> BuildContext:
        """Read every source into a fresh registry and run ``on_analyze`` hooks."""
        ctx = BuildContext(
            target=self.target,
            options=self.options,
            registry=ModuleRegistry(self.options.all_external_modules),
            read_file=self.read_file,
        )
        self.context = ctx

        for path in self.options.require:
            ctx.standalone_scripts.append(self._read_standalone(ctx, path))

        for path in self.missing_sources:
            ctx.warn(f"Source file '{path}' not found.", path=path)

        for source in self.sources:
            self._ingest(ctx, source)

        for ext in self.extensions:
            ext.on_analyze(ctx)
        return ctx

    def _read_standalone(self, ctx: BuildContext, path: str) -> StandaloneFile:
        if ctx.read_file is None:
            raise BuildConfigError(f"Cannot read required script '{path}'.", path=path)
        try:
            return StandaloneFile(path=path, content=ctx.read_file(path))
        except OSError as e:
            raise BuildConfigError(f"Required script '{path}' could not be read: {e}", path=path) from e

    def _ingest(self, ctx: BuildContext, source: SourceFile) -> None:
        extraction = extract_module_headers(source.content, self.options.syntax)
        for warning in extraction.warnings:
            ctx.warn(warning, path=source.path)

        if not extraction.headers:
            if path_matches(source.path, self.target.force_include):
                ctx.standalone_scripts.append(
                    StandaloneFile(path=source.path, content=source.content)
                )
                logger.debug("Standalone script: %s", source.path)
            else:
                ctx.info("Ignored file: no module declaration found.", path=source.path)
            return

        for header in extraction.headers:
            if header.is_declaration:
                ctx.registry.ingest_declaration(
                    header.name,
                    source.content,
                    source.path,
                    header.dependencies,
                    header.config_trailer,
                )
            else:
                ctx.registry.ingest_append(header.name, source.content, source.path)

    def _emitter(self, ctx: BuildContext) -> Emitter:
        if ctx.debug_build:
            return ReferenceListEmitter(ctx)
        validator = None
        if self.options.validate_unwrapped:
            sandbox = self.sandbox or NodeSandbox(self.options.sandbox.node_binary)
            validator = SandboxValidator(sandbox, self.options.syntax, self.options.sandbox)
        return BundleEmitter(ctx, validator)

    # ── Entry point ─────────────────────────────────────────────

    def run(self) -> BuildOutput:
        """Build the target and return its artifact.

        Raises:
            BuildError: Any fatal condition, or a warning while ``force`` is off.
        """
        self.check()
        ctx = self.analyze()

        order = resolve_order(
            ctx.registry, self.options.main_module, self.options.excluded_modules
        )
        logger.debug("Resolved order: %s", ", ".join(m.name for m in order))

        emitter = self._emitter(ctx)
        for module in order:
            for ext in self.extensions:
                ext.on_visit_module(ctx, module)
            emitter.visit(module)

        for ext in self.extensions:
            ext.on_emit(ctx, emitter)
        return emitter.finish()
