"""
Emitters — turn the resolved module sequence into a build artifact.

    BundleEmitter         release build: one script, each module's files
                          unwrapped and re-wrapped in a single closure
    ReferenceListEmitter  debug build: a loader script listing the
                          original files in load order

Both share the build context's emitted-file set, so a file that belongs
to several modules is only output with the first one visited.
"""

from __future__ import annotations

import logging
import re
import textwrap
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal

from ngbuilder.core.engine.context import BuildContext
from ngbuilder.core.models.module import ModuleRecord, SourceFile
from ngbuilder.core.models.validation import ValidationReport
from ngbuilder.core.services import js_scan
from ngbuilder.core.services.closure import wrap_closure
from ngbuilder.core.services.sandbox_validator import SandboxValidator
from ngbuilder.core.services.source_trans import (
    TransformStatus,
    rename_module_ref_exps,
    rename_module_variable_refs,
    transform_source,
)

logger = logging.getLogger(__name__)

LINE = "//" + "-" * 116
LINE2 = "//" + "=" * 116


@dataclass
class BuildOutput:
    """The artifact of one target plus the file order it was built from."""

    mode: Literal["release", "debug"]
    content: str = ""
    files: list[str] = field(default_factory=list)     # standalone first, then module files
    modules: list[str] = field(default_factory=list)   # emitted modules, in order

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "files": self.files,
            "modules": self.modules,
            "size": len(self.content),
        }


class Emitter(ABC):
    """Accumulates output module by module, in resolved order."""

    mode: Literal["release", "debug"]

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx
        self.files: list[str] = []
        self.modules: list[str] = []

    def _claim(self, path: str | None) -> bool:
        """Mark ``path`` as emitted; False if it already was."""
        if self.ctx.has_emitted(path):
            return False
        self.ctx.mark_emitted(path)
        if path:
            self.files.append(path)
        return True

    @abstractmethod
    def visit(self, module: ModuleRecord) -> None:
        """Add one module's contribution to the output."""

    @abstractmethod
    def finish(self) -> BuildOutput:
        """Assemble the artifact."""


# ── Release build ───────────────────────────────────────────────────


class BundleEmitter(Emitter):
    """Concatenates modules, each enclosed in one closure."""

    mode = "release"

    def __init__(self, ctx: BuildContext, validator: SandboxValidator | None = None):
        super().__init__(ctx)
        self._validator = validator
        self._blocks: list[str] = []

    def visit(self, module: ModuleRecord) -> None:
        opts = self.ctx.options

        if not module.is_declared:
            self.ctx.warn(f"Module '{module.name}' has no declaration.", module=module.name)

        head: SourceFile | None = None
        if module.is_declared and not self.ctx.has_emitted(module.declaring_path):
            head = SourceFile(path=module.declaring_path or "", content=module.declaring_source or "")
            self._claim(module.declaring_path)

        bodies: list[SourceFile] = []
        for path, content in zip(module.appended_paths, module.appended_sources):
            if self._claim(path):
                bodies.append(SourceFile(path=path, content=content))

        if head is None and not bodies:
            logger.debug("Module %s: all files already emitted", module.name)
            return

        logger.info("Including module %s", module.name)
        self.modules.append(module.name)
        parts: list[str] = []
        if opts.output_module_names:
            parts += [LINE2, f"// Module: {module.name}", LINE2, ""]

        head_text = self._transform(head, module) if head is not None else None

        if head_text is not None and not bodies and js_scan.is_blank(head_text):
            # Nothing to enclose: a bare declaration is enough.
            comments = textwrap.dedent(head_text).strip()
            if comments:
                parts.append(comments)
            parts.append(self._declaration(module) + ";" + opts.module_footer)
            self._blocks.append("\n".join(parts))
            return

        inner: list[str] = []
        if head_text is not None:
            inner.append(head_text)
        for body in bodies:
            if opts.output_file_names:
                inner += ["", LINE, f"// File: {body.path}", LINE, ""]
            inner.append(self._transform(body, module))
        closure = wrap_closure(
            "\n\n" + "\n".join(inner) + "\n\n", opts.module_var, self._declaration(module)
        )
        parts.append(closure + opts.module_footer)
        self._blocks.append("\n".join(parts))

    def finish(self) -> BuildOutput:
        ctx = self.ctx
        chunks: list[str] = []
        if ctx.prepend_output:
            chunks.append(ctx.prepend_output)
        for script in ctx.standalone_scripts:
            if self.ctx.options.output_file_names:
                chunks += [LINE, f"// File: {script.path}", LINE]
            chunks.append(script.content)
        chunks.extend(self._blocks)
        if ctx.append_output:
            chunks.append(ctx.append_output)
        return BuildOutput(
            mode="release",
            content="\n".join(chunks),
            files=[s.path for s in ctx.standalone_scripts] + self.files,
            modules=list(self.modules),
        )

    # ── Per-block transformation ────────────────────────────────

    def _declaration(self, module: ModuleRecord) -> str:
        syntax = self.ctx.options.syntax
        if not module.is_declared:
            return syntax.expression(module.name)
        return syntax.expression(module.name, module.dependencies, module.config_trailer)

    def _transform(self, file: SourceFile, module: ModuleRecord) -> str:
        """Closure-body text for one file of ``module``, already indented."""
        opts = self.ctx.options
        result = transform_source(
            file.content, module.name, opts.module_var, opts.syntax, opts.indent
        )

        if result.status is TransformStatus.WRAPPED:
            return rename_module_ref_exps(result.text, module.name, opts.module_var, opts.syntax)

        if result.status is TransformStatus.NEEDS_RENAME:
            param = result.closure.param_name
            if not opts.rename_module_refs:
                self.ctx.warn(
                    f"The module variable reference '{param}' doesn't match the configured "
                    f"name module_var='{opts.module_var}'. Either rename the variable or "
                    "enable rename_module_refs.",
                    path=file.path,
                    module=module.name,
                )
            text = rename_module_variable_refs(result.text, param, opts.module_var)
            return rename_module_ref_exps(text, module.name, opts.module_var, opts.syntax)

        if result.status is TransformStatus.MALFORMED_DECLARATION:
            self.ctx.warn(
                f"Wrong module declaration: '{result.closure.declared_name}' "
                f"in a file of module '{module.name}'.",
                path=file.path,
                module=module.name,
            )
            return js_scan.indent(file.content, 1, opts.indent).strip("\n")

        # Unwrapped code
        if not js_scan.is_blank(result.clean):
            self._validate(result.clean, file.path, module)
        text = rename_module_ref_exps(file.content, module.name, opts.module_var, opts.syntax)
        return js_scan.indent(text, 1, opts.indent).strip("\n")

    def _validate(self, source: str, path: str, module: ModuleRecord) -> None:
        if self._validator is None or not self.ctx.options.validate_unwrapped:
            return
        logger.info("Validating %s...", path or module.name)
        report = self._validator.validate(source, filename=path or None)
        if report.ok:
            return
        self.ctx.warn(global_code_message(report), path=path or None, module=module.name)


def global_code_message(report: ValidationReport) -> str:
    """Explain a failed validation report to the user."""
    if report.status == "timed_out":
        return (
            "Validation of unwrapped code timed out; the code may loop forever "
            "when loaded. Wrap it in a self-invoking function."
        )
    if report.status == "error":
        return f"Unwrapped code could not be validated: {report.error}"
    lines = [
        "Incompatible code found on the global scope!",
        "This kind of code will behave differently between release and debug builds.",
        "You should wrap it in a self-invoking function and/or assign global "
        "variables/functions directly to the window object.",
        "Detected globals:",
    ]
    for leak in report.leaks:
        lines.append(f"  {leak.kind:<8} {leak.name}")
    return "\n".join(lines)


# ── Debug build ─────────────────────────────────────────────────────


class ReferenceListEmitter(Emitter):
    """Lists the original files so they can be loaded one by one."""

    mode = "debug"

    def visit(self, module: ModuleRecord) -> None:
        claimed = [path for path in module.file_paths if self._claim(path)]
        if claimed:
            logger.info("Including module %s", module.name)
            self.modules.append(module.name)

    def finish(self) -> BuildOutput:
        ctx = self.ctx
        files = [s.path for s in ctx.standalone_scripts] + self.files
        tags: list[str] = []
        if ctx.prepend_output:
            tags.append(_escape(ctx.prepend_output))
        for path in files:
            url = rebase_url(path, ctx.options.rebase_debug_urls)
            if url:
                tags.append(f'<script src="{_escape(url)}"></script>')
        if ctx.append_output:
            tags.append(_escape(ctx.append_output))
        return BuildOutput(
            mode="debug",
            content=loader_script(tags),
            files=files,
            modules=list(self.modules),
        )


def rebase_url(path: str, rules) -> str:
    """Apply each regex rebase rule in turn; OS separators become ``/``."""
    url = path.replace("\\", "/")
    for rule in rules:
        url = re.sub(rule.match, rule.replace_with, url)
    return url


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")


def loader_script(tags: list[str]) -> str:
    """A ``document.write`` statement emitting ``tags``, one per continued line."""
    return "\\\n".join(["document.write ('", *tags, "');"])
