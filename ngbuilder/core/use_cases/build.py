"""
Build use case — build one, several, or all targets of ngbuilder.yml.

Targets are independent: each gets a fresh registry and context, and a
fatal error in one does not stop the others. Artifacts go through one
``OutputWriter`` per run, so two targets sharing a destination append.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from ngbuilder.adapters.files import OutputWriter, discover_sources, read_source
from ngbuilder.adapters.sandbox.base import ScriptSandbox
from ngbuilder.core.config.loader import ConfigError, find_config_file, load_config, project_root
from ngbuilder.core.engine.context import Diagnostic
from ngbuilder.core.engine.emitter import BuildOutput
from ngbuilder.core.engine.pipeline import BuildPipeline
from ngbuilder.core.errors import BuildConfigError, BuildError
from ngbuilder.core.models.module import SourceFile
from ngbuilder.core.models.options import BuilderConfig, BuildOptions, BuildTarget

logger = logging.getLogger(__name__)


@dataclass
class TargetResult:
    """Outcome of building one target."""

    name: str
    mode: str = "release"
    dest: str = ""
    output: BuildOutput | None = None
    exports: dict[str, list[str]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    registry: list[dict] = field(default_factory=list)
    error: BuildError | None = None
    bytes_written: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {
            "name": self.name,
            "ok": self.ok,
            "mode": self.mode,
            "dest": self.dest,
            "bytes_written": self.bytes_written,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
        if self.output:
            result["modules"] = self.output.modules
            result["files"] = self.output.files
        if self.exports:
            result["exports"] = self.exports
        if self.registry:
            result["registry"] = self.registry
        if self.error:
            result["error"] = self.error.to_dict()
        return result


@dataclass
class BuildResult:
    """Result of a build run over one or more targets."""

    config_path: Path | None = None
    targets: list[TargetResult] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and all(t.ok for t in self.targets)

    @property
    def failed(self) -> list[TargetResult]:
        return [t for t in self.targets if not t.ok]

    def to_dict(self) -> dict:
        if self.error:
            return {"ok": False, "error": self.error}
        return {
            "ok": self.ok,
            "config_path": str(self.config_path) if self.config_path else None,
            "targets": [t.to_dict() for t in self.targets],
        }


def _registry_summary(pipeline: BuildPipeline) -> list[dict]:
    ctx = pipeline.context
    if ctx is None:
        return []
    return [
        {
            "name": record.name,
            "external": record.is_external,
            "declared_in": record.declaring_path,
            "appended_in": list(record.appended_paths),
            "dependencies": list(record.dependencies),
        }
        for record in ctx.registry
    ]


def target_options(
    config: BuilderConfig,
    target: BuildTarget,
    debug: bool | None = None,
    force: bool | None = None,
    validate: bool | None = None,
) -> BuildOptions:
    """Effective options for ``target`` with command-line overrides applied."""
    options = config.effective_options(target)
    overrides: dict = {}
    if debug is not None:
        overrides["debug"] = debug
    if force is not None:
        overrides["force"] = force
    if validate is not None:
        overrides["validate_unwrapped"] = validate
    return options.model_copy(update=overrides) if overrides else options


def build_target(
    config: BuilderConfig,
    target: BuildTarget,
    root: Path,
    *,
    writer: OutputWriter | None = None,
    sandbox: ScriptSandbox | None = None,
    debug: bool | None = None,
    force: bool | None = None,
    validate: bool | None = None,
) -> TargetResult:
    """Build one target; fatal problems are returned, not raised.

    Args:
        writer: Where to write the artifact. None means analyze only.
    """
    result = TargetResult(name=target.name, dest=target.dest)
    pipeline: BuildPipeline | None = None
    try:
        options = target_options(config, target, debug, force, validate)
        result.mode = "debug" if options.debug else "release"

        if not target.src:
            raise BuildConfigError(f"No source files were defined for target '{target.name}'.")
        if not target.dest:
            raise BuildConfigError(f"No target script is defined for target '{target.name}'.")

        found, missing = discover_sources(root, target.src)
        logger.info("Target %s: %d source file(s)", target.name, len(found))
        sources = [SourceFile(path=p, content=read_source(root / p)) for p in found]

        pipeline = BuildPipeline(
            target,
            options,
            sources,
            missing_sources=missing,
            read_file=lambda p: read_source(root / p),
            sandbox=sandbox,
        )
        output = pipeline.run()
        result.output = output
        result.exports = dict(pipeline.context.exports)

        if writer is not None:
            result.bytes_written = writer.write(root / target.dest, output.content)
    except BuildError as e:
        logger.info("Target %s failed: %s", target.name, e)
        result.error = e
    except OSError as e:
        logger.info("Target %s failed: %s", target.name, e)
        result.error = BuildError(f"File access failed: {e}", path=getattr(e, "filename", None))
    except ValidationError as e:
        result.error = BuildConfigError(f"Invalid options for target '{target.name}': {e}")

    if pipeline is not None and pipeline.context is not None:
        result.diagnostics = list(pipeline.context.diagnostics)
        result.registry = _registry_summary(pipeline)
    return result


def run_build(
    config_path: Path | None = None,
    targets: list[str] | None = None,
    *,
    debug: bool | None = None,
    force: bool | None = None,
    validate: bool | None = None,
    write: bool = True,
    sandbox: ScriptSandbox | None = None,
) -> BuildResult:
    """Build the selected targets (all targets when none are named).

    Args:
        config_path: Optional explicit path to ngbuilder.yml.
        targets: Target names, in build order.
        debug / force / validate: Override the configured options.
        write: Write artifacts; False analyzes only.
        sandbox: Script sandbox to validate with (default: Node.js).
    """
    result = BuildResult()
    try:
        if config_path is None:
            config_path = find_config_file()
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    assert config_path is not None  # load_config raised otherwise
    result.config_path = config_path
    root = project_root(config_path)

    names = targets or list(config.targets)
    unknown = [n for n in names if n not in config.targets]
    if unknown:
        result.error = f"Unknown target(s): {', '.join(unknown)}"
        return result
    if not names:
        result.error = "No targets defined."
        return result

    writer = OutputWriter() if write else None
    for name in names:
        logger.info("Building target %s", name)
        result.targets.append(
            build_target(
                config,
                config.get_target(name),
                root,
                writer=writer,
                sandbox=sandbox,
                debug=debug,
                force=force,
                validate=validate,
            )
        )
    return result
