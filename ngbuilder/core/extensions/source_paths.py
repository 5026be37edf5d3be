"""Source paths exporter — the scripts of a build, in load order."""

from __future__ import annotations

from ngbuilder.core.extensions.base import Extension


class SourcePathsExporter(Extension):

    name = "source_paths"

    def __init__(self, export_key: str = "required_scripts"):
        self.export_key = export_key
        self._paths: list[str] = []

    def on_analyze(self, ctx) -> None:
        self._paths = []

    def on_visit_module(self, ctx, module) -> None:
        for path in module.file_paths:
            if path not in self._paths:
                self._paths.append(path)

    def on_emit(self, ctx, emitter) -> None:
        standalone = [s.path for s in ctx.standalone_scripts]
        ctx.exports[self.export_key] = standalone + [p for p in self._paths if p not in standalone]
