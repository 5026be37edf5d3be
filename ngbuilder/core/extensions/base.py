"""
Extension base — hooks around the build pipeline.

Extensions run in list order at three fixed points:

    on_analyze(ctx)               after every source file was ingested
    on_visit_module(ctx, module)  for each module, in resolved order,
                                  before the emitter sees it
    on_emit(ctx, emitter)         after traversal, before the artifact
                                  is assembled

They communicate with the rest of the build only through the context
(standalone scripts, prepend/append output, exports).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ngbuilder.core.models.module import ModuleRecord

if TYPE_CHECKING:
    from ngbuilder.core.engine.context import BuildContext
    from ngbuilder.core.engine.emitter import Emitter


class Extension:
    """A pipeline stage with no-op hooks; override what you need."""

    name = "extension"

    def on_analyze(self, ctx: BuildContext) -> None:
        pass

    def on_visit_module(self, ctx: BuildContext, module: ModuleRecord) -> None:
        pass

    def on_emit(self, ctx: BuildContext, emitter: Emitter) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


def default_extensions() -> list[Extension]:
    """The built-in stages, in the order they must run."""
    from ngbuilder.core.extensions.override_dependencies import OverrideDependencies
    from ngbuilder.core.extensions.references import ReferenceExporter
    from ngbuilder.core.extensions.required_scripts import RequiredScripts
    from ngbuilder.core.extensions.source_paths import SourcePathsExporter

    return [
        OverrideDependencies(),
        RequiredScripts(),
        ReferenceExporter(),
        SourcePathsExporter(),
    ]
