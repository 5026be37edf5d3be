"""
Override dependencies — synthesize the main module's declaration.

With ``override_dependencies`` set, the main module's dependency list
comes from configuration instead of source code. Any declaring file of
the main module is discarded; files appending to it must then be listed
as dependencies' files or omitted.
"""

from __future__ import annotations

import logging

from ngbuilder.core.extensions.base import Extension

logger = logging.getLogger(__name__)


class OverrideDependencies(Extension):

    name = "override_dependencies"

    def on_analyze(self, ctx) -> None:
        deps = ctx.options.override_dependencies
        if not deps:
            return
        main = ctx.options.main_module
        existing = ctx.registry.get(main)
        if existing is not None and existing.declaring_path:
            logger.warning(
                "Main module %s is declared in %s; that declaration is replaced",
                main,
                existing.declaring_path,
            )
        ctx.registry.override_declaration(main, deps)
        logger.info("Main module %s requires: %s", main, ", ".join(deps))

    def on_emit(self, ctx, emitter) -> None:
        deps = ctx.options.override_dependencies
        if not deps or not ctx.debug_build:
            return
        declaration = ctx.options.syntax.expression(ctx.options.main_module, deps)
        ctx.append_output += f"<script>{declaration};</script>"
